import asyncio
from collections.abc import Callable
from contextlib import nullcontext
from typing import TextIO
from urllib.parse import urlsplit

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.status import Status

from github_docs_search.clients.host.base import BaseClipboard, BaseNotifier, BaseUrlOpener, NotificationStyle
from github_docs_search.servers.search import DocsSearchServer

logger = get_logger(__name__)

LOADING_MESSAGE = "Searching GitHub docs..."
SLOW_REQUEST_MESSAGE = "Request is taking longer than expected. GitHub API might be under heavy load."
NO_RESULTS_MESSAGE = "No results found. Try a different query."
SLOW_REQUEST_DELAY = 10.0

KNOWN_EXTENSIONS = (".md", ".html", ".htm")


def source_title(url: str) -> str:
    """Derive a readable title from the last segment of a URL's path.

    `https://docs.github.com/en/actions/deploying-with-github-actions.md` becomes
    `Deploying With Github Actions`. Falls back to the URL itself.
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        return url

    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return url

    name = segments[-1]
    for extension in KNOWN_EXTENSIONS:
        if name.lower().endswith(extension):
            name = name[: -len(extension)]
            break

    words = name.replace("-", " ").replace("_", " ").split()

    return " ".join(word.capitalize() for word in words) or url


def display_sources(answer: str, sources: list[str]) -> list[str]:
    """The sources worth listing under an answer: no repeats, and none the answer already links to."""
    seen: set[str] = set()
    result: list[str] = []

    for url in sources:
        if url in seen or url in answer:
            continue
        seen.add(url)
        result.append(url)

    return result


class SearchResultsState(BaseModel):
    answer: str = ""
    sources: list[str] = Field(default_factory=list)
    is_loading: bool = True
    error: str | None = None
    advisory: str | None = None

    def to_markdown(self) -> str:
        markdown = "# Search Results\n\n"

        if self.is_loading:
            markdown += LOADING_MESSAGE
            if self.advisory:
                markdown += f"\n\n> {self.advisory}"
            return markdown

        if self.error:
            return markdown + f"## Error\n\n{self.error}"

        if not self.answer:
            return markdown + NO_RESULTS_MESSAGE

        markdown += f"## Answer\n\n{self.answer}\n\n"

        if sources := display_sources(self.answer, self.sources):
            markdown += "## Sources\n\n"
            markdown += "".join(f"- [{source_title(url)}]({url})\n" for url in sources)

        return markdown


class SearchResultsView:
    """Runs one search and tracks what the results document should show while it does."""

    def __init__(
        self,
        server: DocsSearchServer,
        query: str,
        version: str | None = None,
        slow_after: float = SLOW_REQUEST_DELAY,
        on_change: Callable[[SearchResultsState], None] | None = None,
    ):
        self.server = server
        self.query = query
        self.version = version
        self.slow_after = slow_after
        self.on_change = on_change
        self.state = SearchResultsState()

    def _update(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)
        if self.on_change:
            self.on_change(self.state)

    async def load(self) -> SearchResultsState:
        self._update()

        search = asyncio.create_task(self.server.search(self.query, version=self.version))

        # The advisory never cancels the request, it only tells the user we are still waiting.
        done, _ = await asyncio.wait({search}, timeout=self.slow_after)
        if not done:
            logger.warning(f"Search for {self.query!r} has been running for more than {self.slow_after:g} seconds")
            self._update(advisory=SLOW_REQUEST_MESSAGE)

        try:
            outcome = await search
        except Exception as e:  # noqa: BLE001
            logger.error(f"Search error in results view: {e}")
            self._update(is_loading=False, advisory=None, error=str(e))
            return self.state

        self._update(is_loading=False, advisory=None, answer=outcome.answer, sources=outcome.sources, error=outcome.error)

        return self.state


ACTION_PROMPT = "[bold]\\[c][/bold]opy answer, {open}[bold]\\[n][/bold]ew search, [bold]\\[q][/bold]uit: "
OPEN_ACTION = "[bold]\\[o][/bold]pen first source, "


class FormPresenter:
    """Asks for a query, shows the results document and offers follow-up actions until the user quits."""

    def __init__(
        self,
        server: DocsSearchServer,
        clipboard: BaseClipboard,
        notifier: BaseNotifier,
        url_opener: BaseUrlOpener,
        console: Console | None = None,
        input_stream: TextIO | None = None,
        slow_after: float = SLOW_REQUEST_DELAY,
    ):
        self.server = server
        self.clipboard = clipboard
        self.notifier = notifier
        self.url_opener = url_opener
        self.console = console or Console()
        self.input_stream = input_stream
        self.slow_after = slow_after

    def _read_line(self, prompt: str) -> str:
        line = self.console.input(prompt, stream=self.input_stream)
        if self.input_stream is not None and not line:
            raise EOFError
        return line.rstrip("\n")

    async def prompt_query(self, default: str | None = None) -> str:
        """Ask for a query. An empty entry accepts `default` when there is one."""
        hint = f"[cyan]\\[{escape(default)}][/cyan]" if default else "[dim](How do I configure OpenID Connect in GitHub?)[/dim]"

        while True:
            query = self._read_line(f"[bold]Search Query[/bold] {hint}: ")
            if query.strip():
                return query
            if default:
                return default
            await self.notifier.show(NotificationStyle.FAILURE, "Please enter a search query")

    async def show_results(self, query: str, version: str | None = None) -> SearchResultsState:
        status: Status | None = None

        def on_change(state: SearchResultsState) -> None:
            if not state.advisory:
                return
            if status is not None:
                status.update(f"{LOADING_MESSAGE} {state.advisory}")
            else:
                self.console.print(f"[yellow]{state.advisory}[/yellow]")

        view = SearchResultsView(self.server, query, version=version, slow_after=self.slow_after, on_change=on_change)

        with self.console.status(LOADING_MESSAGE) if self.console.is_terminal else nullcontext() as status:
            state = await view.load()

        self.console.print(Markdown(state.to_markdown()))

        return state

    async def prompt_action(self, state: SearchResultsState) -> str:
        choices = ["c", "n", "q"]
        if state.sources:
            choices.insert(1, "o")

        prompt = ACTION_PROMPT.format(open=OPEN_ACTION if state.sources else "")

        while True:
            choice = self._read_line(prompt).strip().lower() or "q"
            if choice in choices:
                return choice
            self.console.print(f"[red]Please choose one of {', '.join(choices)}[/red]")

    async def copy_answer(self, state: SearchResultsState) -> None:
        try:
            await self.clipboard.copy(state.answer)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Error writing clipboard: {e}")
            await self.notifier.show(NotificationStyle.FAILURE, "Could not copy answer", str(e))
            return

        await self.notifier.show(NotificationStyle.SUCCESS, "Copied answer to clipboard")

    async def run(self, initial_query: str | None = None, version: str | None = None) -> None:
        default = initial_query if initial_query and initial_query.strip() else None

        try:
            while True:
                query = await self.prompt_query(default)
                default = None

                state = await self.show_results(query, version=version)

                while (choice := await self.prompt_action(state)) not in ("n", "q"):
                    if choice == "c":
                        await self.copy_answer(state)
                    elif choice == "o":
                        await self.url_opener.open(state.sources[0])

                if choice == "q":
                    return
        except EOFError:
            return
