from fastmcp.utilities.logging import get_logger

from github_docs_search.acquisition import acquire_query
from github_docs_search.clients.host.base import (
    BaseClipboard,
    BaseNotifier,
    BaseSelectionReader,
    BaseUrlOpener,
    NotificationAction,
    NotificationStyle,
)
from github_docs_search.errors import QueryAcquisitionError
from github_docs_search.models.search import SearchOutcome
from github_docs_search.servers.search import DocsSearchServer

logger = get_logger(__name__)


def format_clipboard_text(outcome: SearchOutcome) -> str:
    """Join the answer and a plain-text list of its sources."""
    if not outcome.sources:
        return outcome.answer

    sources = "Sources:\n" + "\n".join(f"- {url}" for url in outcome.sources)

    return f"{outcome.answer}\n\n{sources}" if outcome.answer else sources


class ClipboardPresenter:
    """Searches for the selected or copied text and puts the answer on the clipboard."""

    def __init__(
        self,
        server: DocsSearchServer,
        selection_reader: BaseSelectionReader,
        clipboard: BaseClipboard,
        notifier: BaseNotifier,
        url_opener: BaseUrlOpener,
    ):
        self.server = server
        self.selection_reader = selection_reader
        self.clipboard = clipboard
        self.notifier = notifier
        self.url_opener = url_opener

    async def run(self, version: str | None = None, open_source: bool = False) -> bool:
        """Returns whether the answer made it onto the clipboard."""

        try:
            query = await acquire_query(self.selection_reader, self.clipboard, self.notifier)
        except QueryAcquisitionError as e:
            await self.notifier.show(NotificationStyle.FAILURE, e.title, e.msg)
            return False

        await self.notifier.show(NotificationStyle.ANIMATED, "Searching GitHub docs", f"Query: {query}")

        try:
            outcome = await self.server.search(query, version=version)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Search error: {e}")
            await self.notifier.show(NotificationStyle.FAILURE, "Search failed", str(e))
            return False

        if not outcome.ok:
            await self.notifier.show(NotificationStyle.FAILURE, "Search failed", outcome.error)
            return False

        try:
            await self.clipboard.copy(format_clipboard_text(outcome))
        except Exception as e:  # noqa: BLE001
            logger.error(f"Error writing clipboard: {e}")
            await self.notifier.show(NotificationStyle.FAILURE, "Search failed", str(e))
            return False

        first_source = outcome.sources[0] if outcome.sources else None

        await self.notifier.show(
            NotificationStyle.SUCCESS,
            "Answer copied to clipboard",
            "Use Ctrl+V to paste",
            action=NotificationAction(title="View Sources", url=first_source) if first_source else None,
        )

        if open_source and first_source:
            logger.info(f"Opening {first_source}")
            await self.url_opener.open(first_source)

        return True
