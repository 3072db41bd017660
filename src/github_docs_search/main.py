import asyncio
import sys
from typing import Literal

import asyncclick as click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.tools import FunctionTool
from fastmcp.utilities.logging import get_logger

from github_docs_search.clients.host.terminal import BrowserUrlOpener, ConsoleNotifier, PyperclipClipboard, StdinSelectionReader
from github_docs_search.clients.search.github_docs import GitHubDocsClient
from github_docs_search.models.search import DEFAULT_VERSION
from github_docs_search.presentation.clipboard import ClipboardPresenter
from github_docs_search.presentation.detail import SLOW_REQUEST_DELAY, FormPresenter
from github_docs_search.servers.search import DocsSearchServer

logger = get_logger(__name__)

DOCS_VERSION_HELP = f"The GitHub Docs version to search. Defaults to {DEFAULT_VERSION}."
CLIENT_HELP = "An optional client identifier sent along with the query."
TIMEOUT_HELP = "Give up on the request after this many seconds. By default, or with 0, the request is never cancelled."
OPEN_SOURCE_HELP = "Open the first source in a browser after copying the answer."
SLOW_AFTER_HELP = "Seconds to wait before warning that the request is taking longer than expected."
MCP_TRANSPORT_HELP = "The transport to use for the MCP server. Defaults to stdio."
LOGGING_LEVEL_HELP = "The level of the diagnostic log written to standard error. Defaults to WARNING."


def search_options(func):
    func = click.option("--docs-version", type=str, envvar="GITHUB_DOCS_VERSION", default=None, help=DOCS_VERSION_HELP)(func)
    func = click.option("--client", type=str, envvar="GITHUB_DOCS_CLIENT", default=None, help=CLIENT_HELP)(func)
    return click.option("--timeout", type=float, envvar="GITHUB_DOCS_TIMEOUT", default=None, help=TIMEOUT_HELP)(func)


def build_server(docs_version: str | None, client: str | None, timeout: float | None) -> DocsSearchServer:
    return DocsSearchServer(search_client=GitHubDocsClient(version=docs_version, client=client, timeout=timeout))


@click.group()
@click.option(
    "--logging-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    envvar="GITHUB_DOCS_LOG_LEVEL",
    default="WARNING",
    help=LOGGING_LEVEL_HELP,
)
def cli(logging_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]):
    get_logger("github_docs_search").setLevel(logging_level)


@cli.command("copy")
@search_options
@click.option("--open-source", is_flag=True, default=False, help=OPEN_SOURCE_HELP)
async def copy_command(docs_version: str | None, client: str | None, timeout: float | None, open_source: bool):
    """Search GitHub docs for the piped-in text (or the clipboard) and copy the answer to the clipboard."""

    presenter = ClipboardPresenter(
        server=build_server(docs_version, client, timeout),
        selection_reader=StdinSelectionReader(),
        clipboard=PyperclipClipboard(),
        notifier=ConsoleNotifier(),
        url_opener=BrowserUrlOpener(),
    )

    if not await presenter.run(open_source=open_source):
        sys.exit(1)


@cli.command("ask")
@click.argument("query", required=False)
@search_options
@click.option("--slow-after", type=float, default=SLOW_REQUEST_DELAY, help=SLOW_AFTER_HELP)
async def ask_command(query: str | None, docs_version: str | None, client: str | None, timeout: float | None, slow_after: float):
    """Ask GitHub docs a question and read the answer in the terminal."""

    presenter = FormPresenter(
        server=build_server(docs_version, client, timeout),
        clipboard=PyperclipClipboard(),
        notifier=ConsoleNotifier(),
        url_opener=BrowserUrlOpener(),
        slow_after=slow_after,
    )

    await presenter.run(initial_query=query)


@cli.command("serve")
@search_options
@click.option("--mcp-transport", type=click.Choice(["stdio", "streamable-http"]), default="stdio", help=MCP_TRANSPORT_HELP)
async def serve_command(
    docs_version: str | None, client: str | None, timeout: float | None, mcp_transport: Literal["stdio", "streamable-http"]
):
    """Serve the GitHub docs search as an MCP tool."""

    server = build_server(docs_version, client, timeout)

    mcp = FastMCP[None](name="GitHub Docs Search MCP")
    mcp.add_tool(tool=FunctionTool.from_function(fn=server.search, name="search_github_docs"))
    mcp.add_middleware(middleware=LoggingMiddleware())

    logger.info(f"Starting MCP server on {mcp_transport}")

    await mcp.run_async(transport=mcp_transport)


def run():
    asyncio.run(cli())


if __name__ == "__main__":
    run()
