import asyncio
import sys
import webbrowser
from typing import TextIO, override

import pyperclip
from rich.console import Console
from rich.markup import escape

from github_docs_search.clients.host.base import (
    BaseClipboard,
    BaseNotifier,
    BaseSelectionReader,
    BaseUrlOpener,
    NotificationAction,
    NotificationStyle,
)


class NoSelectionError(Exception):
    pass


class StdinSelectionReader(BaseSelectionReader):
    """Treats text piped into the command as the current selection."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream or sys.stdin

    @override
    async def read_selection(self) -> str:
        if self.stream.isatty():
            msg = "Nothing was piped to standard input"
            raise NoSelectionError(msg)

        return await asyncio.to_thread(self.stream.read)


class PyperclipClipboard(BaseClipboard):
    @override
    async def read_text(self) -> str:
        return await asyncio.to_thread(pyperclip.paste)

    @override
    async def copy(self, text: str) -> None:
        await asyncio.to_thread(pyperclip.copy, text)


NOTIFICATION_MARKERS: dict[NotificationStyle, str] = {
    NotificationStyle.ANIMATED: "[bold blue]…[/bold blue]",
    NotificationStyle.SUCCESS: "[bold green]✔[/bold green]",
    NotificationStyle.FAILURE: "[bold red]✘[/bold red]",
}


class ConsoleNotifier(BaseNotifier):
    """Renders notifications as single lines on standard error."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    @override
    async def show(
        self, style: NotificationStyle, title: str, message: str | None = None, action: NotificationAction | None = None
    ) -> None:
        line = f"{NOTIFICATION_MARKERS[style]} [bold]{escape(title)}[/bold]"

        if message:
            line += f" {escape(message)}"

        if action:
            line += f"  [link={action.url}]{escape(action.title)}[/link]"

        self.console.print(line)


class BrowserUrlOpener(BaseUrlOpener):
    @override
    async def open(self, url: str) -> None:
        await asyncio.to_thread(webbrowser.open, url)
