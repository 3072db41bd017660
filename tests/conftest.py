import json
from typing import Any, override

import pytest

from github_docs_search.clients.host.base import (
    BaseClipboard,
    BaseNotifier,
    BaseSelectionReader,
    BaseUrlOpener,
    NotificationAction,
    NotificationStyle,
)
from github_docs_search.clients.search.base import BaseDocsSearchClient
from github_docs_search.models.search import SearchOutcome
from github_docs_search.servers.search import DocsSearchServer


def ndjson(*records: dict[str, Any]) -> str:
    return "\n".join(json.dumps(record) for record in records)


class FakeSelectionReader(BaseSelectionReader):
    def __init__(self, text: str | None = None, error: Exception | None = None):
        self.text = text
        self.error = error

    @override
    async def read_selection(self) -> str:
        if self.error:
            raise self.error
        return self.text or ""


class FakeClipboard(BaseClipboard):
    def __init__(self, text: str = "", read_error: Exception | None = None, copy_error: Exception | None = None):
        self.text = text
        self.read_error = read_error
        self.copy_error = copy_error
        self.copied: list[str] = []

    @override
    async def read_text(self) -> str:
        if self.read_error:
            raise self.read_error
        return self.text

    @override
    async def copy(self, text: str) -> None:
        if self.copy_error:
            raise self.copy_error
        self.copied.append(text)


class RecordingNotifier(BaseNotifier):
    def __init__(self):
        self.notifications: list[tuple[NotificationStyle, str, str | None, NotificationAction | None]] = []

    @override
    async def show(
        self, style: NotificationStyle, title: str, message: str | None = None, action: NotificationAction | None = None
    ) -> None:
        self.notifications.append((style, title, message, action))

    @property
    def titles(self) -> list[str]:
        return [title for _, title, _, _ in self.notifications]


class RecordingUrlOpener(BaseUrlOpener):
    def __init__(self):
        self.opened: list[str] = []

    @override
    async def open(self, url: str) -> None:
        self.opened.append(url)


class StaticSearchClient(BaseDocsSearchClient):
    def __init__(self, outcome: SearchOutcome | None = None, error: Exception | None = None):
        self.outcome = outcome or SearchOutcome()
        self.error = error
        self.queries: list[tuple[str, str | None]] = []

    @override
    async def search(self, query: str, version: str | None = None) -> SearchOutcome:
        self.queries.append((query, version))
        if self.error:
            raise self.error
        return self.outcome


@pytest.fixture
def copilot_outcome() -> SearchOutcome:
    return SearchOutcome(
        answer="Copilot is great.",
        sources=["https://docs.github.com/en/copilot/about-github-copilot", "https://docs.github.com/en/copilot/quickstart"],
    )


@pytest.fixture
def search_client(copilot_outcome: SearchOutcome) -> StaticSearchClient:
    return StaticSearchClient(outcome=copilot_outcome)


@pytest.fixture
def docs_search_server(search_client: StaticSearchClient) -> DocsSearchServer:
    return DocsSearchServer(search_client=search_client)


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def url_opener() -> RecordingUrlOpener:
    return RecordingUrlOpener()
