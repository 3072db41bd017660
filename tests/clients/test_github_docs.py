import pytest
from aiohttp import ClientConnectionError, ClientTimeout
from aioresponses import aioresponses
from conftest import ndjson
from yarl import URL

from github_docs_search.clients.search.github_docs import SEARCH_HEADERS, SEARCH_URL, GitHubDocsClient
from github_docs_search.errors import (
    DocsSearchAPIError,
    DocsSearchConnectionError,
    DocsSearchHTTPError,
    DocsSearchTimeoutError,
    DocsSearchUnavailableError,
)
from github_docs_search.models.search import DEFAULT_VERSION, SearchOutcome


@pytest.fixture
def github_docs_client(monkeypatch: pytest.MonkeyPatch) -> GitHubDocsClient:
    monkeypatch.delenv("GITHUB_DOCS_VERSION", raising=False)
    monkeypatch.delenv("GITHUB_DOCS_CLIENT", raising=False)
    return GitHubDocsClient()


@pytest.fixture
def copilot_body() -> str:
    return ndjson(
        {"chunkType": "MESSAGE_CHUNK", "text": "Copilot "},
        {"chunkType": "MESSAGE_CHUNK", "text": "is great."},
        {"chunkType": "SOURCES", "sources": [{"url": "https://docs.github.com/a"}]},
    )


def test_defaults(github_docs_client: GitHubDocsClient):
    assert github_docs_client.version == DEFAULT_VERSION
    assert github_docs_client.client is None
    assert github_docs_client.timeout is None
    assert GitHubDocsClient(timeout=0).timeout is None


def test_version_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GITHUB_DOCS_VERSION", "enterprise-cloud@latest")

    assert GitHubDocsClient().version == "enterprise-cloud@latest"
    assert GitHubDocsClient(version="free-pro-team@latest").version == "free-pro-team@latest"


def test_build_payload(github_docs_client: GitHubDocsClient):
    assert github_docs_client.build_payload("What is Copilot?").model_dump(exclude_none=True) == {
        "query": "What is Copilot?",
        "version": DEFAULT_VERSION,
    }

    github_docs_client.client = "docs-bot"
    assert github_docs_client.build_payload("What is Copilot?", "enterprise-server@3.14").model_dump(exclude_none=True) == {
        "query": "What is Copilot?",
        "version": "enterprise-server@3.14",
        "client": "docs-bot",
    }


async def test_search(github_docs_client: GitHubDocsClient, copilot_body: str):
    with aioresponses() as m:
        m.post(SEARCH_URL, status=200, body=copilot_body, content_type="application/x-ndjson")

        outcome = await github_docs_client.search("What is Copilot?")

        calls = m.requests[("POST", URL(SEARCH_URL))]

    assert outcome == SearchOutcome(answer="Copilot is great.", sources=["https://docs.github.com/a"])

    assert len(calls) == 1
    assert calls[0].kwargs["json"] == {"query": "What is Copilot?", "version": DEFAULT_VERSION}
    assert calls[0].kwargs["headers"] == SEARCH_HEADERS
    assert calls[0].kwargs["timeout"] == ClientTimeout(total=None)


def test_headers_imitate_the_docs_site():
    assert SEARCH_HEADERS["Accept"] == "application/x-ndjson, */*"
    assert SEARCH_HEADERS["Origin"] == "https://docs.github.com"
    assert SEARCH_HEADERS["Referer"] == "https://docs.github.com/?search-overlay-open=true"
    assert SEARCH_HEADERS["User-Agent"].startswith("Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7)")


async def test_search_503(github_docs_client: GitHubDocsClient):
    with aioresponses() as m:
        m.post(SEARCH_URL, status=503, body="upstream overloaded", reason="Service Unavailable")

        with pytest.raises(DocsSearchUnavailableError, match="temporarily unavailable"):
            await github_docs_client.search("What is Copilot?")


async def test_search_500(github_docs_client: GitHubDocsClient):
    with aioresponses() as m:
        m.post(SEARCH_URL, status=500, body="boom", reason="Internal Server Error")

        with pytest.raises(DocsSearchHTTPError) as exc_info:
            await github_docs_client.search("What is Copilot?")

    assert exc_info.value.status == 500
    assert str(exc_info.value) == "Failed to fetch from GitHub docs API: 500 Internal Server Error"


async def test_search_does_not_retry(github_docs_client: GitHubDocsClient, copilot_body: str):
    with aioresponses() as m:
        m.post(SEARCH_URL, status=500, reason="Internal Server Error")
        m.post(SEARCH_URL, status=200, body=copilot_body)

        with pytest.raises(DocsSearchHTTPError):
            await github_docs_client.search("What is Copilot?")

        assert len(m.requests[("POST", URL(SEARCH_URL))]) == 1


async def test_search_embedded_error(github_docs_client: GitHubDocsClient):
    with aioresponses() as m:
        m.post(SEARCH_URL, status=200, body='{"message": "Query is too long"}')

        with pytest.raises(DocsSearchAPIError, match="API returned an error: Query is too long"):
            await github_docs_client.search("What is Copilot?")


async def test_search_connection_error(github_docs_client: GitHubDocsClient):
    with aioresponses() as m:
        m.post(SEARCH_URL, exception=ClientConnectionError("Connection refused"))

        with pytest.raises(DocsSearchConnectionError, match="Could not reach GitHub docs API: Connection refused"):
            await github_docs_client.search("What is Copilot?")


async def test_search_timeout():
    client = GitHubDocsClient(timeout=2.5)

    with aioresponses() as m:
        m.post(SEARCH_URL, exception=TimeoutError())

        with pytest.raises(DocsSearchTimeoutError, match="did not respond within 2.5 seconds"):
            await client.search("What is Copilot?")


async def test_search_timeout_is_sent_as_deadline():
    client = GitHubDocsClient(timeout=2.5)

    with aioresponses() as m:
        m.post(SEARCH_URL, status=200, body='{"chunkType":"MESSAGE_CHUNK","text":"ok"}')

        await client.search("What is Copilot?")

        calls = m.requests[("POST", URL(SEARCH_URL))]

    assert calls[0].kwargs["timeout"] == ClientTimeout(total=2.5)


async def test_search_invalid_utf8_body(github_docs_client: GitHubDocsClient):
    with aioresponses() as m:
        m.post(SEARCH_URL, status=200, body=b'{"chunkType":"MESSAGE_CHUNK","text":"a\xff"}', content_type="application/x-ndjson")

        outcome = await github_docs_client.search("What is Copilot?")

    assert outcome == SearchOutcome(answer="a\ufffd")
