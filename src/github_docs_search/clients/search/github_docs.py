import os
from typing import override

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout
from fastmcp.utilities.logging import get_logger

from github_docs_search.clients.search.base import BaseDocsSearchClient
from github_docs_search.errors import (
    DocsSearchConnectionError,
    DocsSearchHTTPError,
    DocsSearchTimeoutError,
    DocsSearchUnavailableError,
)
from github_docs_search.models.search import DEFAULT_VERSION, RequestPayload, SearchOutcome
from github_docs_search.parsing.ndjson import parse_search_response

logger = get_logger(__name__)

SEARCH_URL = "https://docs.github.com/api/ai-search/v1"

# The endpoint only accepts requests that look like they come from the docs site itself.
SEARCH_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/x-ndjson, */*",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept-Language": "en-US,en;q=0.9",
    "Origin": "https://docs.github.com",
    "Referer": "https://docs.github.com/?search-overlay-open=true",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36"
    ),
}

SERVICE_UNAVAILABLE = 503


class GitHubDocsClient(BaseDocsSearchClient):
    """Client for the GitHub Docs AI search endpoint."""

    session: ClientSession | None

    def __init__(
        self,
        version: str | None = None,
        client: str | None = None,
        timeout: float | None = None,
        session: ClientSession | None = None,
    ):
        self.version = version or os.getenv("GITHUB_DOCS_VERSION") or DEFAULT_VERSION
        self.client = client or os.getenv("GITHUB_DOCS_CLIENT") or None
        self.timeout = timeout or None
        self.session = session

    def build_payload(self, query: str, version: str | None = None) -> RequestPayload:
        return RequestPayload(query=query, version=version or self.version, client=self.client)

    async def fetch(self, query: str, version: str | None = None) -> str:
        """Send the query and return the raw NDJSON body.

        Raises:
            DocsSearchUnavailableError: If the endpoint answers with 503.
            DocsSearchHTTPError: If the endpoint answers with any other non-success status.
            DocsSearchConnectionError: If the endpoint could not be reached.
            DocsSearchTimeoutError: If a timeout was configured and the endpoint did not answer in time.
        """
        payload = self.build_payload(query, version)

        logger.info(f"Performing search for query: {payload.query!r}, version: {payload.version!r}")

        try:
            if self.session is not None:
                return await self._post(self.session, payload)

            async with ClientSession() as session:
                return await self._post(session, payload)
        except TimeoutError as e:
            if self.timeout is None:
                raise DocsSearchConnectionError(str(e) or "request timed out") from e
            raise DocsSearchTimeoutError(self.timeout) from e
        except ClientError as e:
            raise DocsSearchConnectionError(str(e)) from e

    async def _post(self, session: ClientSession, payload: RequestPayload) -> str:
        # Without a deadline the request runs until the endpoint answers.
        timeout = ClientTimeout(total=self.timeout)

        async with session.post(
            SEARCH_URL, json=payload.model_dump(exclude_none=True), headers=SEARCH_HEADERS, timeout=timeout
        ) as response:
            logger.info(f"API Response Status: {response.status} {response.reason}")

            if not response.ok:
                await self._raise_for_status(response)

            return await response.text(errors="replace")

    async def _raise_for_status(self, response: ClientResponse) -> None:
        error_body = await response.text(errors="replace")
        logger.error(f"API Error Body: {error_body}")

        if response.status == SERVICE_UNAVAILABLE:
            raise DocsSearchUnavailableError

        raise DocsSearchHTTPError(response.status, response.reason)

    @override
    async def search(self, query: str, version: str | None = None) -> SearchOutcome:
        body = await self.fetch(query, version)
        logger.debug(f"API Response Text: {body}")
        return parse_search_response(body)
