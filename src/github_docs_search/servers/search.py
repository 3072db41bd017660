from typing import Annotated, ClassVar

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, ConfigDict, Field

from github_docs_search.clients.search.base import BaseDocsSearchClient
from github_docs_search.clients.search.github_docs import GitHubDocsClient
from github_docs_search.errors import DocsSearchError
from github_docs_search.models.search import SearchOutcome

logger = get_logger(__name__)


class DocsSearchServer(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True)

    search_client: BaseDocsSearchClient = Field(default_factory=GitHubDocsClient)

    async def search(
        self,
        query: Annotated[str, "The question to ask about GitHub, e.g. 'How do I configure OpenID Connect in GitHub Actions?'"],
        version: Annotated[str | None, "The docs version to search, e.g. 'free-pro-team@latest' or 'enterprise-cloud@latest'"] = None,
    ) -> SearchOutcome:
        """Ask the GitHub Docs AI search a question and return its answer along with the documents it cites."""

        if not query.strip():
            msg = "Please enter a search query"
            raise ValueError(msg)

        try:
            outcome = await self.search_client.search(query, version=version)
        except DocsSearchError as e:
            logger.error(f"Search error: {e}")
            return SearchOutcome(error=str(e))

        logger.info(f"Search for {query!r} returned {len(outcome.answer)} characters and {len(outcome.sources)} sources")

        return outcome
