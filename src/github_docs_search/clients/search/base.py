from abc import ABC, abstractmethod

from github_docs_search.models.search import SearchOutcome


class BaseDocsSearchClient(ABC):
    @abstractmethod
    async def search(self, query: str, version: str | None = None) -> SearchOutcome: ...
