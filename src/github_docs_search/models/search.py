from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

DEFAULT_VERSION = "free-pro-team@latest"


class RequestPayload(BaseModel):
    query: str = Field(min_length=1)
    version: str = DEFAULT_VERSION
    client: str | None = None


class SourceReference(BaseModel):
    url: Any = None


class MessageChunk(BaseModel):
    """A fragment of the answer text."""

    model_config = ConfigDict(populate_by_name=True)

    chunk_type: Literal["MESSAGE_CHUNK"] = Field(alias="chunkType")
    text: StrictStr


class SourcesChunk(BaseModel):
    """The documents the answer was drawn from. Replaces any earlier list."""

    model_config = ConfigDict(populate_by_name=True)

    chunk_type: Literal["SOURCES"] = Field(alias="chunkType")
    sources: list[SourceReference]


class LegacyAnswer(BaseModel):
    type: Literal["answer"]
    value: StrictStr


class LegacySources(BaseModel):
    type: Literal["sources"]
    value: list[SourceReference]


ResponseRecord = MessageChunk | SourcesChunk | LegacyAnswer | LegacySources


class SearchOutcome(BaseModel):
    answer: str = Field(default="", description="The answer text assembled from the response stream.")
    sources: list[str] = Field(default_factory=list, description="The URLs of the documents the answer was drawn from.")
    error: str | None = Field(default=None, description="Why the search did not produce an answer, if it failed.")

    @property
    def ok(self) -> bool:
        return self.error is None
