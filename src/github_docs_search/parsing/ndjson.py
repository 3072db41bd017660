import json
from typing import Annotated, Any

from fastmcp.utilities.logging import get_logger
from pydantic import Field, TypeAdapter, ValidationError

from github_docs_search.errors import DocsSearchAPIError
from github_docs_search.models.search import (
    LegacyAnswer,
    LegacySources,
    MessageChunk,
    ResponseRecord,
    SearchOutcome,
    SourceReference,
    SourcesChunk,
)

logger = get_logger(__name__)

NO_ANSWER_MESSAGE = (
    "No answer or sources found in the API response. The API might have returned an unexpected format or an error message."
)
EMPTY_RESPONSE_MESSAGE = "No results found. The API response was empty or unparsable."

# The first matching shape wins, so a line carrying both discriminators is read as the newer one.
_record_adapter: TypeAdapter[ResponseRecord] = TypeAdapter(Annotated[ResponseRecord, Field(union_mode="left_to_right")])


class AnswerAccumulator:
    """Assembles an answer and source list from response records in line order.

    A fragment identical to the immediately preceding accepted fragment is skipped, as the
    upstream stream is known to repeat chunks.
    """

    def __init__(self) -> None:
        self.fragments: list[str] = []
        self.sources: list[str] = []
        self.found_answer: bool = False
        self.found_sources: bool = False

    @property
    def answer(self) -> str:
        return "".join(self.fragments)

    def add(self, record: ResponseRecord) -> None:
        match record:
            case MessageChunk(text=text) | LegacyAnswer(value=text):
                self.add_fragment(text)
            case SourcesChunk(sources=sources) | LegacySources(value=sources):
                self.replace_sources(sources)

    def add_fragment(self, text: str) -> None:
        if self.fragments and self.fragments[-1] == text:
            logger.debug(f"Skipping immediate duplicate chunk: {text!r}")
            return

        self.fragments.append(text)
        self.found_answer = True

    def replace_sources(self, sources: list[SourceReference]) -> None:
        self.sources = [source.url for source in sources if isinstance(source.url, str)]
        self.found_sources = True
        logger.debug(f"Found sources: {self.sources}")


def parse_record(data: Any) -> ResponseRecord | None:
    """Classify one decoded line. Returns None for shapes we do not understand."""
    try:
        return _record_adapter.validate_python(data)
    except ValidationError:
        return None


def _embedded_error_message(line: str) -> str | None:
    try:
        data = json.loads(line)
    except (json.JSONDecodeError, RecursionError):
        return None

    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])

    return None


def parse_search_response(text: str) -> SearchOutcome:
    """Parse an NDJSON search response body into a `SearchOutcome`.

    Args:
        text: The full response body.

    Returns:
        The assembled outcome. When nothing usable was found, the outcome carries an error.

    Raises:
        DocsSearchAPIError: If the body is a single error object rather than a stream.
    """

    lines = text.strip().split("\n")
    logger.debug(f"Response split into {len(lines)} lines")

    accumulator = AnswerAccumulator()
    decoded_lines = 0

    for line in lines:
        try:
            data = json.loads(line)
        except (json.JSONDecodeError, RecursionError) as e:
            if line.strip():
                logger.warning(f"Skipping unparsable line {line!r}: {e}")
            continue

        decoded_lines += 1

        if (record := parse_record(data)) is None:
            logger.debug(f"Ignoring unrecognized record: {line}")
            continue

        accumulator.add(record)

    if not accumulator.found_answer and lines[0].startswith("{") and (message := _embedded_error_message(lines[0])):
        raise DocsSearchAPIError(message)

    answer = accumulator.answer

    if not answer and not accumulator.found_sources:
        if decoded_lines:
            logger.warning(f"No answer or sources found, but received data. Raw response: {text}")
            return SearchOutcome(error=NO_ANSWER_MESSAGE)

        logger.warning("No answer or sources found, and response seemed empty or unparsable.")
        return SearchOutcome(error=EMPTY_RESPONSE_MESSAGE)

    return SearchOutcome(answer=answer, sources=accumulator.sources)
