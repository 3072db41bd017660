from fastmcp.utilities.logging import get_logger

from github_docs_search.clients.host.base import BaseClipboard, BaseNotifier, BaseSelectionReader, NotificationStyle
from github_docs_search.errors import ClipboardUnavailableError, NoQueryError

logger = get_logger(__name__)


async def read_selection(selection_reader: BaseSelectionReader) -> str | None:
    """Read the current selection, treating any failure or blank text as no selection."""
    try:
        text = await selection_reader.read_selection()
    except Exception as e:  # noqa: BLE001
        logger.debug(f"No selected text available: {e}")
        return None

    return text if text and text.strip() else None


async def acquire_query(selection_reader: BaseSelectionReader, clipboard: BaseClipboard, notifier: BaseNotifier) -> str:
    """Find the query for a headless search: the selection first, then the clipboard.

    Raises:
        ClipboardUnavailableError: If there is no selection and the clipboard cannot be read.
        NoQueryError: If there is no selection and the clipboard is empty.
    """

    if query := await read_selection(selection_reader):
        return query

    try:
        clipboard_text = await clipboard.read_text()
    except Exception as e:
        logger.error(f"Error reading clipboard: {e}")
        raise ClipboardUnavailableError from e

    if not clipboard_text or not clipboard_text.strip():
        raise NoQueryError

    await notifier.show(NotificationStyle.SUCCESS, "Using clipboard content as query")

    return clipboard_text
