class DocsSearchError(Exception):
    """A base exception for GitHub Docs searches."""

    msg: str

    def __init__(self, msg: str):
        self.msg = msg

    def __str__(self) -> str:
        return self.msg


class QueryAcquisitionError(DocsSearchError):
    """An exception for when no query could be obtained from the host."""

    title: str

    def __init__(self, title: str, msg: str):
        self.title = title
        super().__init__(msg)


class NoQueryError(QueryAcquisitionError):
    """An exception for when neither the selection nor the clipboard hold any text."""

    def __init__(self):
        super().__init__("No text available", "Please select or copy text to search in GitHub docs")


class ClipboardUnavailableError(QueryAcquisitionError):
    """An exception for when the clipboard could not be read."""

    def __init__(self):
        super().__init__("Could not access clipboard", "Please try using the ask command instead")


class DocsSearchUnavailableError(DocsSearchError):
    """An exception for when the search endpoint answers with 503."""

    def __init__(self):
        super().__init__("GitHub docs API is temporarily unavailable. Please try again later.")


class DocsSearchHTTPError(DocsSearchError):
    """An exception for any other non-success status from the search endpoint."""

    status: int

    def __init__(self, status: int, reason: str | None):
        self.status = status
        super().__init__(f"Failed to fetch from GitHub docs API: {status} {reason or ''}".rstrip())


class DocsSearchAPIError(DocsSearchError):
    """An exception for when the endpoint returns a single error object instead of a stream."""

    def __init__(self, message: str):
        super().__init__(f"API returned an error: {message}")


class DocsSearchConnectionError(DocsSearchError):
    def __init__(self, detail: str):
        super().__init__(f"Could not reach GitHub docs API: {detail}")


class DocsSearchTimeoutError(DocsSearchError):
    def __init__(self, timeout: float):
        super().__init__(f"GitHub docs API did not respond within {timeout:g} seconds.")
