"""Exceptions for viewer app."""


class InvalidPathError(ValueError):
    """Raised when a request path could escape the served root."""

    def __init__(self, request_path: str) -> None:
        """Initialize InvalidPathError.

        Args:
            request_path: Rejected request path.
        """
        self.path = request_path
        super().__init__(f'Invalid path: {request_path!r}')
