class ValidationError(Exception):
    """The caller sent an incomplete request (no file, no URL)."""


class BackendError(Exception):
    """
    A storage operation failed.

    Raised by storage backends around SDK/OS errors and by the HTTP client
    when the service answers with an error status.
    """

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ClipboardError(Exception):
    """Writing to the clipboard failed. Never fatal."""
