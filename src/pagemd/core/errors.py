"""Typed exception hierarchy for transcoding and batch errors.

Every exception carries a short ``kind`` label which the batch orchestrator
records next to the message for each failed item.
"""


class PagemdError(Exception):
    """Base exception for all pagemd errors."""
    kind = "error"


class NotFoundError(PagemdError):
    """Raised when a page or its content does not exist."""
    kind = "not_found"

    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class UnavailableError(PagemdError):
    """Raised when the document service cannot be reached or times out."""
    kind = "unavailable"


class ConversionFailure(PagemdError):
    """Raised when a block structure cannot be interpreted at all."""
    kind = "conversion"


class ValidationFailure(PagemdError):
    """Raised when an uploaded document fails validation."""
    kind = "validation"

    def __init__(self, file_name: str, issues: list[str]):
        super().__init__(f"{file_name}: " + "; ".join(issues))
        self.file_name = file_name
        self.issues = issues


class RemoteRejectedError(PagemdError):
    """Raised when the document service refuses a write."""
    kind = "rejected"


class BatchRequestError(PagemdError):
    """Raised when a batch request itself is malformed (nothing to process)."""
    kind = "bad_request"


class BatchStateError(PagemdError):
    """Raised when a finished batch is asked to run again."""
    kind = "state"
