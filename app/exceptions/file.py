"""File-related exceptions."""

from .base import ValidationError


class ParentNotFoundError(ValidationError):
    """Raised when the requested parent folder does not exist for the owner."""

    def __init__(self, message: str = "Parent not found"):
        super().__init__(message=message)


class ParentNotFolderError(ValidationError):
    """Raised when the requested parent exists but is not a folder."""

    def __init__(self, message: str = "Parent is not a folder"):
        super().__init__(message=message)


class FolderHasNoContentError(ValidationError):
    """Raised when the content of a folder is requested."""

    def __init__(self, message: str = "A folder doesn't have content"):
        super().__init__(message=message)


class BlobNotFoundError(Exception):
    """Raised by the blob store when no bytes exist under a locator.

    Deliberately not an HTTP exception: callers decide whether a missing blob
    is a plain 404 (a thumbnail not generated) or an inconsistency.
    """

    def __init__(self, locator: str):
        self.locator = locator
        super().__init__(f"No blob stored under {locator}")
