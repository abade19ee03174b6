"""Domain errors raised by the storage and transfer services.

Every error carries the HTTP status it maps to, so the API layer can
translate any of them with a single exception handler.
"""

from typing import Optional


class FileShareError(Exception):
    """Base class for all file share errors."""

    status_code: int = 500

    def __init__(self, message: str, headers: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers or {}


class ValidationError(FileShareError):
    """Request rejected before any side effect took place."""

    status_code = 400


class NoFilesProvided(ValidationError):
    def __init__(self, message: str = "No files specified"):
        super().__init__(message)


class TooManyFiles(ValidationError):
    def __init__(self, count: int, max_files: int):
        self.count = count
        self.max_files = max_files
        super().__init__(f"Too many files: {count} sent, at most {max_files} allowed")


class PayloadTooLarge(ValidationError):
    status_code = 413

    def __init__(self, filename: str, size: int, max_size: int):
        self.filename = filename
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"File '{filename}' is too large: {size} bytes, "
            f"limit is {max_size} bytes"
        )


class RequestTooLarge(ValidationError):
    status_code = 413

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(f"Upload too large: {length} bytes declared, at most {max_length} accepted")


class InvalidRange(ValidationError):
    def __init__(self, header: str):
        self.header = header
        super().__init__(f"Invalid Range header: {header!r}")


class RangeNotSatisfiable(ValidationError):
    status_code = 416

    def __init__(self, header: str, size: int):
        self.header = header
        self.size = size
        super().__init__(
            f"Requested range not satisfiable: {header!r} (file size {size})",
            headers={"Content-Range": f"bytes */{size}"},
        )


class FileNotFoundInStore(FileShareError):
    status_code = 404

    def __init__(self, storage_name: str):
        self.storage_name = storage_name
        super().__init__("File not found")


class StorageIOError(FileShareError):
    """Disk failure during read, write or delete. Not retried."""

    def __init__(self, storage_name: str, cause: OSError):
        self.storage_name = storage_name
        self.cause = cause
        super().__init__(f"Storage error on '{storage_name}': {cause.strerror or cause}")


class ThumbnailError(FileShareError):
    """Thumbnail could not be derived. Always handled by the caller."""

    def __init__(self, storage_name: str, reason: str):
        self.storage_name = storage_name
        super().__init__(f"Thumbnail generation failed for '{storage_name}': {reason}")


class PartialArchiveFailure(FileShareError):
    """Archive stream aborted after bytes were already sent."""

    def __init__(self, member: str, cause: OSError):
        self.member = member
        self.cause = cause
        super().__init__(f"Archive aborted while adding '{member}': {cause}")


class RateLimitExceeded(FileShareError):
    status_code = 429

    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        super().__init__(
            "Too many uploads, please try again later.",
            headers={"Retry-After": str(max(1, int(retry_after + 0.999)))},
        )


class AccessDenied(FileShareError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)
