"""Data models."""

from .files import (
    BulkDeleteResponse,
    Category,
    DeleteResult,
    FileSelection,
    ListFilters,
    SortOrder,
    StoredFile,
    UploadedFileInfo,
    UploadResponse,
)
from .system import LimitsInfo, ServerInfo

__all__ = [
    "BulkDeleteResponse",
    "Category",
    "DeleteResult",
    "FileSelection",
    "ListFilters",
    "SortOrder",
    "StoredFile",
    "UploadedFileInfo",
    "UploadResponse",
    "LimitsInfo",
    "ServerInfo",
]
