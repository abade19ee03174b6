"""Stored file and transfer models."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Category(str, Enum):
    IMAGES = "images"
    DOCUMENTS = "documents"
    VIDEOS = "videos"
    AUDIO = "audio"
    ARCHIVES = "archives"
    OTHER = "other"


class SortOrder(str, Enum):
    NAME = "name"
    SIZE = "size"
    DATE = "date"


class StoredFile(BaseModel):
    storage_name: str
    original_name: str
    size: int = 0
    modified_at: datetime
    category: Category = Category.OTHER
    has_thumbnail: bool = False
    extension: str = ""


class UploadedFileInfo(BaseModel):
    original_name: str
    storage_name: str
    size: int = 0
    upload_time: datetime
    mime_type: str = "application/octet-stream"
    category: Category = Category.OTHER
    has_thumbnail: bool = False


class UploadResponse(BaseModel):
    message: str = "Files uploaded successfully"
    files: list[UploadedFileInfo] = Field(default_factory=list)


class ListFilters(BaseModel):
    search: Optional[str] = None
    category: str = "all"  # a Category value or "all"
    sort: SortOrder = SortOrder.DATE


class FileSelection(BaseModel):
    files: list[str] = Field(default_factory=list)


class DeleteResult(BaseModel):
    storage_name: str
    success: bool = False
    error: Optional[str] = None


class BulkDeleteResponse(BaseModel):
    message: str = "Bulk delete completed"
    results: list[DeleteResult] = Field(default_factory=list)
