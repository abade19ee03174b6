"""Catalog and deletion API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..models.files import (
    BulkDeleteResponse,
    FileSelection,
    ListFilters,
    SortOrder,
    StoredFile,
)
from ..services.categorizer import list_categories
from ..services.file_share import FileShare
from .deps import get_share, require_access

router = APIRouter(tags=["files"], dependencies=[Depends(require_access)])

_CATEGORY_PATTERN = "^(" + "|".join(list_categories()) + ")$"


@router.get("/files", response_model=list[StoredFile])
def list_files(
    search: Optional[str] = None,
    category: str = Query("all", pattern=_CATEGORY_PATTERN),
    sort: SortOrder = SortOrder.DATE,
    share: FileShare = Depends(get_share),
):
    return share.catalog.list(ListFilters(search=search, category=category, sort=sort))


@router.get("/files/{storage_name}", response_model=StoredFile)
def get_file(storage_name: str, share: FileShare = Depends(get_share)):
    return share.catalog.get(storage_name)


@router.delete("/files/{storage_name}")
def delete_file(storage_name: str, share: FileShare = Depends(get_share)):
    share.deletion.delete_one(storage_name)
    return {"message": "File deleted successfully", "storage_name": storage_name}


@router.post("/delete-bulk", response_model=BulkDeleteResponse)
def delete_bulk(selection: FileSelection, share: FileShare = Depends(get_share)):
    return BulkDeleteResponse(results=share.deletion.delete_many(selection.files))


@router.get("/categories")
def get_categories() -> list[str]:
    return list_categories()
