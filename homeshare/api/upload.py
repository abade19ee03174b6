"""Upload API endpoint."""

import os
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from ..models.files import UploadResponse
from ..services.file_share import FileShare
from ..services.ingestion import IncomingFile
from .deps import enforce_upload_rate, get_share, require_access

router = APIRouter(tags=["upload"], dependencies=[Depends(require_access)])


async def _read_chunks(upload: UploadFile, chunk_size: int) -> AsyncIterator[bytes]:
    await upload.seek(0)
    while True:
        chunk = await upload.read(chunk_size)
        if not chunk:
            break
        yield chunk


def _to_incoming(upload: UploadFile, chunk_size: int) -> IncomingFile:
    size = upload.size
    if size is None:
        upload.file.seek(0, os.SEEK_END)
        size = upload.file.tell()
        upload.file.seek(0)
    return IncomingFile(
        filename=upload.filename or "",
        content_type=upload.content_type,
        size=size,
        chunks=_read_chunks(upload, chunk_size),
    )


@router.post(
    "/upload",
    response_model=UploadResponse,
    dependencies=[Depends(enforce_upload_rate)],
)
async def upload_files(
    files: Optional[list[UploadFile]] = File(None),
    share: FileShare = Depends(get_share),
):
    batch = [_to_incoming(f, share.settings.chunk_size) for f in files or []]
    stored = await share.ingestion.ingest(batch)
    return UploadResponse(files=stored)
