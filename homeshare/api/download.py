"""Single-file and bulk download endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..models.files import FileSelection
from ..services.file_share import FileShare
from ..transfer.ranges import content_disposition
from .deps import get_share, require_access

router = APIRouter(tags=["download"], dependencies=[Depends(require_access)])


@router.get("/download/{storage_name}")
async def download_file(storage_name: str, request: Request, share: FileShare = Depends(get_share)):
    """Send a stored file, or the byte range named by the Range header."""
    payload = share.ranges.prepare(storage_name, request.headers.get("range"))
    return StreamingResponse(
        payload.iter_bytes(),
        status_code=payload.status_code,
        headers=payload.headers,
        media_type="application/octet-stream",
    )


@router.post("/download-zip")
def download_zip(selection: FileSelection, share: FileShare = Depends(get_share)):
    members = share.archives.select(selection.files)
    # sync iterator: Starlette pulls each chunk in its threadpool
    return StreamingResponse(
        share.archives.stream(members),
        media_type="application/zip",
        headers={
            "Content-Disposition": content_disposition("files.zip"),
            "X-Archive-Members": str(len(members)),
        },
    )
