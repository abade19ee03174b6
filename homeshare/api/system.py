"""Server info API endpoint."""

from fastapi import APIRouter, Depends, Request

from ..models.system import LimitsInfo, ServerInfo
from ..services.file_share import FileShare
from ..utils.network import build_server_url, get_local_ip
from .deps import get_share

router = APIRouter(tags=["system"])


@router.get("/info", response_model=ServerInfo)
def get_server_info(request: Request, share: FileShare = Depends(get_share)):
    settings = share.settings
    return ServerInfo(
        server_ip=get_local_ip(),
        port=settings.port,
        server_url=build_server_url(
            request.headers.get("host"),
            settings.port,
            secure=request.url.scheme == "https",
        ),
        config=LimitsInfo(
            max_file_size=settings.max_file_size,
            max_files=settings.max_files,
        ),
    )
