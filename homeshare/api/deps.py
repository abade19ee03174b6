"""Request dependencies shared by the API routers."""

from fastapi import Request

from ..errors import AccessDenied
from ..services.file_share import FileShare


def get_share(request: Request) -> FileShare:
    return request.app.state.share


def require_access(request: Request) -> None:
    """Ask the externally supplied access gate whether this request may pass."""
    gate = request.app.state.access_gate
    if not gate(request):
        raise AccessDenied()


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def enforce_upload_rate(request: Request) -> None:
    get_share(request).upload_limiter.hit(client_address(request))
