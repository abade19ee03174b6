"""FastAPI application factory."""

import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from .config import Settings, settings as default_settings
from .errors import FileShareError, RequestTooLarge
from .api.router import api_router
from .services.file_share import FileShare

MULTIPART_OVERHEAD = 1024 * 1024

# Configure logging for our modules
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")
logging.getLogger("homeshare").setLevel(logging.DEBUG)

AccessGate = Callable[[Request], bool]


def allow_all(request: Request) -> bool:
    return True


async def file_share_error_handler(request: Request, exc: FileShareError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=exc.headers or None,
    )


class UploadSizeGuardMiddleware(BaseHTTPMiddleware):
    """Refuse an upload by its declared Content-Length before the body is read."""

    def __init__(self, app, path: str, max_length: int):
        super().__init__(app)
        self.path = path
        self.max_length = max_length

    async def dispatch(self, request: Request, call_next):
        if request.method == "POST" and request.url.path == self.path:
            declared = request.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > self.max_length:
                return await file_share_error_handler(
                    request, RequestTooLarge(int(declared), self.max_length)
                )
        return await call_next(request)


def create_app(
    settings: Optional[Settings] = None,
    access_gate: Optional[AccessGate] = None,
) -> FastAPI:
    """Build the app around one storage root.

    ``access_gate`` decides whether a request may use the file routes;
    authentication itself lives outside this service.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="homeshare",
        version="0.1.0",
        description="Local network file sharing",
    )

    share = FileShare.from_settings(settings)
    share.layout.ensure()
    app.state.share = share
    app.state.access_gate = access_gate or allow_all

    app.add_middleware(
        UploadSizeGuardMiddleware,
        path="/api/upload",
        max_length=settings.max_files * settings.max_file_size + MULTIPART_OVERHEAD,
    )
    app.add_exception_handler(FileShareError, file_share_error_handler)
    app.include_router(api_router, prefix="/api")

    app.mount(
        "/thumbnails",
        StaticFiles(directory=str(share.layout.thumbnail_dir)),
        name="thumbnails",
    )
    if settings.frontend_dir.exists():
        app.mount(
            "/",
            StaticFiles(directory=str(settings.frontend_dir), html=True),
            name="frontend",
        )

    return app
