"""Shared fixtures for homeshare tests."""

import io
import os

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from homeshare.app import create_app
from homeshare.config import Settings
from homeshare.services.file_share import FileShare
from homeshare.services.ingestion import IncomingFile


@pytest.fixture
def settings(tmp_path):
    """Small limits so batch and size checks are cheap to hit."""
    return Settings(
        storage_dir=tmp_path / "uploads",
        frontend_dir=tmp_path / "no-frontend",
        max_files=3,
        max_file_size=256 * 1024,
        chunk_size=1024,
        upload_rate_limit=5,
        upload_rate_window_seconds=60,
    )


@pytest.fixture
def share(settings):
    share = FileShare.from_settings(settings)
    share.layout.ensure()
    return share


@pytest.fixture
def layout(share):
    return share.layout


@pytest.fixture
def store_file(layout):
    """Place a file in the storage root the way an upload would have.

    Returns:
        Factory taking (storage_name, content, mtime=None, thumbnail=False).
    """
    def _store(storage_name, content=b"data", mtime=None, thumbnail=False):
        path = layout.root / storage_name
        path.write_bytes(content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        if thumbnail:
            layout.thumbnail_path(storage_name).write_bytes(b"thumb")
        return path

    return _store


@pytest.fixture
def png_bytes():
    """A 400x300 PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (400, 300), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


async def _chunks(data, size):
    for i in range(0, len(data), size):
        yield data[i:i + size]


@pytest.fixture
def make_incoming():
    """Build an IncomingFile whose bytes arrive in small chunks."""
    def _make(filename, data, content_type="application/octet-stream", size=None, chunk=7):
        return IncomingFile(
            filename=filename,
            content_type=content_type,
            size=len(data) if size is None else size,
            chunks=_chunks(data, chunk),
        )

    return _make


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
