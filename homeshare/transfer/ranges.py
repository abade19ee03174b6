"""Single-file downloads with HTTP byte-range support.

A client that lost a connection halfway through a download asks again
with ``Range: bytes=<received>-`` and gets only the missing tail. Ranges
are inclusive on both ends, as in HTTP.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Optional
from urllib.parse import quote

import aiofiles

from ..errors import FileNotFoundInStore, InvalidRange, RangeNotSatisfiable, StorageIOError
from ..services.storage_layout import StorageLayout
from ..utils.naming import original_name_from_storage

logger = logging.getLogger(__name__)

_RANGE_SPEC = re.compile(r"^\s*(\d*)\s*-\s*(\d*)\s*$")
_HEADER_UNSAFE = re.compile(r'[^\x20-\x7e]|["\\]')


def validate_range(start: int, end: int, size: int, header: str = "") -> tuple[int, int]:
    """Require ``0 <= start <= end < size``."""
    if start < 0 or start > end or end >= size:
        raise RangeNotSatisfiable(header or f"bytes={start}-{end}", size)
    return start, end


def parse_range(header: Optional[str], size: int) -> Optional[tuple[int, int]]:
    """Parse a single ``bytes=`` range against a file of ``size`` bytes.

    Returns None when no range was requested. Supports ``start-end``,
    ``start-`` (to end of file) and ``-N`` (last N bytes). Multiple ranges
    are not supported.
    """
    if header is None or not header.strip():
        return None

    unit, sep, byte_ranges = header.strip().partition("=")
    if not sep or unit.strip().lower() != "bytes" or "," in byte_ranges:
        raise InvalidRange(header)

    match = _RANGE_SPEC.match(byte_ranges)
    if not match:
        raise InvalidRange(header)
    first, last = match.groups()

    if not first and not last:
        raise InvalidRange(header)

    if not first:
        suffix = int(last)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiable(header, size)
        return size - min(suffix, size), size - 1

    start = int(first)
    end = int(last) if last else size - 1
    return validate_range(start, end, size, header)


def content_disposition(filename: str) -> str:
    ascii_name = _HEADER_UNSAFE.sub("_", filename)
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


@dataclass
class FilePayload:
    """Everything needed to send one stored file (or a slice of it)."""

    storage_name: str
    original_name: str
    path: Path
    file_size: int
    start: int
    length: int
    partial: bool
    chunk_size: int = 64 * 1024
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return 206 if self.partial else 200

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """Yield exactly ``length`` bytes starting at ``start``.

        The file handle is released however the iteration ends, including
        cancellation when the client goes away mid-transfer.
        """
        remaining = self.length
        try:
            async with aiofiles.open(self.path, "rb") as f:
                await f.seek(self.start)
                while remaining > 0:
                    data = await f.read(min(self.chunk_size, remaining))
                    if not data:
                        raise OSError(f"file ended {remaining} bytes early")
                    remaining -= len(data)
                    yield data
        except asyncio.CancelledError:
            logger.info(
                f"Download of {self.storage_name} cancelled after "
                f"{self.length - remaining}/{self.length} bytes"
            )
            raise
        except OSError as e:
            logger.error(f"Download of {self.storage_name} failed: {e}")
            raise StorageIOError(self.storage_name, e) from e


class RangeTransfer:
    def __init__(self, layout: StorageLayout, chunk_size: int = 64 * 1024):
        self.layout = layout
        self.chunk_size = chunk_size

    def prepare(self, storage_name: str, range_header: Optional[str] = None) -> FilePayload:
        """Resolve the file and the requested range before any byte is sent."""
        path = self.layout.file_path(storage_name)
        try:
            stat = path.stat()
        except FileNotFoundError:
            raise FileNotFoundInStore(storage_name) from None
        if not path.is_file():
            raise FileNotFoundInStore(storage_name)

        size = stat.st_size
        original_name = original_name_from_storage(storage_name)
        byte_range = parse_range(range_header, size)

        headers = {
            "Accept-Ranges": "bytes",
            "Content-Disposition": content_disposition(original_name),
        }
        if byte_range is None:
            start, length = 0, size
        else:
            start, end = byte_range
            length = end - start + 1
            headers["Content-Range"] = f"bytes {start}-{end}/{size}"
        headers["Content-Length"] = str(length)

        return FilePayload(
            storage_name=storage_name,
            original_name=original_name,
            path=path,
            file_size=size,
            start=start,
            length=length,
            partial=byte_range is not None,
            chunk_size=self.chunk_size,
            headers=headers,
        )
