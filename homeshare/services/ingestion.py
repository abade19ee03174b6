"""Upload ingestion: naming, streaming to disk, metadata derivation."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Optional

import aiofiles

from ..config import Settings
from ..errors import NoFilesProvided, PayloadTooLarge, StorageIOError, ThumbnailError, TooManyFiles
from ..models.files import UploadedFileInfo
from ..utils.naming import TimestampAllocator, build_storage_name
from .categorizer import categorize, file_extension
from .storage_layout import StorageLayout
from .thumbnails import ThumbnailGenerator

logger = logging.getLogger(__name__)

DANGEROUS_EXTENSIONS = frozenset({".exe", ".bat", ".cmd", ".scr", ".pif", ".vbs", ".js"})


@dataclass
class IncomingFile:
    """One file of an upload batch, as declared by the client."""

    filename: str
    content_type: Optional[str]
    size: int
    chunks: AsyncIterator[bytes]


class IngestionPipeline:
    def __init__(
        self,
        settings: Settings,
        layout: StorageLayout,
        thumbnails: ThumbnailGenerator,
        allocator: Optional[TimestampAllocator] = None,
    ):
        self.settings = settings
        self.layout = layout
        self.thumbnails = thumbnails
        self.allocator = allocator or TimestampAllocator()

    def validate_batch(self, batch: list[IncomingFile]) -> None:
        """Batch-level limits, checked before anything touches the disk."""
        if not batch:
            raise NoFilesProvided("No files uploaded")
        if len(batch) > self.settings.max_files:
            raise TooManyFiles(len(batch), self.settings.max_files)
        for item in batch:
            if item.size > self.settings.max_file_size:
                raise PayloadTooLarge(item.filename, item.size, self.settings.max_file_size)

    async def ingest(self, batch: list[IncomingFile]) -> list[UploadedFileInfo]:
        """Persist every file of the batch in order and describe each one.

        Either the whole batch is stored or none of it: if one file fails,
        the files already written by this call are removed again.
        """
        self.validate_batch(batch)

        results: list[UploadedFileInfo] = []
        try:
            for item in batch:
                results.append(await self._ingest_one(item))
        except BaseException:
            self._rollback([r.storage_name for r in results])
            raise

        logger.info(f"Ingested {len(results)} file(s)")
        return results

    async def _ingest_one(self, item: IncomingFile) -> UploadedFileInfo:
        original_name = item.filename or ""
        mime_type = item.content_type or "application/octet-stream"

        if file_extension(original_name) in DANGEROUS_EXTENSIONS:
            logger.warning(f"Potentially dangerous file uploaded: {original_name}")

        storage_name, path, size = await self._persist(item)

        has_thumbnail = False
        if mime_type.startswith("image/"):
            try:
                await self.thumbnails.generate(path, storage_name)
                has_thumbnail = True
            except ThumbnailError as e:
                logger.warning(str(e))

        logger.info(f"Stored '{original_name}' as {storage_name} ({size} bytes)")
        return UploadedFileInfo(
            original_name=original_name,
            storage_name=storage_name,
            size=size,
            upload_time=datetime.now(tz=timezone.utc),
            mime_type=mime_type,
            category=categorize(original_name),
            has_thumbnail=has_thumbnail,
        )

    async def _persist(self, item: IncomingFile) -> tuple[str, Path, int]:
        """Stream the upload to a freshly created file, chunk by chunk."""
        while True:
            storage_name = build_storage_name(self.allocator.next(), item.filename)
            path = self.layout.file_path(storage_name)
            try:
                out = await aiofiles.open(path, "xb")
                break
            except FileExistsError:
                # another process took this name; the allocator moves on
                logger.debug(f"Storage name {storage_name} taken, retrying")
            except OSError as e:
                logger.error(f"Cannot create {storage_name}: {e}")
                raise StorageIOError(storage_name, e) from e

        written = 0
        try:
            try:
                async for chunk in item.chunks:
                    written += len(chunk)
                    if written > self.settings.max_file_size:
                        raise PayloadTooLarge(item.filename, written, self.settings.max_file_size)
                    await out.write(chunk)
            finally:
                await out.close()
        except OSError as e:
            path.unlink(missing_ok=True)
            logger.error(f"Writing {storage_name} failed: {e}")
            raise StorageIOError(storage_name, e) from e
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        return storage_name, path, written

    def _rollback(self, storage_names: list[str]) -> None:
        for name in storage_names:
            self.layout.file_path(name).unlink(missing_ok=True)
            self.layout.thumbnail_path(name).unlink(missing_ok=True)
            logger.info(f"Rolled back {name}")
