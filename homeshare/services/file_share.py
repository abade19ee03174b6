"""Wiring of the storage and transfer services for one storage root."""

from dataclasses import dataclass

from ..config import Settings
from ..transfer.archive import ArchiveStreamer
from ..transfer.ranges import RangeTransfer
from .catalog import Catalog
from .deletion import DeletionService
from .ingestion import IngestionPipeline
from .rate_limiter import UploadRateLimiter
from .storage_layout import StorageLayout
from .thumbnails import ThumbnailGenerator


@dataclass
class FileShare:
    settings: Settings
    layout: StorageLayout
    ingestion: IngestionPipeline
    catalog: Catalog
    ranges: RangeTransfer
    archives: ArchiveStreamer
    deletion: DeletionService
    upload_limiter: UploadRateLimiter

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileShare":
        layout = StorageLayout(settings.storage_dir)
        thumbnails = ThumbnailGenerator(
            layout,
            max_size=settings.thumbnail_size,
            quality=settings.thumbnail_quality,
        )
        return cls(
            settings=settings,
            layout=layout,
            ingestion=IngestionPipeline(settings, layout, thumbnails),
            catalog=Catalog(layout),
            ranges=RangeTransfer(layout, chunk_size=settings.chunk_size),
            archives=ArchiveStreamer(
                layout,
                compression_level=settings.archive_compression_level,
                chunk_size=settings.chunk_size,
            ),
            deletion=DeletionService(layout),
            upload_limiter=UploadRateLimiter(
                settings.upload_rate_limit,
                settings.upload_rate_window_seconds,
            ),
        )
