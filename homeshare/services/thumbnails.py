"""JPEG preview generation for uploaded images."""

import asyncio
import logging
from pathlib import Path

from PIL import Image

from ..errors import ThumbnailError
from .storage_layout import StorageLayout

logger = logging.getLogger(__name__)


class ThumbnailGenerator:
    def __init__(self, layout: StorageLayout, max_size: int = 200, quality: int = 80):
        self.layout = layout
        self.max_size = max_size
        self.quality = quality

    async def generate(self, source: Path, storage_name: str) -> Path:
        """Write ``thumb_<storage_name>.jpg`` for the image at ``source``.

        Decoding and encoding run in a worker thread. Raises ThumbnailError
        when the image cannot be read or written.
        """
        return await asyncio.to_thread(self._generate_sync, Path(source), storage_name)

    def _generate_sync(self, source: Path, storage_name: str) -> Path:
        target = self.layout.thumbnail_path(storage_name)
        try:
            with Image.open(source) as img:
                # thumbnail() keeps the aspect ratio and never enlarges
                img.thumbnail((self.max_size, self.max_size))
                if img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                img.save(target, format="JPEG", quality=self.quality)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            target.unlink(missing_ok=True)
            raise ThumbnailError(storage_name, str(e)) from e

        logger.debug(f"Thumbnail written: {target.name}")
        return target
