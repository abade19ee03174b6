"""On-disk layout of the storage root."""

import logging
from pathlib import Path

from ..errors import FileNotFoundInStore

logger = logging.getLogger(__name__)

THUMBNAIL_DIR = "thumbnails"
TEMP_DIR = "temp"
RESERVED_NAMES = frozenset({THUMBNAIL_DIR, TEMP_DIR})


class StorageLayout:
    """Resolves storage names to paths under the storage root.

    The storage root holds the uploaded files directly, plus two reserved
    subdirectories: ``thumbnails`` and ``temp``.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self.thumbnail_dir = self.root / THUMBNAIL_DIR
        self.temp_dir = self.root / TEMP_DIR

    def ensure(self) -> None:
        for d in (self.root, self.thumbnail_dir, self.temp_dir):
            d.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Storage root ready at {self.root.resolve()}")

    @staticmethod
    def is_listable(name: str) -> bool:
        """True for names that may refer to a stored file."""
        return bool(name) and not name.startswith(".") and name not in RESERVED_NAMES

    def file_path(self, storage_name: str) -> Path:
        """Path of a stored file; names that could escape the root are not found."""
        if (
            not self.is_listable(storage_name)
            or "/" in storage_name
            or "\\" in storage_name
            or "\x00" in storage_name
        ):
            raise FileNotFoundInStore(storage_name)
        return self.root / storage_name

    def thumbnail_path(self, storage_name: str) -> Path:
        return self.thumbnail_dir / f"thumb_{storage_name}.jpg"

    def has_thumbnail(self, storage_name: str) -> bool:
        return self.thumbnail_path(storage_name).is_file()
