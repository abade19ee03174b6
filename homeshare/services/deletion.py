"""Removal of stored files together with their thumbnails."""

import logging

from ..errors import FileNotFoundInStore, StorageIOError
from ..models.files import DeleteResult
from .storage_layout import StorageLayout

logger = logging.getLogger(__name__)


class DeletionService:
    def __init__(self, layout: StorageLayout):
        self.layout = layout

    def delete_one(self, storage_name: str) -> None:
        """Delete a stored file and its thumbnail, if it has one.

        Raises FileNotFoundInStore when there is nothing to delete and
        StorageIOError when the disk refuses.
        """
        path = self.layout.file_path(storage_name)
        if not path.is_file():
            raise FileNotFoundInStore(storage_name)

        try:
            path.unlink()
        except FileNotFoundError:
            # lost a race with another delete
            raise FileNotFoundInStore(storage_name) from None
        except OSError as e:
            raise StorageIOError(storage_name, e) from e

        try:
            self.layout.thumbnail_path(storage_name).unlink(missing_ok=True)
        except OSError as e:
            raise StorageIOError(storage_name, e) from e

        logger.info(f"Deleted {storage_name}")

    def delete_many(self, storage_names: list[str]) -> list[DeleteResult]:
        """Delete each name independently; one failure never stops the rest."""
        results = []
        for storage_name in storage_names:
            try:
                self.delete_one(storage_name)
                results.append(DeleteResult(storage_name=storage_name, success=True))
            except (FileNotFoundInStore, StorageIOError) as e:
                results.append(DeleteResult(storage_name=storage_name, success=False, error=e.message))
        return results
