"""Catalog queries over the storage directory.

There is no index: every call rescans the directory, so the listing can
never drift from what is actually on disk.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from ..errors import FileNotFoundInStore
from ..models.files import ListFilters, SortOrder, StoredFile
from ..utils.naming import original_name_from_storage
from .categorizer import categorize, file_extension
from .storage_layout import StorageLayout

logger = logging.getLogger(__name__)


class Catalog:
    def __init__(self, layout: StorageLayout):
        self.layout = layout

    def list(self, filters: Optional[ListFilters] = None) -> list[StoredFile]:
        filters = filters or ListFilters()
        files = list(self._scan())

        if filters.search:
            search_lower = filters.search.lower()
            files = [f for f in files if search_lower in f.original_name.lower()]

        if filters.category and filters.category != "all":
            files = [f for f in files if f.category.value == filters.category]

        if filters.sort == SortOrder.NAME:
            files.sort(key=lambda f: (f.original_name.casefold(), f.original_name))
        elif filters.sort == SortOrder.SIZE:
            files.sort(key=lambda f: f.size, reverse=True)
        else:
            files.sort(key=lambda f: f.modified_at, reverse=True)

        return files

    def get(self, storage_name: str) -> StoredFile:
        path = self.layout.file_path(storage_name)
        try:
            stat = path.stat()
        except FileNotFoundError:
            raise FileNotFoundInStore(storage_name) from None
        if not path.is_file():
            raise FileNotFoundInStore(storage_name)
        return self._describe(storage_name, stat)

    def _scan(self):
        try:
            with os.scandir(self.layout.root) as it:
                entries = list(it)
        except FileNotFoundError:
            logger.warning(f"Storage root {self.layout.root} does not exist")
            return

        for entry in entries:
            if not self.layout.is_listable(entry.name):
                continue
            try:
                if not entry.is_file():
                    continue
                stat = entry.stat()
            except FileNotFoundError:
                # deleted while we were scanning
                continue
            yield self._describe(entry.name, stat)

    def _describe(self, storage_name: str, stat: os.stat_result) -> StoredFile:
        original_name = original_name_from_storage(storage_name)
        return StoredFile(
            storage_name=storage_name,
            original_name=original_name,
            size=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            category=categorize(original_name),
            has_thumbnail=self.layout.has_thumbnail(storage_name),
            extension=file_extension(original_name),
        )
