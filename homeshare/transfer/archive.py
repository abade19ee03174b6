"""Bulk downloads as a zip archive streamed while it is being built."""

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Iterator

from ..errors import FileNotFoundInStore, NoFilesProvided, PartialArchiveFailure
from ..services.storage_layout import StorageLayout
from ..utils.naming import original_name_from_storage

logger = logging.getLogger(__name__)


@dataclass
class ArchiveMember:
    storage_name: str
    path: Path
    arcname: str


class _StreamSink:
    """Write-only, non-seekable target for ZipFile.

    ZipFile falls back to data descriptors when the target cannot tell()
    or seek(), which is what lets entries be emitted before their sizes
    are known.
    """

    def __init__(self):
        self._buffer = bytearray()

    def write(self, data) -> int:
        self._buffer += data
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = bytes(self._buffer)
        self._buffer.clear()
        return data


def _unique_arcname(name: str, used: set[str]) -> str:
    if name not in used:
        return name
    path = PurePath(name)
    counter = 2
    while True:
        candidate = f"{path.stem} ({counter}){path.suffix}"
        if candidate not in used:
            return candidate
        counter += 1


class ArchiveStreamer:
    def __init__(self, layout: StorageLayout, compression_level: int = 9, chunk_size: int = 64 * 1024):
        self.layout = layout
        self.compression_level = compression_level
        self.chunk_size = chunk_size

    def select(self, storage_names: list[str]) -> list[ArchiveMember]:
        """Resolve the requested names, dropping any that no longer exist."""
        if not storage_names:
            raise NoFilesProvided()

        members: list[ArchiveMember] = []
        seen: set[str] = set()
        used_arcnames: set[str] = set()
        for storage_name in storage_names:
            if storage_name in seen:
                continue
            seen.add(storage_name)
            try:
                path = self.layout.file_path(storage_name)
            except FileNotFoundInStore:
                logger.debug(f"Skipping invalid archive member {storage_name!r}")
                continue
            if not path.is_file():
                logger.debug(f"Skipping missing archive member {storage_name}")
                continue
            arcname = _unique_arcname(original_name_from_storage(storage_name), used_arcnames)
            used_arcnames.add(arcname)
            members.append(ArchiveMember(storage_name, path, arcname))
        return members

    def iter_archive(self, storage_names: list[str]) -> Iterator[bytes]:
        return self.stream(self.select(storage_names))

    def stream(self, members: list[ArchiveMember]) -> Iterator[bytes]:
        """Yield the zip archive in compressed chunks as it is produced.

        The generator is lazy and cannot be restarted. A read error after
        the first chunk aborts it with PartialArchiveFailure; whatever was
        already yielded stays with the receiver.
        """
        sink = _StreamSink()
        added = 0
        try:
            with zipfile.ZipFile(
                sink,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.compression_level,
            ) as zf:
                for member in members:
                    try:
                        zinfo = zipfile.ZipInfo.from_file(
                            member.path, member.arcname, strict_timestamps=False
                        )
                        src = open(member.path, "rb")
                    except FileNotFoundError:
                        logger.debug(f"Archive member {member.storage_name} vanished, skipping")
                        continue
                    except OSError as e:
                        logger.error(f"Archive aborted at {member.storage_name}: {e}")
                        raise PartialArchiveFailure(member.arcname, e) from e
                    zinfo.compress_type = zipfile.ZIP_DEFLATED
                    # ZipInfo carries a per-member level: compress_level on 3.13+, _compresslevel before
                    if hasattr(zinfo, "compress_level"):
                        zinfo.compress_level = self.compression_level
                    else:
                        zinfo._compresslevel = self.compression_level
                    with src:
                        try:
                            with zf.open(zinfo, "w") as dest:
                                for chunk in iter(lambda: src.read(self.chunk_size), b""):
                                    dest.write(chunk)
                                    data = sink.drain()
                                    if data:
                                        yield data
                        except OSError as e:
                            logger.error(f"Archive aborted at {member.storage_name}: {e}")
                            raise PartialArchiveFailure(member.arcname, e) from e
                    added += 1
                    data = sink.drain()
                    if data:
                        yield data
            # central directory, written when the ZipFile closes
            data = sink.drain()
            if data:
                yield data
        except GeneratorExit:
            logger.info(f"Archive stream cancelled after {added} member(s)")
            raise

        logger.info(f"Archive streamed with {added} member(s)")
