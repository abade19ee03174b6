"""Tests for the upload ingestion pipeline."""

import asyncio
import re

import pytest
from PIL import Image

from homeshare.errors import NoFilesProvided, PayloadTooLarge, StorageIOError, TooManyFiles
from homeshare.models.files import Category
from homeshare.services.ingestion import IncomingFile, IngestionPipeline
from homeshare.utils.naming import TimestampAllocator, original_name_from_storage


def _stored_names(layout):
    return sorted(p.name for p in layout.root.iterdir() if p.is_file())


def test_ingest_streams_file_to_timestamped_name(share, make_incoming):
    """Uploaded bytes land on disk under <millis>-<sanitized name>."""
    data = b"hello world, this is a test upload" * 10

    [info] = asyncio.run(share.ingestion.ingest([make_incoming("hello world.txt", data, "text/plain")]))

    assert re.match(r"^\d+-hello_world\.txt$", info.storage_name)
    assert info.original_name == "hello world.txt"
    assert info.size == len(data)
    assert info.mime_type == "text/plain"
    assert info.category == Category.DOCUMENTS
    assert info.has_thumbnail is False
    assert (share.layout.root / info.storage_name).read_bytes() == data


def test_batch_keeps_arrival_order(share, make_incoming):
    batch = [make_incoming(f"file{i}.bin", bytes([i]) * 10) for i in range(3)]

    results = asyncio.run(share.ingestion.ingest(batch))

    assert [r.original_name for r in results] == ["file0.bin", "file1.bin", "file2.bin"]
    assert len(_stored_names(share.layout)) == 3


def test_image_upload_gets_thumbnail(share, make_incoming, png_bytes):
    [info] = asyncio.run(share.ingestion.ingest([make_incoming("pic.png", png_bytes, "image/png")]))

    assert info.has_thumbnail is True
    assert info.category == Category.IMAGES
    with Image.open(share.layout.thumbnail_path(info.storage_name)) as thumb:
        assert max(thumb.size) <= 200


def test_broken_image_is_still_ingested(share, make_incoming):
    """Thumbnail failure is logged, never surfaced."""
    [info] = asyncio.run(share.ingestion.ingest([make_incoming("pic.jpg", b"garbage", "image/jpeg")]))

    assert info.has_thumbnail is False
    assert (share.layout.root / info.storage_name).exists()
    assert not share.layout.thumbnail_path(info.storage_name).exists()


def test_non_image_mime_skips_thumbnail(share, make_incoming, png_bytes):
    """Only the declared MIME type decides, not the extension."""
    [info] = asyncio.run(share.ingestion.ingest([make_incoming("pic.png", png_bytes, "application/octet-stream")]))

    assert info.has_thumbnail is False


def test_missing_mime_type_defaults_to_octet_stream(share, make_incoming):
    [info] = asyncio.run(share.ingestion.ingest([make_incoming("x.dat", b"1", content_type=None)]))

    assert info.mime_type == "application/octet-stream"


def test_max_files_batch_is_accepted(share, make_incoming, settings):
    batch = [make_incoming(f"f{i}.txt", b"x") for i in range(settings.max_files)]

    results = asyncio.run(share.ingestion.ingest(batch))

    assert len(results) == settings.max_files


def test_batch_over_max_files_is_rejected_wholesale(share, make_incoming, settings):
    batch = [make_incoming(f"f{i}.txt", b"x") for i in range(settings.max_files + 1)]

    with pytest.raises(TooManyFiles):
        asyncio.run(share.ingestion.ingest(batch))

    assert _stored_names(share.layout) == []


def test_declared_oversize_rejects_before_writing(share, make_incoming, settings):
    batch = [
        make_incoming("ok.txt", b"x"),
        make_incoming("huge.bin", b"x", size=settings.max_file_size + 1),
    ]

    with pytest.raises(PayloadTooLarge, match="huge.bin"):
        asyncio.run(share.ingestion.ingest(batch))

    assert _stored_names(share.layout) == []


def test_stream_longer_than_limit_rolls_back_batch(share, make_incoming, settings, png_bytes):
    """A source that sends more than it declared undoes the whole batch."""
    batch = [
        make_incoming("first.png", png_bytes, "image/png"),
        make_incoming("liar.bin", b"x" * (settings.max_file_size + 1), size=10, chunk=4096),
    ]

    with pytest.raises(PayloadTooLarge):
        asyncio.run(share.ingestion.ingest(batch))

    assert _stored_names(share.layout) == []
    assert list(share.layout.thumbnail_dir.iterdir()) == []


def test_empty_batch_is_rejected(share):
    with pytest.raises(NoFilesProvided):
        asyncio.run(share.ingestion.ingest([]))


def test_same_millisecond_uploads_do_not_collide(settings, layout, make_incoming, share):
    pipeline = IngestionPipeline(
        settings,
        layout,
        share.ingestion.thumbnails,
        allocator=TimestampAllocator(clock=lambda: 1700000000.0),
    )
    batch = [make_incoming("same.txt", b"first"), make_incoming("same.txt", b"second")]

    first, second = asyncio.run(pipeline.ingest(batch))

    assert first.storage_name != second.storage_name
    assert (layout.root / first.storage_name).read_bytes() == b"first"
    assert (layout.root / second.storage_name).read_bytes() == b"second"
    assert original_name_from_storage(first.storage_name) == "same.txt"
    assert original_name_from_storage(second.storage_name) == "same.txt"


def test_existing_file_on_disk_is_never_overwritten(settings, layout, make_incoming, share):
    """Another process already holds the name: the next timestamp is used."""
    (layout.root / "1700000000000-same.txt").write_bytes(b"foreign")
    pipeline = IngestionPipeline(
        settings,
        layout,
        share.ingestion.thumbnails,
        allocator=TimestampAllocator(clock=lambda: 1700000000.0),
    )

    [info] = asyncio.run(pipeline.ingest([make_incoming("same.txt", b"mine")]))

    assert info.storage_name == "1700000000001-same.txt"
    assert (layout.root / "1700000000000-same.txt").read_bytes() == b"foreign"


def test_dangerous_extension_is_accepted_with_warning(share, make_incoming, caplog):
    with caplog.at_level("WARNING", logger="homeshare"):
        [info] = asyncio.run(share.ingestion.ingest([make_incoming("setup.exe", b"MZ")]))

    assert info.category == Category.OTHER
    assert "Potentially dangerous file uploaded: setup.exe" in caplog.text


def test_name_the_disk_refuses_is_a_storage_error(share, make_incoming):
    """A filename too long for the filesystem rolls back and reports a storage error."""
    batch = [
        make_incoming("ok.txt", b"x"),
        make_incoming("a" * 300 + ".txt", b"hi"),
    ]

    with pytest.raises(StorageIOError, match="File name too long"):
        asyncio.run(share.ingestion.ingest(batch))

    assert _stored_names(share.layout) == []


def test_failure_while_streaming_removes_partial_file(share):
    async def failing_chunks():
        yield b"first part"
        raise OSError(5, "Input/output error")

    item = IncomingFile(
        filename="broken.bin",
        content_type="application/octet-stream",
        size=100,
        chunks=failing_chunks(),
    )

    with pytest.raises(StorageIOError) as exc_info:
        asyncio.run(share.ingestion.ingest([item]))

    assert exc_info.value.status_code == 500
    assert "Input/output error" in exc_info.value.message
    assert _stored_names(share.layout) == []
