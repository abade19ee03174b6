"""Tests for storage name derivation."""

import re

import pytest

from homeshare.utils.naming import (
    TimestampAllocator,
    build_storage_name,
    original_name_from_storage,
    sanitize_name,
    split_storage_name,
)

SAFE = re.compile(r"^[A-Za-z0-9_.-]+$")


@pytest.mark.parametrize("name", [
    "report.pdf",
    "my holiday photo (1).JPG",
    "ünïcödé файл.txt",
    "../../etc/passwd",
    'a/b\\c:d*e?f"g<h>i|j',
    "tab\tnew\nline",
    "-leading-dash-",
    "",
])
def test_sanitize_output_is_filesystem_safe(name):
    """Sanitized names only contain letters, digits, dot, dash and underscore."""
    assert SAFE.match(sanitize_name(name))


def test_sanitize_replaces_each_unsafe_character():
    assert sanitize_name("my file (1).txt") == "my_file__1_.txt"
    assert sanitize_name("keep-dashes.and.dots") == "keep-dashes.and.dots"


def test_sanitize_empty_name_gets_fallback():
    assert sanitize_name("") == "unnamed"


@pytest.mark.parametrize("name", [
    "report.pdf",
    "weird name -- 2024.tar.gz",
    "1234-5678.txt",
    "x",
])
def test_storage_name_round_trips(name):
    """Re-deriving the storage name from the recovered original is stable."""
    storage_name = build_storage_name(1700000000123, name)
    timestamp, original = split_storage_name(storage_name)

    assert timestamp == 1700000000123
    assert storage_name == f"{timestamp}-{original}"
    assert build_storage_name(timestamp, original) == storage_name


def test_original_name_keeps_later_dashes():
    assert original_name_from_storage("1700000000000-a-b-c.txt") == "a-b-c.txt"


def test_foreign_names_are_returned_whole():
    """Files dropped into the root by hand have no timestamp prefix."""
    assert split_storage_name("notes.txt") == (None, "notes.txt")
    assert split_storage_name("abc-notes.txt") == (None, "abc-notes.txt")
    assert split_storage_name("123-") == (None, "123-")


def test_allocator_never_repeats_within_same_millisecond():
    allocator = TimestampAllocator(clock=lambda: 1700000000.0)

    values = [allocator.next() for _ in range(5)]

    assert values == [1700000000000 + i for i in range(5)]


def test_allocator_follows_clock_when_it_advances():
    ticks = iter([1.0, 1.0, 5.0])
    allocator = TimestampAllocator(clock=lambda: next(ticks))

    assert allocator.next() == 1000
    assert allocator.next() == 1001
    assert allocator.next() == 5000
