"""Tests for the multipart router policy helpers."""

import pytest

from src.upload_relay.file_router import (
    FILE_ROUTER,
    CategoryLimit,
    FileRoute,
    file_category,
    parse_file_size,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("4MB", 4 * 1024 * 1024), ("512B", 512), ("1.5KB", 1536), ("1gb", 1024**3)],
)
def test_parse_file_size(value: str, expected: int) -> None:
    assert parse_file_size(value) == expected


def test_parse_file_size_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_file_size("lots")


@pytest.mark.parametrize(
    ("content_type", "filename", "expected"),
    [
        ("image/jpeg", None, "image"),
        ("video/mp4", None, "video"),
        ("audio/mpeg", None, "audio"),
        ("application/pdf", None, "pdf"),
        ("text/csv; charset=utf-8", None, "text"),
        ("application/zip", None, "blob"),
        (None, "report.pdf", "pdf"),
        (None, None, "blob"),
    ],
)
def test_file_category(content_type, filename, expected) -> None:
    assert file_category(content_type, filename) == expected


def test_governing_category_falls_back_to_blob() -> None:
    route = FileRoute(limits={"image": CategoryLimit(), "blob": CategoryLimit()})
    assert route.governing_category("image") == "image"
    assert route.governing_category("video") == "blob"
    assert FILE_ROUTER["imageUploader"].governing_category("video") is None


def test_default_routes_have_valid_sizes() -> None:
    for route in FILE_ROUTER.values():
        for limit in route.limits.values():
            assert limit.max_file_bytes > 0
