#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the default Pillow/ffprobe metadata extractor.
"""

import os
from datetime import datetime, timezone
from unittest.mock import patch

from PIL import Image

from media_catalog.scanning.discovery import discover_media_files, is_media_file
from media_catalog.scanning.metadata import (
    EXIF_ARTIST, EXIF_DATETIME, EXIF_IMAGE_DESCRIPTION, EXIF_RATING, EXIF_XP_KEYWORDS,
    PillowMetadataExtractor, split_tags,
)
from media_catalog.tests.fixtures.catalog_setup import gradient_image, write_image


class TestImageMetadata:

    def test_reads_exif_fields(self, tmp_path):
        exif = Image.Exif()
        exif[EXIF_XP_KEYWORDS] = "cat; dog;;".encode("utf-16-le") + b"\x00\x00"
        exif[EXIF_ARTIST] = "Alice"
        exif[EXIF_RATING] = 4
        exif[EXIF_IMAGE_DESCRIPTION] = "https://example.com/post/1"
        exif[EXIF_DATETIME] = "2020:05:06 07:08:09"
        path = tmp_path / "tagged.jpg"
        gradient_image(320, 240).save(path, "JPEG", exif=exif)

        meta = PillowMetadataExtractor().extract(path)
        assert meta.tags == ["cat", "dog"]
        assert meta.artist == "Alice"
        assert meta.rating == 4
        assert meta.source == "https://example.com/post/1"
        assert (meta.width, meta.height) == (320, 240)
        assert meta.captured_at == datetime(2020, 5, 6, 7, 8, 9)

    def test_capture_date_falls_back_to_mtime(self, tmp_path):
        path = write_image(tmp_path / "plain.png", gradient_image(50, 40), fmt="PNG")
        os.utime(path, (1_600_000_000, 1_600_000_000))
        meta = PillowMetadataExtractor().extract(path)
        assert meta.tags == []
        assert meta.captured_at == datetime.fromtimestamp(1_600_000_000, tz=timezone.utc)

    def test_unreadable_file_gives_empty_metadata(self, tmp_path):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"garbage")
        meta = PillowMetadataExtractor().extract(path)
        assert meta.tags == []
        assert meta.width is None


class TestVideoMetadata:

    def test_reads_container_tags(self, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"")
        probe = {
            "format": {"tags": {"GENRE": "travel;beach", "artist": "Bob",
                                "comment": "family trip", "creation_time": "2019-01-02T03:04:05Z"}},
            "streams": [{"codec_type": "audio"},
                        {"codec_type": "video", "width": 1920, "height": 1080}],
        }
        with patch("media_catalog.scanning.metadata.run_ffprobe", return_value=probe):
            meta = PillowMetadataExtractor().extract(path)
        assert meta.tags == ["travel", "beach"]
        assert meta.artist == "Bob"
        assert meta.source == "family trip"
        assert (meta.width, meta.height) == (1920, 1080)
        assert meta.captured_at == datetime(2019, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestTagSplitting:

    def test_split_tags(self):
        assert split_tags(" a ;b;; c ") == ["a", "b", "c"]
        assert split_tags(["x", " ", "y "]) == ["x", "y"]
        assert split_tags(None) == []


class TestDiscovery:

    def test_supported_extensions(self):
        assert is_media_file("photo.JPG")
        assert is_media_file("clip.webm")
        assert not is_media_file("notes.txt")

    def test_depth_first_sorted_walk(self, tmp_path):
        for rel in ("b.png", "a.jpg", "sub/z.mp4", "sub/deeper/y.gif", "c.txt"):
            target = tmp_path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"x")
        found = [p.relative_to(tmp_path).as_posix() for p in discover_media_files(tmp_path)]
        assert found == ["a.jpg", "b.png", "sub/deeper/y.gif", "sub/z.mp4"]

    def test_non_recursive(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "x.jpg").write_bytes(b"x")
        (tmp_path / "top.jpg").write_bytes(b"x")
        assert [p.name for p in discover_media_files(tmp_path, recursive=False)] == ["top.jpg"]

    def test_missing_root_yields_nothing(self, tmp_path):
        assert discover_media_files(tmp_path / "nope") == []
