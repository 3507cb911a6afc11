#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Default metadata extraction for the Media Catalog.

The ingestion core only depends on the MetadataExtractor protocol; this
module provides a Pillow/ffprobe based implementation.

Tags:
  JPEG/others: EXIF XPKeywords (UTF-16LE, semicolon separated)
  Video: container `genre` tag (semicolon separated)
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Protocol

from PIL import Image

from ..config import VIDEO_EXT
from ..errors import CodecError
from ..models.asset import AssetMetadata
from .video import run_ffprobe

logger = logging.getLogger(__name__)

# EXIF tag ids
EXIF_IMAGE_DESCRIPTION = 0x010E
EXIF_ARTIST = 0x013B
EXIF_DATETIME = 0x0132
EXIF_RATING = 0x4746
EXIF_XP_KEYWORDS = 0x9C9E
EXIF_IFD = 0x8769
EXIF_DATETIME_ORIGINAL = 0x9003

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


class MetadataExtractor(Protocol):
    def extract(self, path: Path) -> AssetMetadata:
        ...


def split_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(t).strip() for t in value if str(t).strip()]
    return [t.strip() for t in str(value).split(";") if t.strip()]


def _decode_xp(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, tuple)):
        return bytes(value).decode("utf-16-le", errors="ignore").rstrip("\x00")
    return str(value)


def _parse_exif_date(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.strptime(str(value).strip("\x00 "), EXIF_DATE_FORMAT)
    except ValueError:
        return None
    return parsed if parsed.year >= 1900 else None


def _parse_iso_date(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.year >= 1900 else None


def _parse_rating(value: Any) -> Optional[int]:
    try:
        return int(str(value)) if value is not None else None
    except ValueError:
        return None


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip("\x00 ").strip()
    return text or None


class PillowMetadataExtractor:
    """Reads tags, artist, rating, size, source and capture date."""

    def extract(self, path: Path) -> AssetMetadata:
        path = Path(path)
        try:
            if path.suffix.lower() in VIDEO_EXT:
                meta = self._extract_video(path)
            else:
                meta = self._extract_image(path)
        except (OSError, ValueError, CodecError) as e:
            logger.error("Failed to extract metadata from %s: %s", path, e)
            return AssetMetadata()

        if meta.captured_at is None:
            try:
                meta.captured_at = datetime.fromtimestamp(os.stat(path).st_mtime, tz=timezone.utc)
            except OSError:
                pass
        return meta

    def _extract_image(self, path: Path) -> AssetMetadata:
        with Image.open(path) as img:
            width, height = img.size
            exif = img.getexif()
            sub = exif.get_ifd(EXIF_IFD) if exif else {}

        return AssetMetadata(
            tags=split_tags(_decode_xp(exif.get(EXIF_XP_KEYWORDS))),
            artist=_clean_text(exif.get(EXIF_ARTIST)),
            rating=_parse_rating(exif.get(EXIF_RATING)),
            width=width,
            height=height,
            source=_clean_text(exif.get(EXIF_IMAGE_DESCRIPTION)),
            captured_at=(_parse_exif_date(sub.get(EXIF_DATETIME_ORIGINAL))
                         or _parse_exif_date(exif.get(EXIF_DATETIME))),
        )

    def _extract_video(self, path: Path) -> AssetMetadata:
        probe = run_ffprobe(path)
        fmt_tags = {str(k).lower(): v for k, v in ((probe.get("format") or {}).get("tags") or {}).items()}
        width = height = None
        for stream in probe.get("streams") or []:
            if isinstance(stream, dict) and stream.get("codec_type") == "video":
                width, height = stream.get("width"), stream.get("height")
                break
        return AssetMetadata(
            tags=split_tags(fmt_tags.get("genre")),
            artist=_clean_text(fmt_tags.get("artist")),
            rating=_parse_rating(fmt_tags.get("rating")),
            width=width,
            height=height,
            source=_clean_text(fmt_tags.get("comment") or fmt_tags.get("description")),
            captured_at=_parse_iso_date(fmt_tags.get("creation_time")),
        )
