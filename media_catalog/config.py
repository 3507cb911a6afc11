#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Global configuration and constants for the Media Catalog.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Set

from .errors import ConfigurationError

# File type categories
IMAGE_EXT: Set[str] = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
VIDEO_EXT: Set[str] = {".mp4", ".webm", ".mkv"}
SUPPORTED_EXT: Set[str] = IMAGE_EXT | VIDEO_EXT

# Formats Pillow can hand straight to the JPEG encoder
JPEG_COMPATIBLE_MODES: Set[str] = {"RGB", "L", "CMYK"}

# Perceptual hashing
PHASH_RESOLUTIONS = (600, 800, 1400)  # small, medium, large bounding boxes
PHASH_SENTINEL = "0" * 16
DUPLICATE_MARKER_TAG = "duplicate_image"

# Video frame sampling (mean brightness on a 0-255 scale)
DEFAULT_BLACK_FRAME_THRESHOLD = 30.0
DEFAULT_WHITE_FRAME_THRESHOLD = 255.0 - 15.0 / 255.0

# Thumbnails
DEFAULT_THUMBNAIL_SIZE = 300
THUMBNAIL_JPEG_QUALITY = 85
INTERMEDIATE_JPEG_QUALITY = 90

# Identity hashing
DEFAULT_STREAMING_THRESHOLD_BYTES = 50 * 1024 * 1024  # 50MB
HASH_CHUNK_BYTES = 1024 * 1024

# Store transactions
DEFAULT_TX_MAX_ATTEMPTS = 3
TX_BASE_DELAY_SECONDS = 0.1

# Defaults (can be overridden by environment or CLI)
DEFAULT_DB_PATH = "media_catalog.db"
DEFAULT_THUMBNAIL_DIR = "thumbnails"
DEFAULT_SCAN_INTERVAL_MINUTES = 15

ENV_PREFIX = "MEDIA_CATALOG_"

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def parse_bool(value: Any) -> bool:
    """Normalize a loosely typed flag (bool, str or number) into a bool."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value == 1
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"Cannot interpret {value!r} as a boolean")


@dataclass
class CatalogConfig:
    """Runtime settings shared by the scanner, generator and CLI."""
    db_path: Path = Path(DEFAULT_DB_PATH)
    thumbnail_dir: Path = Path(DEFAULT_THUMBNAIL_DIR)
    thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE
    phash_enabled: bool = True
    black_frame_threshold: float = DEFAULT_BLACK_FRAME_THRESHOLD
    white_frame_threshold: float = DEFAULT_WHITE_FRAME_THRESHOLD
    streaming_threshold_bytes: int = DEFAULT_STREAMING_THRESHOLD_BYTES
    scan_interval_minutes: int = DEFAULT_SCAN_INTERVAL_MINUTES
    tx_max_attempts: int = DEFAULT_TX_MAX_ATTEMPTS
    show_progress: bool = False

    def __post_init__(self):
        self.db_path = Path(self.db_path)
        self.thumbnail_dir = Path(self.thumbnail_dir)
        if self.thumbnail_size <= 0:
            raise ConfigurationError("thumbnail_size must be positive")
        if not 0 <= self.black_frame_threshold < self.white_frame_threshold <= 255:
            raise ConfigurationError(
                f"Invalid frame thresholds: {self.black_frame_threshold} / {self.white_frame_threshold}"
            )
        if self.tx_max_attempts < 1:
            raise ConfigurationError("tx_max_attempts must be at least 1")

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "CatalogConfig":
        """Build a config from MEDIA_CATALOG_* variables, then apply explicit overrides."""
        env = os.environ if environ is None else environ

        def get(name, default=None):
            return env.get(ENV_PREFIX + name, default)

        values = {}
        if get("DB"):
            values["db_path"] = Path(get("DB"))
        if get("THUMBNAIL_DIR"):
            values["thumbnail_dir"] = Path(get("THUMBNAIL_DIR"))
        try:
            if get("THUMBNAIL_SIZE"):
                values["thumbnail_size"] = int(get("THUMBNAIL_SIZE"))
            if get("SCAN_INTERVAL_MINUTES"):
                values["scan_interval_minutes"] = int(get("SCAN_INTERVAL_MINUTES"))
            if get("TX_MAX_ATTEMPTS"):
                values["tx_max_attempts"] = int(get("TX_MAX_ATTEMPTS"))
            if get("BLACK_FRAME_THRESHOLD"):
                values["black_frame_threshold"] = float(get("BLACK_FRAME_THRESHOLD"))
            if get("WHITE_FRAME_THRESHOLD"):
                values["white_frame_threshold"] = float(get("WHITE_FRAME_THRESHOLD"))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e
        if get("PHASH_ENABLED") is not None:
            values["phash_enabled"] = parse_bool(get("PHASH_ENABLED"))

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
