#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Thumbnail and perceptual-hash generation for the Media Catalog.

Thumbnails are content-addressed: one JPEG per identity hash, shared by every
asset whose bytes are identical. Perceptual hashes are 64-bit dHashes taken
at three bounding-box resolutions so that assets resized independently
before ingestion still line up at one of them.
"""

import io
import logging
import os
import tempfile
import warnings
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

import imagehash
from PIL import Image, ImageFile

from ..config import (
    DEFAULT_BLACK_FRAME_THRESHOLD, DEFAULT_THUMBNAIL_SIZE, DEFAULT_WHITE_FRAME_THRESHOLD,
    INTERMEDIATE_JPEG_QUALITY, JPEG_COMPATIBLE_MODES, PHASH_RESOLUTIONS, PHASH_SENTINEL,
    THUMBNAIL_JPEG_QUALITY, VIDEO_EXT,
)
from ..database.manager import DatabaseManager
from ..errors import CodecError
from ..models.asset import PerceptualHashes
from ..utils.path import ensure_dir
from .video import sample_representative_frame

logger = logging.getLogger(__name__)

# Best-effort decode of truncated/corrupt streams
ImageFile.LOAD_TRUNCATED_IMAGES = True

# Suppress PIL warnings
warnings.filterwarnings("ignore", category=UserWarning,
                        message=".*Palette images with Transparency expressed in bytes.*")


class ThumbnailStore:
    """Content-addressed thumbnail directory keyed by identity hash."""

    def __init__(self, directory: Path, size: int = DEFAULT_THUMBNAIL_SIZE):
        self.directory = Path(directory)
        self.size = size

    def path_for(self, identity_hash: str) -> Path:
        return self.directory / f"{identity_hash}.jpg"

    def exists(self, identity_hash: str) -> bool:
        return self.path_for(identity_hash).is_file()

    def write(self, identity_hash: str, image: Image.Image) -> Path:
        """Write the display thumbnail: larger side = size, aspect kept, never upscaled."""
        ensure_dir(self.directory)
        thumb = image.copy()
        thumb.thumbnail((self.size, self.size), Image.LANCZOS)
        if thumb.mode != "RGB":
            thumb = thumb.convert("RGB")
        target = self.path_for(identity_hash)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".thumb-", suffix=".jpg")
        try:
            with os.fdopen(fd, "wb") as f:
                thumb.save(f, "JPEG", quality=THUMBNAIL_JPEG_QUALITY)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return target

    def delete(self, identity_hash: str) -> bool:
        try:
            self.path_for(identity_hash).unlink()
            return True
        except FileNotFoundError:
            return False


def compute_dhash(image: Image.Image) -> str:
    """64-bit difference hash as 16 lowercase hex chars.

    The image is reduced to a 9x8 grayscale grid; bit k is set when a pixel
    is strictly darker than its right-hand neighbour.
    """
    return str(imagehash.dhash(image, hash_size=8))


def _hash_at(image: Image.Image, box: int) -> str:
    image.thumbnail((box, box), Image.LANCZOS)
    return compute_dhash(image)


def compute_perceptual_hashes(image: Image.Image) -> PerceptualHashes:
    """dHash at the small/medium/large bounding boxes, computed concurrently."""
    # Each worker gets its own copy; nothing is shared between them
    copies = [image.copy() for _ in PHASH_RESOLUTIONS]
    with ThreadPoolExecutor(max_workers=len(PHASH_RESOLUTIONS)) as executor:
        futures = [executor.submit(_hash_at, copy, box)
                   for copy, box in zip(copies, PHASH_RESOLUTIONS)]
        small, medium, large = (f.result() for f in futures)
    return PerceptualHashes(small, medium, large)


def _needs_jpeg_intermediate(image: Image.Image) -> bool:
    return image.format == "WEBP" or image.mode not in JPEG_COMPATIBLE_MODES


def _to_jpeg_intermediate(image: Image.Image) -> Image.Image:
    buf = io.BytesIO()
    image.convert("RGB").save(buf, "JPEG", quality=INTERMEDIATE_JPEG_QUALITY)
    buf.seek(0)
    with Image.open(buf) as converted:
        converted.load()
        return converted.copy()


def decode_still(path: Path) -> Image.Image:
    try:
        with Image.open(path) as image:
            image.load()
            if _needs_jpeg_intermediate(image):
                return _to_jpeg_intermediate(image)
            return image.copy()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise CodecError(f"Cannot decode {path}: {e}") from e


class ThumbnailGenerator:
    """Produces the display thumbnail and perceptual hashes for one file."""

    def __init__(self, db_manager: DatabaseManager, store: ThumbnailStore,
                 phash_enabled: bool = True,
                 black_threshold: float = DEFAULT_BLACK_FRAME_THRESHOLD,
                 white_threshold: float = DEFAULT_WHITE_FRAME_THRESHOLD):
        self.db_manager = db_manager
        self.store = store
        self.phash_enabled = phash_enabled
        self.black_threshold = black_threshold
        self.white_threshold = white_threshold

    def generate(self, path: Path, identity_hash: str) -> PerceptualHashes:
        path = Path(path)
        if self.store.exists(identity_hash):
            existing = self._stored_hashes(identity_hash)
            if existing is not None:
                logger.debug("Reusing hashes of identical content for %s", path.name)
                return existing

        try:
            image = self.decode(path)
            hashes = (compute_perceptual_hashes(image) if self.phash_enabled
                      else PerceptualHashes.sentinel())
        except CodecError as e:
            logger.error("Failed to generate thumbnail for %s: %s", path, e)
            return PerceptualHashes.sentinel()

        try:
            self.store.write(identity_hash, image)
            logger.debug("Generated thumbnail for: %s", path.name)
        except OSError as e:
            logger.error("Failed to write thumbnail for %s: %s", path, e)
        return hashes

    def decode(self, path: Path) -> Image.Image:
        if path.suffix.lower() in VIDEO_EXT:
            return sample_representative_frame(path, self.black_threshold, self.white_threshold)
        return decode_still(path)

    def _stored_hashes(self, identity_hash: str) -> Optional[PerceptualHashes]:
        row = self.db_manager.query_one(
            "SELECT phash_small, phash_medium, phash_large FROM assets "
            "WHERE identity_hash = ? LIMIT 1",
            (identity_hash,),
        )
        if row is None:
            return None
        return PerceptualHashes(*(h or PHASH_SENTINEL for h in row))
