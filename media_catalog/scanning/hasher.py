#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Content identity hashing for the Media Catalog.
"""

import hashlib
from pathlib import Path

from ..config import DEFAULT_STREAMING_THRESHOLD_BYTES, HASH_CHUNK_BYTES
from ..errors import FileIOError


def compute_identity_hash(path: Path,
                          streaming_threshold: int = DEFAULT_STREAMING_THRESHOLD_BYTES) -> str:
    """Compute the SHA-256 of the full file, streaming anything above the threshold."""
    path = Path(path)
    h = hashlib.sha256()
    try:
        if path.stat().st_size > streaming_threshold:
            with path.open('rb') as f:
                for chunk in iter(lambda: f.read(HASH_CHUNK_BYTES), b""):
                    h.update(chunk)
        else:
            h.update(path.read_bytes())
    except OSError as e:
        raise FileIOError(path, f"Cannot hash {path}: {e}") from e
    return h.hexdigest()
