#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
File discovery logic for the Media Catalog.
Walks a watched folder depth-first and collects supported media files.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List

from ..config import SUPPORTED_EXT

logger = logging.getLogger(__name__)


def is_media_file(filename: str) -> bool:
    """Check if file is a supported media type."""
    return Path(filename).suffix.lower() in SUPPORTED_EXT


def discover_media_files(root: Path, recursive: bool = True) -> List[Path]:
    """Return supported media files under root, depth-first, in name order."""
    candidates: List[Path] = []
    stats = {'total_scanned': 0, 'permission_errors': 0}
    _scan_dir(Path(root), recursive, candidates, stats)
    logger.debug("Scanned %d entries under %s, found %d media files (%d unreadable)",
                 stats['total_scanned'], root, len(candidates), stats['permission_errors'])
    return candidates


def _scan_dir(path: Path, recursive: bool, candidates: List[Path], stats: Dict[str, int]):
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        stats['permission_errors'] += 1
        logger.error("Error reading directory %s: %s", path, e)
        return

    for entry in entries:
        stats['total_scanned'] += 1
        try:
            if entry.is_dir(follow_symlinks=False):
                if recursive:
                    _scan_dir(Path(entry.path), recursive, candidates, stats)
            elif entry.is_file() and is_media_file(entry.name):
                candidates.append(Path(entry.path))
        except OSError:
            stats['permission_errors'] += 1
            continue
