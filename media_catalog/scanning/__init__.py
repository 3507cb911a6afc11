"""Scanning and processing modules for the Media Catalog.

The scan orchestrator lives in `scanning.scanner`; it is imported from there
directly since it depends on the cascade, which depends on this package.
"""

from .hasher import compute_identity_hash
from .discovery import discover_media_files, is_media_file
from .lock import SCAN_LOCK, ScanLock
from .thumbnails import ThumbnailGenerator, ThumbnailStore, compute_dhash, compute_perceptual_hashes
from .metadata import MetadataExtractor, PillowMetadataExtractor

__all__ = [
    'compute_identity_hash',
    'discover_media_files',
    'is_media_file',
    'SCAN_LOCK',
    'ScanLock',
    'ThumbnailGenerator',
    'ThumbnailStore',
    'compute_dhash',
    'compute_perceptual_hashes',
    'MetadataExtractor',
    'PillowMetadataExtractor',
]
