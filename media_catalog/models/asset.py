#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data structures for catalog assets in the Media Catalog.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, NamedTuple, Optional

from ..config import PHASH_SENTINEL


class PerceptualHashes(NamedTuple):
    """dHash fingerprints at the small/medium/large sampling resolutions."""
    small: str
    medium: str
    large: str

    @classmethod
    def sentinel(cls) -> "PerceptualHashes":
        return cls(PHASH_SENTINEL, PHASH_SENTINEL, PHASH_SENTINEL)

    @property
    def is_sentinel(self) -> bool:
        return all(h == PHASH_SENTINEL for h in self)

    def usable(self) -> List[str]:
        """Distinct hashes that may take part in duplicate matching."""
        return sorted({h for h in self if h and h != PHASH_SENTINEL})


@dataclass
class AssetMetadata:
    """Record returned by the metadata extraction collaborator."""
    tags: List[str] = field(default_factory=list)
    artist: Optional[str] = None
    rating: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    source: Optional[str] = None
    captured_at: Optional[datetime] = None


@dataclass
class Asset:
    """One physical catalog entry."""
    path: str
    filename: str
    file_type: str
    size_bytes: int
    identity_hash: str
    hashes: PerceptualHashes = field(default_factory=PerceptualHashes.sentinel)
    width: int = 0
    height: int = 0
    artist: Optional[str] = None
    rating: Optional[int] = None
    source: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    id: Optional[int] = None
