#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data structures for watched folders in the Media Catalog.
"""

import sqlite3
from dataclasses import dataclass
from typing import Optional

from ..config import parse_bool


@dataclass
class Folder:
    """A watched directory. `recursive` and `enabled` are always real bools."""
    path: str
    recursive: bool = True
    enabled: bool = True
    id: Optional[int] = None
    last_scanned_at: Optional[str] = None
    created_at: Optional[str] = None

    def __post_init__(self):
        self.path = str(self.path)
        self.recursive = parse_bool(self.recursive)
        self.enabled = parse_bool(self.enabled)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Folder":
        return cls(
            id=row["id"],
            path=row["path"],
            recursive=row["recursive"],
            enabled=row["enabled"],
            last_scanned_at=row["last_scanned_at"],
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "path": self.path,
            "recursive": self.recursive,
            "enabled": self.enabled,
            "last_scanned_at": self.last_scanned_at,
            "created_at": self.created_at,
        }
