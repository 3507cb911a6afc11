#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Watched-folder registry for the Media Catalog.
"""

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from .config import parse_bool
from .database.manager import DatabaseManager
from .models.folder import Folder
from .utils.time import utc_now_str

logger = logging.getLogger(__name__)


class FolderRegistry:
    """CRUD over the `folders` table."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def add(self, path, recursive=True, enabled=True) -> Folder:
        """Register a folder; raises ValueError if it is already watched."""
        normalized = str(Path(path).expanduser().resolve())
        try:
            cur = self.db_manager.execute(
                "INSERT INTO folders (path, recursive, enabled) VALUES (?, ?, ?)",
                (normalized, int(parse_bool(recursive)), int(parse_bool(enabled))),
            )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Folder already exists: {normalized}") from e
        logger.info("Added folder %s", normalized)
        return self.get(cur.lastrowid)

    def get(self, folder_id: int) -> Optional[Folder]:
        row = self.db_manager.query_one("SELECT * FROM folders WHERE id = ?", (folder_id,))
        return Folder.from_row(row) if row else None

    def find_by_path(self, path) -> Optional[Folder]:
        normalized = str(Path(path).expanduser().resolve())
        row = self.db_manager.query_one("SELECT * FROM folders WHERE path = ?", (normalized,))
        return Folder.from_row(row) if row else None

    def list(self, enabled_only: bool = False) -> List[Folder]:
        sql = "SELECT * FROM folders"
        if enabled_only:
            sql += " WHERE enabled = 1"
        sql += " ORDER BY created_at DESC, id DESC"
        return [Folder.from_row(r) for r in self.db_manager.query(sql)]

    def update(self, folder_id: int, recursive=None, enabled=None) -> Optional[Folder]:
        updates, params = [], []
        if recursive is not None:
            updates.append("recursive = ?")
            params.append(int(parse_bool(recursive)))
        if enabled is not None:
            updates.append("enabled = ?")
            params.append(int(parse_bool(enabled)))
        if not updates:
            raise ValueError("No valid updates provided")
        params.append(folder_id)
        self.db_manager.execute(f"UPDATE folders SET {', '.join(updates)} WHERE id = ?", params)
        return self.get(folder_id)

    def remove(self, folder_id: int) -> bool:
        """Stop watching a folder. Its assets stay in the catalog."""
        cur = self.db_manager.execute("DELETE FROM folders WHERE id = ?", (folder_id,))
        return cur.rowcount > 0

    def stamp_scanned(self, folder_id: int) -> str:
        stamp = utc_now_str()
        self.db_manager.execute(
            "UPDATE folders SET last_scanned_at = ? WHERE id = ?", (stamp, folder_id)
        )
        return stamp
