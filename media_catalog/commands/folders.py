#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Watched-folder command implementations for the Media Catalog.
"""

import logging
from typing import Optional

from ..database.manager import DatabaseManager
from ..folders import FolderRegistry
from ..jsonio import success, error

logger = logging.getLogger(__name__)


def cmd_add_folder(db_manager: DatabaseManager, path: str, recursive: bool = True,
                   as_json: bool = False) -> int:
    """Register a folder for scanning."""
    registry = FolderRegistry(db_manager)
    try:
        folder = registry.add(path, recursive=recursive)
    except ValueError as e:
        if as_json:
            return error("add-folder", str(e))
        print(str(e))
        return 1

    if as_json:
        return success("add-folder", folder.to_dict())
    print(f"Added folder {folder.id}: {folder.path} (recursive: {folder.recursive})")
    return 0


def cmd_list_folders(db_manager: DatabaseManager, as_json: bool = False) -> int:
    """List watched folders, newest first."""
    folders = FolderRegistry(db_manager).list()

    if as_json:
        return success("list-folders", {
            "folders": [f.to_dict() for f in folders],
            "total_count": len(folders),
        })

    if not folders:
        print("No folders configured.")
        return 0

    print(f"{'ID':<6} {'Path':<50} {'Recursive':<10} {'Enabled':<8} {'Last scanned':<20}")
    print("-" * 98)
    for f in folders:
        short_path = f.path if len(f.path) <= 47 else "..." + f.path[-44:]
        print(f"{f.id:<6} {short_path:<50} {str(f.recursive):<10} {str(f.enabled):<8} "
              f"{f.last_scanned_at or 'never':<20}")
    return 0


def cmd_set_folder(db_manager: DatabaseManager, folder_id: int,
                   recursive: Optional[bool] = None, enabled: Optional[bool] = None,
                   as_json: bool = False) -> int:
    """Change a folder's recursive/enabled flags."""
    registry = FolderRegistry(db_manager)
    if registry.get(folder_id) is None:
        if as_json:
            return error("set-folder", f"Folder {folder_id} not found")
        print(f"Folder {folder_id} not found.")
        return 1

    try:
        folder = registry.update(folder_id, recursive=recursive, enabled=enabled)
    except ValueError as e:
        if as_json:
            return error("set-folder", str(e))
        print(str(e))
        return 1

    if as_json:
        return success("set-folder", folder.to_dict())
    print(f"Folder {folder.id}: recursive={folder.recursive} enabled={folder.enabled}")
    return 0


def cmd_remove_folder(db_manager: DatabaseManager, folder_id: int, as_json: bool = False) -> int:
    """Stop watching a folder."""
    removed = FolderRegistry(db_manager).remove(folder_id)
    if not removed:
        if as_json:
            return error("remove-folder", f"Folder {folder_id} not found")
        print(f"Folder {folder_id} not found.")
        return 1

    if as_json:
        return success("remove-folder", {"folder_id": folder_id, "removed": True})
    print(f"Removed folder {folder_id}")
    return 0
