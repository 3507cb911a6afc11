#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Asset command implementations for the Media Catalog.
"""

import logging
import os

from ..cascade import DeletionCascade
from ..database.manager import DatabaseManager
from ..jsonio import success, error
from ..scanning.thumbnails import ThumbnailStore

logger = logging.getLogger(__name__)


def cmd_delete_asset(db_manager: DatabaseManager, store: ThumbnailStore, asset_id: int,
                     delete_file: bool = False, as_json: bool = False) -> int:
    """Remove an asset from the catalog, optionally deleting the file on disk as well."""
    row = db_manager.query_one("SELECT path FROM assets WHERE id = ?", (asset_id,))
    if row is None:
        if as_json:
            return error("delete", f"Asset {asset_id} not found")
        print(f"Asset {asset_id} not found.")
        return 1

    path = row["path"]
    DeletionCascade(db_manager, store).delete_asset(asset_id)

    file_deleted = False
    if delete_file:
        try:
            os.remove(path)
            file_deleted = True
        except FileNotFoundError:
            logger.warning("File already gone: %s", path)
        except OSError as e:
            logger.error("Failed to delete file %s: %s", path, e)

    if as_json:
        return success("delete", {
            "asset_id": asset_id,
            "path": path,
            "file_deleted": file_deleted,
        })
    print(f"Deleted asset {asset_id}: {path}" + (" (file removed)" if file_deleted else ""))
    return 0
