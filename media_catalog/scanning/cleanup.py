#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Cleanup sweep: drop catalog entries whose files no longer exist.
"""

import logging
import os
from typing import Optional

from ..cascade import DeletionCascade
from ..database.manager import DatabaseManager
from ..utils.path import escape_like

logger = logging.getLogger(__name__)


def cleanup_deleted_files(db_manager: DatabaseManager, cascade: DeletionCascade,
                          path_prefix: Optional[str] = None) -> int:
    """Delete every asset (optionally under path_prefix) whose file is gone. Returns the count."""
    if path_prefix:
        # Bounded at a separator: "/media/a" covers "/media/a/x" but not "/media/ab/x"
        prefix = str(path_prefix).rstrip(os.sep) or os.sep
        under = escape_like(prefix.rstrip(os.sep) + os.sep) + "%"
        rows = db_manager.query(
            "SELECT id, path FROM assets WHERE path = ? OR path LIKE ? ESCAPE '\\' ORDER BY id",
            (prefix, under),
        )
    else:
        rows = db_manager.query("SELECT id, path FROM assets ORDER BY id")

    removed = 0
    for row in rows:
        if os.path.exists(row["path"]):
            continue
        logger.info("Removing deleted file: %s", row["path"])
        try:
            if cascade.delete_asset(row["id"]):
                removed += 1
        except Exception as e:
            logger.error("Failed to remove %s from catalog: %s", row["path"], e)

    logger.info("Cleanup complete: %d deleted files removed from database", removed)
    return removed
