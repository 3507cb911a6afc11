#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Asset deletion and the invariant-restoring cascade.

Removing an asset has to keep three things consistent: duplicate groups
(re-elect or dissolve), tag reference counts, and the content-addressed
thumbnail directory (only collected when no surviving asset still shares the
identity hash).
"""

import logging
import sqlite3
from typing import Optional

from .database.manager import DatabaseManager
from .scanning.thumbnails import ThumbnailStore
from .tags import detach_all_tags

logger = logging.getLogger(__name__)


class DeletionCascade:
    """Deletes assets and restores group, tag and thumbnail invariants."""

    def __init__(self, db_manager: DatabaseManager, store: ThumbnailStore):
        self.db_manager = db_manager
        self.store = store

    def delete_asset(self, asset_id: int) -> bool:
        """Delete one asset. Returns False when it does not exist."""
        row = self.db_manager.query_one(
            "SELECT identity_hash, path FROM assets WHERE id = ?", (asset_id,)
        )
        if row is None:
            return False
        identity_hash = row["identity_hash"]

        former_prime = self.db_manager.transaction(
            lambda conn: self._delete_in_tx(conn, asset_id)
        )

        if former_prime is not None:
            self.db_manager.transaction(
                lambda conn: self._dissolve_if_orphaned(conn, former_prime)
            )

        self._collect_thumbnail(identity_hash)
        logger.info("Deleted asset %d (%s)", asset_id, row["path"])
        return True

    def _delete_in_tx(self, conn: sqlite3.Connection, asset_id: int) -> Optional[int]:
        """Group bookkeeping, tag release and row delete; returns the prime to re-check."""
        former_prime = None
        led = conn.execute(
            "SELECT COUNT(*) FROM duplicate_groups WHERE prime_id = ?", (asset_id,)
        ).fetchone()[0]

        if led:
            if led >= 3:
                self._reelect(conn, asset_id)
            else:
                conn.execute("DELETE FROM duplicate_groups WHERE prime_id = ?", (asset_id,))
                logger.debug("Dissolved group of prime %d", asset_id)
        else:
            member = conn.execute(
                "SELECT prime_id FROM duplicate_groups WHERE asset_id = ?", (asset_id,)
            ).fetchone()
            if member is not None:
                former_prime = member[0]

        detach_all_tags(conn, asset_id)
        conn.execute("DELETE FROM assets WHERE id = ?", (asset_id,))
        return former_prime

    def _reelect(self, conn: sqlite3.Connection, old_prime: int) -> int:
        new_prime = conn.execute(
            """
            SELECT a.id FROM duplicate_groups g
            JOIN assets a ON a.id = g.asset_id
            WHERE g.prime_id = ? AND g.asset_id != ?
            ORDER BY a.width * a.height DESC, a.id ASC
            LIMIT 1
            """,
            (old_prime, old_prime),
        ).fetchone()[0]
        conn.execute("UPDATE duplicate_groups SET prime_id = ? WHERE prime_id = ?",
                     (new_prime, old_prime))
        logger.info("Re-elected prime %d for group of deleted prime %d", new_prime, old_prime)
        return new_prime

    def _dissolve_if_orphaned(self, conn: sqlite3.Connection, prime_id: int) -> None:
        remaining = conn.execute(
            "SELECT COUNT(*) FROM duplicate_groups WHERE prime_id = ?", (prime_id,)
        ).fetchone()[0]
        if remaining == 1:
            conn.execute("DELETE FROM duplicate_groups WHERE prime_id = ?", (prime_id,))
            logger.debug("Dissolved one-member group of prime %d", prime_id)

    def _collect_thumbnail(self, identity_hash: str) -> None:
        still_used = self.db_manager.query_one(
            "SELECT 1 FROM assets WHERE identity_hash = ? LIMIT 1", (identity_hash,)
        )
        if still_used is None:
            if self.store.delete(identity_hash):
                logger.debug("Removed thumbnail %s", identity_hash)
