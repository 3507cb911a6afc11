#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Perceptual duplicate grouping.

A newly ingested asset is matched against every stored dHash. Matches fold
into one group whose prime is the largest member by pixel area; tags are
unioned onto the prime and every member carries the duplicate marker tag.
"""

import logging
import sqlite3
from typing import Dict, List, Optional

from .config import DUPLICATE_MARKER_TAG
from .database.manager import DatabaseManager
from .models.asset import PerceptualHashes
from .tags import attach_tags, tags_for_assets

logger = logging.getLogger(__name__)


def _px(w: Optional[int], h: Optional[int]) -> int:
    return (w or 0) * (h or 0)


def find_matches(conn: sqlite3.Connection, hashes: PerceptualHashes) -> List[sqlite3.Row]:
    """Assets whose any stored hash equals any of the given hashes, largest first."""
    usable = hashes.usable()
    if not usable:
        return []
    marks = ", ".join("?" for _ in usable)
    return conn.execute(
        f"""
        SELECT id, width, height, path FROM assets
        WHERE phash_small IN ({marks}) OR phash_medium IN ({marks}) OR phash_large IN ({marks})
        ORDER BY width * height DESC, id ASC
        """,
        usable * 3,
    ).fetchall()


def _existing_primes(conn: sqlite3.Connection, ids: List[int]) -> List[int]:
    """Primes of every group any of `ids` belongs to, largest prime first."""
    marks = ", ".join("?" for _ in ids)
    rows = conn.execute(
        f"""
        SELECT DISTINCT g.prime_id FROM duplicate_groups g
        JOIN assets p ON p.id = g.prime_id
        WHERE g.asset_id IN ({marks})
        ORDER BY p.width * p.height DESC, p.id ASC
        """,
        ids,
    ).fetchall()
    return [r[0] for r in rows]


def _group_members(conn: sqlite3.Connection, prime_id: int) -> List[sqlite3.Row]:
    return conn.execute(
        """
        SELECT a.id, a.width, a.height, a.path FROM duplicate_groups g
        JOIN assets a ON a.id = g.asset_id
        WHERE g.prime_id = ?
        """,
        (prime_id,),
    ).fetchall()


def _upsert_membership(conn: sqlite3.Connection, asset_id: int, prime_id: int) -> None:
    conn.execute(
        """
        INSERT INTO duplicate_groups (asset_id, prime_id) VALUES (?, ?)
        ON CONFLICT(asset_id) DO UPDATE SET prime_id = excluded.prime_id
        """,
        (asset_id, prime_id),
    )


class DuplicateGroupResolver:
    """Places a freshly inserted asset into a duplicate group and elects the prime."""

    def __init__(self, db_manager: DatabaseManager, marker_tag: str = DUPLICATE_MARKER_TAG):
        self.db_manager = db_manager
        self.marker_tag = marker_tag

    def resolve(self, asset_id: int, hashes: PerceptualHashes) -> Optional[int]:
        """Returns the prime id of the resulting group, or None when no group applies."""
        return self.db_manager.transaction(lambda conn: self._resolve(conn, asset_id, hashes))

    def _resolve(self, conn: sqlite3.Connection, asset_id: int,
                 hashes: PerceptualHashes) -> Optional[int]:
        matches = find_matches(conn, hashes)
        if len(matches) < 2:
            return None

        members: Dict[int, sqlite3.Row] = {r["id"]: r for r in matches}
        existing_primes = _existing_primes(conn, list(members))
        existing_prime_id = existing_primes[0] if existing_primes else None

        if existing_prime_id is not None:
            # Matches can bridge several groups; they all fold into one
            for old_prime in existing_primes:
                for row in _group_members(conn, old_prime):
                    members.setdefault(row["id"], row)
            prime_id = existing_prime_id
            prime = members.get(existing_prime_id)
            new = members.get(asset_id)
            # Only the new asset may displace the existing prime, and only when strictly larger
            if prime is not None and new is not None and asset_id != existing_prime_id:
                if _px(new["width"], new["height"]) > _px(prime["width"], prime["height"]):
                    prime_id = asset_id
        else:
            prime_id = matches[0]["id"]

        for member_id in members:
            _upsert_membership(conn, member_id, prime_id)

        logger.info("Duplicate detected: %d assets with same content, prime ID %d (%s)",
                    len(members), prime_id, members[prime_id]["path"])

        merged = set()
        for names in tags_for_assets(conn, members).values():
            merged |= names
        merged.add(self.marker_tag)
        attach_tags(conn, prime_id, sorted(merged))
        for member_id in members:
            if member_id != prime_id:
                attach_tags(conn, member_id, [self.marker_tag])
        return prime_id
