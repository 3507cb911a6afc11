#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tag attach/detach primitives used by the ingestion core.

Every function takes an open connection so it can run inside the caller's
transaction. `tags.count` tracks the number of assets linked to a tag.
"""

import sqlite3
from typing import Dict, Iterable, List, Set


def _clean(names: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    ordered = []
    for name in names:
        name = str(name).strip()
        if name and name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def attach_tags(conn: sqlite3.Connection, asset_id: int, names: Iterable[str]) -> int:
    """Link tags to an asset, creating them as needed. Returns the number of new links."""
    added = 0
    for name in _clean(names):
        conn.execute("INSERT OR IGNORE INTO tags (name, count) VALUES (?, 0)", (name,))
        tag_id = conn.execute("SELECT id FROM tags WHERE name = ?", (name,)).fetchone()[0]
        cur = conn.execute(
            "INSERT OR IGNORE INTO asset_tags (asset_id, tag_id) VALUES (?, ?)",
            (asset_id, tag_id),
        )
        if cur.rowcount:
            conn.execute("UPDATE tags SET count = count + 1 WHERE id = ?", (tag_id,))
            added += 1
    return added


def _release(conn: sqlite3.Connection, tag_ids: Iterable[int]) -> None:
    for tag_id in tag_ids:
        conn.execute("UPDATE tags SET count = count - 1 WHERE id = ?", (tag_id,))
        conn.execute("DELETE FROM tags WHERE id = ? AND count <= 0", (tag_id,))


def detach_tags(conn: sqlite3.Connection, asset_id: int, names: Iterable[str]) -> int:
    """Unlink the named tags from an asset. Returns the number of links removed."""
    removed = []
    for name in _clean(names):
        row = conn.execute("SELECT id FROM tags WHERE name = ?", (name,)).fetchone()
        if row is None:
            continue
        cur = conn.execute(
            "DELETE FROM asset_tags WHERE asset_id = ? AND tag_id = ?", (asset_id, row[0])
        )
        if cur.rowcount:
            removed.append(row[0])
    _release(conn, removed)
    return len(removed)


def detach_all_tags(conn: sqlite3.Connection, asset_id: int) -> List[int]:
    """Remove every tag link of an asset, dropping tags whose count reaches zero."""
    tag_ids = [r[0] for r in conn.execute(
        "SELECT tag_id FROM asset_tags WHERE asset_id = ?", (asset_id,)
    ).fetchall()]
    conn.execute("DELETE FROM asset_tags WHERE asset_id = ?", (asset_id,))
    _release(conn, tag_ids)
    return tag_ids


def tags_for_assets(conn: sqlite3.Connection, asset_ids: Iterable[int]) -> Dict[int, Set[str]]:
    result: Dict[int, Set[str]] = {}
    for asset_id in asset_ids:
        rows = conn.execute(
            """
            SELECT t.name FROM tags t
            JOIN asset_tags atg ON t.id = atg.tag_id
            WHERE atg.asset_id = ?
            """,
            (asset_id,),
        ).fetchall()
        result[asset_id] = {r[0] for r in rows}
    return result
