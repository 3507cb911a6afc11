#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Statistics command implementation for the Media Catalog.

- Uses Python logging instead of print for the human-readable report.
- With as_json=True, writes the jsonio success envelope to stdout.
"""

import logging
from typing import Any, Dict

from ..database.manager import DatabaseManager
from ..jsonio import success


def collect_stats(db_manager: DatabaseManager) -> Dict[str, Any]:
    """Compute catalog counts, duplicate-group summary, storage totals and top tags."""
    asset_count = db_manager.query_one("SELECT COUNT(*) FROM assets")[0]
    folder_count = db_manager.query_one("SELECT COUNT(*) FROM folders")[0]
    tag_count = db_manager.query_one("SELECT COUNT(*) FROM tags")[0]

    group_row = db_manager.query_one(
        """
        SELECT COUNT(DISTINCT prime_id) AS group_count, COUNT(*) AS member_count
        FROM duplicate_groups
        """
    )

    size_row = db_manager.query_one(
        "SELECT SUM(size) AS total_bytes, AVG(size) AS avg_bytes FROM assets"
    )

    type_rows = db_manager.query(
        "SELECT type, COUNT(*) FROM assets GROUP BY type ORDER BY COUNT(*) DESC"
    )

    tag_rows = db_manager.query(
        "SELECT name, count FROM tags ORDER BY count DESC, name ASC LIMIT 10"
    )

    return {
        "counts": {
            "assets": int(asset_count or 0),
            "folders": int(folder_count or 0),
            "tags": int(tag_count or 0),
        },
        "duplicates": {
            "groups": int(group_row[0] or 0),
            "grouped_assets": int(group_row[1] or 0),
        },
        "storage": {
            "total_bytes": int(size_row[0] or 0),
            "avg_bytes": int(size_row[1] or 0),
        },
        "types": {row[0] if row[0] is not None else "unknown": row[1] for row in type_rows},
        "top_tags": [{"name": row[0], "count": row[1]} for row in tag_rows],
    }


def cmd_show_stats(db_manager: DatabaseManager, as_json: bool = False) -> int:
    logger = logging.getLogger(__name__)
    results = collect_stats(db_manager)

    if as_json:
        return success("stats", results)

    logger.info("=== Catalog Statistics ===")
    logger.info("Assets: %s", f"{results['counts']['assets']:,}")
    logger.info("Folders: %s", f"{results['counts']['folders']:,}")
    logger.info("Tags: %s", f"{results['counts']['tags']:,}")
    logger.info("Duplicate groups: %s (%s assets)",
                f"{results['duplicates']['groups']:,}",
                f"{results['duplicates']['grouped_assets']:,}")

    total_gb = results["storage"]["total_bytes"] / (1024 ** 3)
    avg_mb = results["storage"]["avg_bytes"] / (1024 ** 2)
    logger.info("Storage: %.1f GB total, %.1f MB average", total_gb, avg_mb)

    logger.info("File types:")
    if results["types"]:
        for ftype, count in results["types"].items():
            logger.info("  %s: %s", ftype, f"{count:,}")
    else:
        logger.info("  (none)")

    if results["top_tags"]:
        logger.info("Top tags:")
        for tag in results["top_tags"]:
            logger.info("  %s: %s", tag["name"], f"{tag['count']:,}")
    return 0
