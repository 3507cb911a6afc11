#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Path utility functions for the Media Catalog.
"""

from pathlib import Path

LIKE_ESCAPE = "\\"


def ensure_dir(p: Path) -> None:
    """Ensure directory exists, creating it if necessary."""
    Path(p).mkdir(parents=True, exist_ok=True)


def escape_like(prefix: str) -> str:
    """Escape LIKE wildcards so a path prefix matches literally (use ESCAPE '\\')."""
    return (prefix.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
                  .replace("%", LIKE_ESCAPE + "%")
                  .replace("_", LIKE_ESCAPE + "_"))
