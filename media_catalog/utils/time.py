#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Time utility functions for the Media Catalog.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now_str() -> str:
    """Return current UTC time in ISO-8601 format with 'Z'."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def iso_from_datetime(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime for database storage, treating naive values as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
