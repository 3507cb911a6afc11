"""Utility functions for the Media Catalog."""

from .time import utc_now_str, iso_from_datetime
from .path import ensure_dir, escape_like

__all__ = ['utc_now_str', 'iso_from_datetime', 'ensure_dir', 'escape_like']
