"""CLI command implementations for the Media Catalog."""

from .scan import ScanCommand

__all__ = ['ScanCommand']
