"""SQLite store access for the Media Catalog."""

from .manager import DatabaseManager
from .retry import TxOutcome, backoff_delay, classify_error

__all__ = ['DatabaseManager', 'TxOutcome', 'backoff_delay', 'classify_error']
