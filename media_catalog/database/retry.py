#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Transient/fatal classification and backoff policy for store transactions.
"""

import sqlite3
from enum import Enum
from typing import Optional

from ..config import TX_BASE_DELAY_SECONDS

_TRANSIENT_MARKERS = ("database is locked", "database table is locked", "busy", "deadlock")


class TxOutcome(Enum):
    TRANSIENT = "transient"
    FATAL = "fatal"


def classify_error(exc: BaseException) -> TxOutcome:
    """Lock waits and deadlocks are worth retrying; anything else is fatal."""
    if isinstance(exc, sqlite3.OperationalError):
        message = str(exc).lower()
        if any(marker in message for marker in _TRANSIENT_MARKERS):
            return TxOutcome.TRANSIENT
    return TxOutcome.FATAL


def backoff_delay(attempt: int, max_attempts: int,
                  base_delay: float = TX_BASE_DELAY_SECONDS) -> Optional[float]:
    """Delay before retrying after failed `attempt` (1-based), or None once attempts are spent.

    100ms, 200ms, 400ms, ... with the default base.
    """
    if attempt >= max_attempts:
        return None
    return base_delay * (2 ** (attempt - 1))
