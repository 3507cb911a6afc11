#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Process-wide single-flight lock for folder scans.

States are Idle and Scanning. Blocking callers queue in FIFO order and, on
release, ownership passes straight to the head of the queue so the lock is
never observed Idle in between. Non-blocking callers never queue: they get
False immediately while a scan is running.
"""

import logging
import threading
from collections import deque
from contextlib import contextmanager
from typing import Deque, Iterator

logger = logging.getLogger(__name__)


class _Waiter:
    __slots__ = ("granted",)

    def __init__(self):
        self.granted = False


class ScanLock:
    """FIFO mutex with a non-blocking skip mode."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._held = False
        self._waiters: Deque[_Waiter] = deque()

    @property
    def scanning(self) -> bool:
        with self._cond:
            return self._held

    @property
    def waiting(self) -> int:
        with self._cond:
            return len(self._waiters)

    def acquire(self, blocking: bool = True) -> bool:
        with self._cond:
            if not self._held:
                self._held = True
                return True
            if not blocking:
                return False
            waiter = _Waiter()
            self._waiters.append(waiter)
            logger.info("Waiting for ongoing scan to complete...")
            while not waiter.granted:
                self._cond.wait()
            return True

    def release(self) -> None:
        with self._cond:
            if not self._held:
                raise RuntimeError("release of an idle scan lock")
            if self._waiters:
                # Hand off directly; the lock stays held
                self._waiters.popleft().granted = True
                self._cond.notify_all()
            else:
                self._held = False

    @contextmanager
    def hold(self, blocking: bool = True) -> Iterator[bool]:
        """Yield whether the lock was obtained; releases it on exit if so."""
        acquired = self.acquire(blocking)
        try:
            yield acquired
        finally:
            if acquired:
                self.release()


# The one lock every folder scan in this process goes through
SCAN_LOCK = ScanLock()
