#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the single-flight FIFO scan lock.
"""

import threading
import time

import pytest

from media_catalog.scanning.lock import ScanLock


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.005)


class TestScanLock:

    def test_idle_lock_is_acquired(self):
        lock = ScanLock()
        assert lock.acquire(blocking=False) is True
        assert lock.scanning

    def test_non_blocking_skips_while_held(self):
        lock = ScanLock()
        lock.acquire()
        assert lock.acquire(blocking=False) is False
        assert lock.waiting == 0

    def test_release_when_idle_raises(self):
        with pytest.raises(RuntimeError):
            ScanLock().release()

    def test_release_without_waiters_goes_idle(self):
        lock = ScanLock()
        lock.acquire()
        lock.release()
        assert not lock.scanning

    def test_waiters_served_in_arrival_order(self):
        lock = ScanLock()
        lock.acquire()
        order = []

        def worker(n):
            lock.acquire()
            order.append(n)
            lock.release()

        threads = []
        for n in range(4):
            t = threading.Thread(target=worker, args=(n,))
            t.start()
            threads.append(t)
            _wait_for(lambda: lock.waiting == n + 1)

        lock.release()
        for t in threads:
            t.join(5)
        assert order == [0, 1, 2, 3]
        assert not lock.scanning

    def test_handoff_never_exposes_idle_state(self):
        lock = ScanLock()
        lock.acquire()
        got_it = threading.Event()
        finish = threading.Event()

        def waiter():
            lock.acquire()
            got_it.set()
            finish.wait(5)
            lock.release()

        t = threading.Thread(target=waiter)
        t.start()
        _wait_for(lambda: lock.waiting == 1)

        lock.release()
        # Ownership passed to the waiter even if it has not woken up yet
        assert lock.acquire(blocking=False) is False
        assert lock.scanning
        assert got_it.wait(5)
        finish.set()
        t.join(5)
        assert not lock.scanning

    def test_only_one_holder_at_a_time(self):
        lock = ScanLock()
        active = []
        overlaps = []

        def worker():
            with lock.hold():
                active.append(1)
                if len(active) > 1:
                    overlaps.append(len(active))
                time.sleep(0.01)
                active.pop()

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)
        assert overlaps == []
        assert not lock.scanning

    def test_hold_non_blocking_reports_skip(self):
        lock = ScanLock()
        lock.acquire()
        with lock.hold(blocking=False) as acquired:
            assert acquired is False
        assert lock.scanning
        lock.release()
