#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for store transactions, error classification and retry backoff.
"""

import sqlite3
from unittest.mock import call, patch

import pytest

from media_catalog.database.retry import TxOutcome, backoff_delay, classify_error
from media_catalog.errors import TransientStoreError
from media_catalog.tests.fixtures.catalog_setup import CatalogFixtures, tag_count


class TestRetryPolicy:

    def test_backoff_doubles_from_100ms(self):
        assert [backoff_delay(n, 5) for n in (1, 2, 3, 4)] == [0.1, 0.2, 0.4, 0.8]

    def test_backoff_exhausted(self):
        assert backoff_delay(3, 3) is None
        assert backoff_delay(1, 1) is None

    @pytest.mark.parametrize("message", [
        "database is locked", "database table is locked", "Database busy", "deadlock detected",
    ])
    def test_lock_errors_are_transient(self, message):
        assert classify_error(sqlite3.OperationalError(message)) is TxOutcome.TRANSIENT

    @pytest.mark.parametrize("exc", [
        sqlite3.OperationalError("no such table: assets"),
        sqlite3.IntegrityError("UNIQUE constraint failed: assets.path"),
        ValueError("database is locked"),
    ])
    def test_everything_else_is_fatal(self, exc):
        assert classify_error(exc) is TxOutcome.FATAL


class TestTransactions(CatalogFixtures):

    def _insert_tag(self, conn, name):
        conn.execute("INSERT INTO tags (name, count) VALUES (?, 1)", (name,))

    def test_commits(self, db):
        db.transaction(lambda conn: self._insert_tag(conn, "kept"))
        assert tag_count(db, "kept") == 1

    def test_rolls_back_on_error(self, db):
        def fn(conn):
            self._insert_tag(conn, "lost")
            raise ValueError("abort")

        with pytest.raises(ValueError):
            db.transaction(fn)
        assert tag_count(db, "lost") is None
        assert not db.get_connection().in_transaction

    def test_transient_errors_are_retried(self, db):
        attempts = []

        def fn(conn):
            attempts.append(1)
            if len(attempts) < 3:
                raise sqlite3.OperationalError("database is locked")
            self._insert_tag(conn, "eventually")
            return "ok"

        with patch("media_catalog.database.manager.time.sleep") as sleep:
            assert db.transaction(fn) == "ok"
        assert sleep.call_args_list == [call(0.1), call(0.2)]
        assert tag_count(db, "eventually") == 1

    def test_exhausted_retries_raise_transient_store_error(self, db):
        def fn(conn):
            raise sqlite3.OperationalError("database is locked")

        with patch("media_catalog.database.manager.time.sleep") as sleep:
            with pytest.raises(TransientStoreError) as excinfo:
                db.transaction(fn)
        assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)
        assert sleep.call_count == 2

    def test_fatal_error_not_retried(self, db):
        attempts = []

        def fn(conn):
            attempts.append(1)
            self._insert_tag(conn, "dup")
            self._insert_tag(conn, "dup")

        with pytest.raises(sqlite3.IntegrityError):
            db.transaction(fn)
        assert len(attempts) == 1
        assert tag_count(db, "dup") is None

    def test_nested_call_joins_outer_transaction(self, db):
        def outer(conn):
            self._insert_tag(conn, "outer")
            db.transaction(lambda inner: self._insert_tag(inner, "inner"))
            raise ValueError("abort both")

        with pytest.raises(ValueError):
            db.transaction(outer)
        assert tag_count(db, "outer") is None
        assert tag_count(db, "inner") is None

    def test_per_call_attempt_limit(self, db):
        def fn(conn):
            raise sqlite3.OperationalError("database is locked")

        with patch("media_catalog.database.manager.time.sleep") as sleep:
            with pytest.raises(TransientStoreError):
                db.transaction(fn, max_attempts=1)
        sleep.assert_not_called()

    def test_schema_created_on_open(self, db):
        tables = {r[0] for r in db.query("SELECT name FROM sqlite_master WHERE type = 'table'")}
        assert {"assets", "duplicate_groups", "folders", "tags", "asset_tags"} <= tables
