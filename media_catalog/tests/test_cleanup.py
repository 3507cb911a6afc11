#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for the missing-file cleanup sweep.
"""

from unittest.mock import patch

import pytest

from media_catalog.cascade import DeletionCascade
from media_catalog.scanning.cleanup import cleanup_deleted_files
from media_catalog.tests.fixtures.catalog_setup import CatalogFixtures, asset_id_for, insert_asset


class TestCleanupSweep(CatalogFixtures):

    @pytest.fixture
    def cascade(self, db, store):
        return DeletionCascade(db, store)

    def test_removes_only_missing_files(self, db, cascade, media_dir):
        present = media_dir / "here.jpg"
        present.write_bytes(b"x")
        insert_asset(db, str(present))
        insert_asset(db, str(media_dir / "gone.jpg"))

        assert cleanup_deleted_files(db, cascade) == 1
        assert asset_id_for(db, present) is not None
        assert asset_id_for(db, media_dir / "gone.jpg") is None

    def test_prefix_limits_the_sweep(self, db, cascade):
        insert_asset(db, "/missing/one/a.jpg")
        insert_asset(db, "/missing/two/b.jpg")
        assert cleanup_deleted_files(db, cascade, "/missing/one") == 1
        assert asset_id_for(db, "/missing/two/b.jpg") is not None

    def test_prefix_stops_at_path_separator(self, db, cascade):
        insert_asset(db, "/media/a/x.jpg")
        insert_asset(db, "/media/ab/y.jpg")
        assert cleanup_deleted_files(db, cascade, "/media/a") == 1
        assert asset_id_for(db, "/media/ab/y.jpg") is not None
        assert asset_id_for(db, "/media/a/x.jpg") is None

    def test_prefix_wildcards_are_literal(self, db, cascade):
        insert_asset(db, "/vol/a_b/x.jpg")
        insert_asset(db, "/vol/aXb/y.jpg")
        insert_asset(db, "/vol/100%/z.jpg")
        insert_asset(db, "/vol/100abc/w.jpg")

        assert cleanup_deleted_files(db, cascade, "/vol/a_b") == 1
        assert asset_id_for(db, "/vol/aXb/y.jpg") is not None
        assert cleanup_deleted_files(db, cascade, "/vol/100%") == 1
        assert asset_id_for(db, "/vol/100abc/w.jpg") is not None

    def test_failed_delete_does_not_stop_sweep(self, db, cascade):
        first = insert_asset(db, "/missing/a.jpg")
        insert_asset(db, "/missing/b.jpg")
        original = cascade.delete_asset

        def flaky(asset_id):
            if asset_id == first:
                raise RuntimeError("store unavailable")
            return original(asset_id)

        with patch.object(cascade, "delete_asset", side_effect=flaky):
            assert cleanup_deleted_files(db, cascade) == 1
        assert asset_id_for(db, "/missing/a.jpg") == first

    def test_empty_catalog(self, db, cascade):
        assert cleanup_deleted_files(db, cascade) == 0
