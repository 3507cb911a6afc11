#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for tag attach/detach reference counting.
"""

from media_catalog.tags import attach_tags, detach_all_tags, detach_tags, tags_for_assets
from media_catalog.tests.fixtures.catalog_setup import CatalogFixtures, insert_asset, tag_count


class TestTags(CatalogFixtures):

    def test_attach_creates_tags_and_counts_links(self, db):
        a = insert_asset(db, "/p/a.jpg")
        b = insert_asset(db, "/p/b.jpg")
        assert db.transaction(lambda conn: attach_tags(conn, a, ["sunset", "beach"])) == 2
        db.transaction(lambda conn: attach_tags(conn, b, ["sunset"]))
        assert tag_count(db, "sunset") == 2
        assert tag_count(db, "beach") == 1

    def test_reattach_is_idempotent(self, db):
        a = insert_asset(db, "/p/a.jpg")
        db.transaction(lambda conn: attach_tags(conn, a, ["sunset"]))
        assert db.transaction(lambda conn: attach_tags(conn, a, ["sunset", " sunset ", ""])) == 0
        assert tag_count(db, "sunset") == 1

    def test_detach_named(self, db):
        a = insert_asset(db, "/p/a.jpg", tags=["x", "y"])
        assert db.transaction(lambda conn: detach_tags(conn, a, ["x", "missing"])) == 1
        assert tag_count(db, "x") is None
        assert tag_count(db, "y") == 1

    def test_detach_all(self, db):
        a = insert_asset(db, "/p/a.jpg", tags=["x", "y"])
        insert_asset(db, "/p/b.jpg", tags=["y"])
        db.transaction(lambda conn: detach_all_tags(conn, a))
        assert tag_count(db, "x") is None
        assert tag_count(db, "y") == 1

    def test_tags_for_assets(self, db):
        a = insert_asset(db, "/p/a.jpg", tags=["x", "y"])
        b = insert_asset(db, "/p/b.jpg")
        result = db.transaction(lambda conn: tags_for_assets(conn, [a, b]))
        assert result == {a: {"x", "y"}, b: set()}
