#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Unit tests for asset deletion, group repair, tag release and thumbnail GC.
"""

import pytest

from media_catalog.cascade import DeletionCascade
from media_catalog.config import DUPLICATE_MARKER_TAG
from media_catalog.grouping import DuplicateGroupResolver
from media_catalog.models.asset import PerceptualHashes
from media_catalog.tests.fixtures.catalog_setup import (
    CatalogFixtures, gradient_image, group_map, insert_asset, tag_count,
)

H1 = "1" * 16
SAME = PerceptualHashes(H1, H1, H1)


class TestDeletionCascade(CatalogFixtures):

    @pytest.fixture
    def cascade(self, db, store):
        return DeletionCascade(db, store)

    def _group(self, db, *sizes):
        """Insert one asset per (w, h) and group them; returns ids in insertion order."""
        ids = [insert_asset(db, f"/g/{i}.jpg", hashes=SAME, width=w, height=h)
               for i, (w, h) in enumerate(sizes)]
        resolver = DuplicateGroupResolver(db)
        for asset_id in ids[1:]:
            resolver.resolve(asset_id, SAME)
        return ids

    def test_missing_asset_returns_false(self, cascade):
        assert cascade.delete_asset(999) is False

    def test_plain_delete(self, db, cascade):
        a = insert_asset(db, "/p/a.jpg")
        assert cascade.delete_asset(a) is True
        assert db.query_one("SELECT 1 FROM assets WHERE id = ?", (a,)) is None

    def test_deleting_prime_of_three_reelects_largest(self, db, cascade):
        prime, mid, small = self._group(db, (800, 600), (400, 300), (200, 150))
        cascade.delete_asset(prime)
        assert group_map(db) == {mid: mid, small: mid}

    def test_reelection_tie_goes_to_lowest_id(self, db, cascade):
        prime, x, y = self._group(db, (800, 600), (300, 300), (300, 300))
        cascade.delete_asset(prime)
        assert set(group_map(db).values()) == {x}

    def test_deleting_prime_of_two_dissolves(self, db, cascade):
        prime, other = self._group(db, (800, 600), (400, 300))
        cascade.delete_asset(prime)
        assert group_map(db) == {}

    def test_deleting_member_of_two_dissolves(self, db, cascade):
        prime, other = self._group(db, (800, 600), (400, 300))
        cascade.delete_asset(other)
        assert group_map(db) == {}

    def test_deleting_member_of_three_keeps_group(self, db, cascade):
        prime, mid, small = self._group(db, (800, 600), (400, 300), (200, 150))
        cascade.delete_asset(small)
        assert group_map(db) == {prime: prime, mid: prime}

    def test_no_group_keeps_a_dangling_prime(self, db, cascade):
        ids = self._group(db, (800, 600), (400, 300), (200, 150), (100, 75))
        for asset_id in ids:
            cascade.delete_asset(asset_id)
            live = {r[0] for r in db.query("SELECT id FROM assets")}
            mapping = group_map(db)
            assert set(mapping.values()) <= live
            assert set(mapping) <= live
            assert len(mapping) != 1

    def test_tag_counts_released(self, db, cascade):
        a = insert_asset(db, "/p/a.jpg", tags=["cat", "dog"])
        insert_asset(db, "/p/b.jpg", tags=["cat"])
        cascade.delete_asset(a)
        assert tag_count(db, "cat") == 1
        assert tag_count(db, "dog") is None

    def test_marker_tag_dropped_with_last_holder(self, db, cascade):
        prime, other = self._group(db, (800, 600), (400, 300))
        assert tag_count(db, DUPLICATE_MARKER_TAG) == 2
        cascade.delete_asset(other)
        cascade.delete_asset(prime)
        assert tag_count(db, DUPLICATE_MARKER_TAG) is None

    def test_shared_thumbnail_survives_until_last_asset(self, db, store, cascade):
        a = insert_asset(db, "/p/a.jpg", identity_hash="same-bytes")
        b = insert_asset(db, "/q/a.jpg", identity_hash="same-bytes")
        store.write("same-bytes", gradient_image(40, 30))

        cascade.delete_asset(a)
        assert store.exists("same-bytes")
        cascade.delete_asset(b)
        assert not store.exists("same-bytes")

    def test_missing_thumbnail_is_not_an_error(self, db, cascade):
        a = insert_asset(db, "/p/a.jpg", identity_hash="never-rendered")
        assert cascade.delete_asset(a) is True
