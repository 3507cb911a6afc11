#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Database schema definitions for the Media Catalog.
"""

# Assets, duplicate membership and watched folders
MAIN_SCHEMA = """
CREATE TABLE IF NOT EXISTS assets (
    id INTEGER PRIMARY KEY,
    path TEXT NOT NULL UNIQUE,
    filename TEXT NOT NULL,
    type TEXT NOT NULL,
    size INTEGER NOT NULL,
    identity_hash TEXT NOT NULL,
    phash_small TEXT,
    phash_medium TEXT,
    phash_large TEXT,
    width INTEGER NOT NULL DEFAULT 0,
    height INTEGER NOT NULL DEFAULT 0,
    artist TEXT,
    rating INTEGER,
    source TEXT,
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    updated_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_assets_identity ON assets(identity_hash);
CREATE INDEX IF NOT EXISTS idx_assets_phash_small ON assets(phash_small);
CREATE INDEX IF NOT EXISTS idx_assets_phash_medium ON assets(phash_medium);
CREATE INDEX IF NOT EXISTS idx_assets_phash_large ON assets(phash_large);

CREATE TABLE IF NOT EXISTS duplicate_groups (
    asset_id INTEGER PRIMARY KEY,
    prime_id INTEGER NOT NULL,
    FOREIGN KEY(asset_id) REFERENCES assets(id) ON DELETE CASCADE,
    FOREIGN KEY(prime_id) REFERENCES assets(id)
);

CREATE INDEX IF NOT EXISTS idx_duplicate_groups_prime ON duplicate_groups(prime_id);

CREATE TABLE IF NOT EXISTS folders (
    id INTEGER PRIMARY KEY,
    path TEXT NOT NULL UNIQUE,
    recursive INTEGER NOT NULL DEFAULT 1,
    enabled INTEGER NOT NULL DEFAULT 1,
    last_scanned_at TEXT,
    created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_folders_enabled ON folders(enabled);
"""

# Tag tables, shared with the tagging subsystem
TAG_SCHEMA = """
CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    count INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_tags_count ON tags(count);

CREATE TABLE IF NOT EXISTS asset_tags (
    asset_id INTEGER NOT NULL,
    tag_id INTEGER NOT NULL,
    PRIMARY KEY (asset_id, tag_id),
    FOREIGN KEY(asset_id) REFERENCES assets(id) ON DELETE CASCADE,
    FOREIGN KEY(tag_id) REFERENCES tags(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_asset_tags_tag ON asset_tags(tag_id);
"""
