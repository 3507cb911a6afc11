#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main scanner integration for the Media Catalog.
Coordinates folder walking, identity hashing, thumbnail/perceptual-hash
generation, duplicate grouping and persistence under the global scan lock.
"""

import logging
import sqlite3
import stat
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from ..cascade import DeletionCascade
from ..config import CatalogConfig
from ..database.manager import DatabaseManager
from ..errors import FileIOError
from ..folders import FolderRegistry
from ..grouping import DuplicateGroupResolver
from ..models.asset import Asset, AssetMetadata
from ..models.folder import Folder
from ..tags import attach_tags
from ..utils.path import ensure_dir
from ..utils.time import iso_from_datetime, utc_now_str
from .cleanup import cleanup_deleted_files
from .discovery import discover_media_files
from .hasher import compute_identity_hash
from .lock import SCAN_LOCK, ScanLock
from .metadata import MetadataExtractor, PillowMetadataExtractor
from .thumbnails import ThumbnailGenerator, ThumbnailStore

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of one folder scan."""
    folder: str
    added: int = 0
    unchanged: int = 0
    errors: int = 0
    skipped: bool = False

    def to_dict(self) -> dict:
        return {
            "folder": self.folder,
            "added": self.added,
            "unchanged": self.unchanged,
            "errors": self.errors,
            "skipped": self.skipped,
        }


class CatalogScanner:
    """
    Ingests watched folders into the catalog.

    Only one folder scan runs at a time process-wide. Blocking scans wait
    their turn; non-blocking scans (periodic sweeps) are skipped while
    another scan holds the lock.
    """

    def __init__(self, db_manager: DatabaseManager, config: CatalogConfig,
                 metadata_extractor: Optional[MetadataExtractor] = None,
                 lock: ScanLock = SCAN_LOCK):
        self.db_manager = db_manager
        self.config = config
        self.lock = lock
        ensure_dir(config.thumbnail_dir)
        self.thumbnails = ThumbnailStore(config.thumbnail_dir, config.thumbnail_size)
        self.generator = ThumbnailGenerator(
            db_manager, self.thumbnails,
            phash_enabled=config.phash_enabled,
            black_threshold=config.black_frame_threshold,
            white_threshold=config.white_frame_threshold,
        )
        self.resolver = DuplicateGroupResolver(db_manager)
        self.cascade = DeletionCascade(db_manager, self.thumbnails)
        self.folders = FolderRegistry(db_manager)
        self.metadata_extractor = metadata_extractor or PillowMetadataExtractor()

    # ------------------------------------------------------------------
    # Folder level
    # ------------------------------------------------------------------
    def scan_folder(self, folder: Folder, blocking: bool = True) -> ScanResult:
        """Ingest one folder. Returns a skipped result if non-blocking and the lock is held."""
        result = ScanResult(folder=folder.path)
        if not self.lock.acquire(blocking):
            logger.info("Skipping scan of %s - another scan in progress", folder.path)
            result.skipped = True
            return result

        try:
            logger.info("Scanning folder: %s (recursive: %s)", folder.path, folder.recursive)
            files = discover_media_files(Path(folder.path), folder.recursive)

            for path in tqdm(files, desc=Path(folder.path).name or folder.path, unit="file",
                             disable=not self.config.show_progress):
                try:
                    if self.process_file(path):
                        result.added += 1
                    else:
                        result.unchanged += 1
                except Exception as e:
                    result.errors += 1
                    logger.error("Error processing %s: %s", path, e,
                                 exc_info=logger.isEnabledFor(logging.DEBUG))

            if folder.id is not None:
                folder.last_scanned_at = self.folders.stamp_scanned(folder.id)

            logger.info("Scan complete: %d new assets added from %s (%d errors)",
                        result.added, folder.path, result.errors)
            return result
        finally:
            self.lock.release()

    def scan_path(self, path, recursive: bool = True, blocking: bool = True) -> ScanResult:
        """Scan a directory, using its registered folder settings when it is watched."""
        folder = self.folders.find_by_path(path)
        if folder is None:
            folder = Folder(path=str(Path(path).expanduser().resolve()), recursive=recursive)
        return self.scan_folder(folder, blocking=blocking)

    def scan_all_folders(self) -> List[ScanResult]:
        """Non-blocking sweep of every enabled folder."""
        folders = self.folders.list(enabled_only=True)
        if not folders:
            logger.info("No folders configured for scanning")
            return []

        logger.info("Starting full scan of %d folders...", len(folders))
        results = [self.scan_folder(folder, blocking=False) for folder in folders]
        logger.info("Full scan complete: %d total new assets added",
                    sum(r.added for r in results))
        return results

    def cleanup_deleted_files(self, path_prefix: Optional[str] = None) -> int:
        return cleanup_deleted_files(self.db_manager, self.cascade, path_prefix)

    def delete_asset(self, asset_id: int) -> bool:
        return self.cascade.delete_asset(asset_id)

    def run_cycle(self) -> Tuple[List[ScanResult], int]:
        """One periodic cycle: scan every folder, then sweep missing files."""
        results = self.scan_all_folders()
        removed = self.cleanup_deleted_files()
        return results, removed

    # ------------------------------------------------------------------
    # File level
    # ------------------------------------------------------------------
    def process_file(self, path: Path) -> bool:
        """Ingest one file. Returns True when a new asset row was inserted."""
        path = Path(path)
        try:
            st = path.stat()
        except OSError as e:
            raise FileIOError(path, f"Cannot stat {path}: {e}") from e
        if not stat.S_ISREG(st.st_mode):
            return False

        identity_hash = compute_identity_hash(path, self.config.streaming_threshold_bytes)

        existing = self.db_manager.query_one(
            "SELECT id, identity_hash FROM assets WHERE path = ?", (str(path),)
        )
        if existing is not None:
            if existing["identity_hash"] == identity_hash:
                return False
            logger.info("Content changed, replacing %s (ID %d)", path, existing["id"])
            self.cascade.delete_asset(existing["id"])

        metadata = self.metadata_extractor.extract(path)
        hashes = self.generator.generate(path, identity_hash)

        asset = Asset(
            path=str(path),
            filename=path.name,
            file_type=path.suffix.lower().lstrip("."),
            size_bytes=st.st_size,
            identity_hash=identity_hash,
            hashes=hashes,
            width=metadata.width or 0,
            height=metadata.height or 0,
            artist=metadata.artist,
            rating=metadata.rating,
            source=metadata.source,
            created_at=iso_from_datetime(metadata.captured_at) or utc_now_str(),
        )
        asset.id = self.db_manager.transaction(
            lambda conn: self._insert_asset(conn, asset, metadata)
        )

        logger.info("Added: %s (%d tags) as ID %d", asset.filename, len(metadata.tags), asset.id)
        return True

    def _insert_asset(self, conn: sqlite3.Connection, asset: Asset,
                      metadata: AssetMetadata) -> int:
        cur = conn.execute(
            """
            INSERT INTO assets
                (path, filename, type, size, identity_hash, phash_small, phash_medium,
                 phash_large, width, height, artist, rating, source, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                asset.path, asset.filename, asset.file_type, asset.size_bytes,
                asset.identity_hash, asset.hashes.small, asset.hashes.medium,
                asset.hashes.large, asset.width, asset.height, asset.artist,
                asset.rating, asset.source, asset.created_at, utc_now_str(),
            ),
        )
        asset_id = cur.lastrowid
        if metadata.tags:
            attach_tags(conn, asset_id, metadata.tags)
        # Joins the open transaction; grouping commits or rolls back with the row
        if self.config.phash_enabled and not asset.hashes.is_sentinel:
            self.resolver.resolve(asset_id, asset.hashes)
        return asset_id


class PeriodicScanner:
    """Runs CatalogScanner.run_cycle on a background thread every `interval_minutes`."""

    def __init__(self, scanner: CatalogScanner, interval_minutes: float):
        self.scanner = scanner
        self.interval_seconds = max(0.0, float(interval_minutes) * 60.0)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def enabled(self) -> bool:
        return self.interval_seconds > 0

    def start(self, run_immediately: bool = True) -> bool:
        if not self.enabled:
            logger.info("Periodic scanning disabled")
            return False
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, args=(run_immediately,),
                                        name="periodic-scan", daemon=True)
        self._thread.start()
        logger.info("Periodic scanning enabled: every %.1f minutes", self.interval_seconds / 60)
        return True

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> None:
        logger.info("Starting periodic scan...")
        try:
            self.scanner.run_cycle()
            logger.info("Periodic scan completed successfully")
        except Exception as e:
            logger.error("Periodic scan failed: %s", e)

    def _run(self, run_immediately: bool) -> None:
        if run_immediately:
            self.run_once()
        while not self._stop.wait(self.interval_seconds):
            self.run_once()
