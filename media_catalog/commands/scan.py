#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Scan command (thin wrapper).
Delegates all ingestion logic to the engine in `scanning/scanner.py` and keeps
only the CLI-facing output.
"""

import logging
import time
from typing import Optional

from ..config import CatalogConfig
from ..database.manager import DatabaseManager
from ..folders import FolderRegistry
from ..jsonio import success, error
from ..scanning.scanner import CatalogScanner, PeriodicScanner

logger = logging.getLogger(__name__)


class ScanCommand:
    def __init__(self, db_manager: DatabaseManager, config: CatalogConfig):
        self.db_manager = db_manager
        self.config = config
        self.engine = CatalogScanner(db_manager, config)

    def scan(self, folder_id: Optional[int] = None, path: Optional[str] = None,
             recursive: bool = True, wait: bool = True, as_json: bool = False) -> int:
        """Scan one folder, by registry id or by path."""
        if folder_id is not None:
            folder = FolderRegistry(self.db_manager).get(folder_id)
            if folder is None:
                if as_json:
                    return error("scan", f"Folder {folder_id} not found")
                print(f"Folder {folder_id} not found.")
                return 1
            result = self.engine.scan_folder(folder, blocking=wait)
        else:
            result = self.engine.scan_path(path, recursive=recursive, blocking=wait)

        if as_json:
            return success("scan", result.to_dict())
        if result.skipped:
            print(f"Skipped {result.folder}: another scan is in progress.")
        else:
            print(f"Scanned {result.folder}: {result.added} added, "
                  f"{result.unchanged} unchanged, {result.errors} errors")
        return 0

    def scan_all(self, as_json: bool = False) -> int:
        results = self.engine.scan_all_folders()
        if as_json:
            return success("scan-all", {
                "folders": [r.to_dict() for r in results],
                "total_added": sum(r.added for r in results),
            })
        if not results:
            print("No folders configured for scanning.")
            return 0
        for r in results:
            status = "skipped" if r.skipped else f"{r.added} added, {r.errors} errors"
            print(f"  {r.folder}: {status}")
        print(f"Total: {sum(r.added for r in results)} new assets")
        return 0

    def cleanup(self, path_prefix: Optional[str] = None, as_json: bool = False) -> int:
        removed = self.engine.cleanup_deleted_files(path_prefix)
        if as_json:
            return success("cleanup", {"removed": removed, "prefix": path_prefix})
        print(f"Removed {removed} missing files from the catalog")
        return 0

    def watch(self, interval_minutes: Optional[float] = None) -> int:
        """Run periodic scans in the foreground until interrupted."""
        interval = self.config.scan_interval_minutes if interval_minutes is None else interval_minutes
        periodic = PeriodicScanner(self.engine, interval)
        if not periodic.start():
            print("Periodic scanning is disabled (interval is 0).")
            return 1
        try:
            while True:
                time.sleep(1)
        finally:
            periodic.stop(timeout=5)
