#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main CLI entry point for the Media Catalog.
"""

import argparse
import sys
import logging

from .config import CatalogConfig
from .database.manager import DatabaseManager
from .commands.scan import ScanCommand
from .commands.folders import cmd_add_folder, cmd_list_folders, cmd_set_folder, cmd_remove_folder
from .commands.assets import cmd_delete_asset
from .commands.stats import cmd_show_stats
from .jsonio import enable_json_logging
from .scanning.thumbnails import ThumbnailStore


def setup_logging(verbose: bool):
    """Configure logging for the CLI tool."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    logging.debug("Verbose logging enabled (DEBUG level).")


def create_parser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Media Catalog - folder ingestion with perceptual duplicate grouping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Watch a folder and scan it
  %(prog)s add-folder ~/Pictures
  %(prog)s scan --folder-id 1

  # One-off scan of an unregistered directory, skipping if busy
  %(prog)s scan --path /mnt/camera --no-wait --json

  # Periodic scanning every 30 minutes
  %(prog)s watch --interval 30

  # Remove catalog entries for files deleted from disk
  %(prog)s cleanup --prefix /mnt/camera
        """
    )

    # Global options; unset values fall back to MEDIA_CATALOG_* environment variables
    parser.add_argument("--db", default=None,
                        help="SQLite database path (default: media_catalog.db)")
    parser.add_argument("--thumbnails", default=None,
                        help="Thumbnail directory (default: thumbnails)")
    parser.add_argument("--no-phash", action="store_true",
                        help="Disable perceptual hashing and duplicate grouping")
    parser.add_argument("--black-threshold", type=float, default=None,
                        help="Video frames at or below this mean brightness are rejected")
    parser.add_argument("--white-threshold", type=float, default=None,
                        help="Video frames at or above this mean brightness are rejected")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose (DEBUG) output")
    parser.add_argument("--json", action="store_true",
                        help="Output results as JSON instead of human-readable text")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    _add_folder_parsers(subparsers)
    _add_scan_parsers(subparsers)
    _add_asset_parsers(subparsers)
    _add_stats_parser(subparsers)

    return parser


def _add_folder_parsers(subparsers):
    """Add watched-folder command parsers."""
    add_parser = subparsers.add_parser("add-folder", help="Register a folder for scanning")
    add_parser.add_argument("path", help="Folder path")
    add_parser.add_argument("--no-recursive", action="store_true",
                            help="Only scan the top level of the folder")

    subparsers.add_parser("list-folders", help="List watched folders")

    set_parser = subparsers.add_parser("set-folder", help="Change folder settings")
    set_parser.add_argument("folder_id", type=int, help="Folder ID")
    enabled = set_parser.add_mutually_exclusive_group()
    enabled.add_argument("--enable", dest="enabled", action="store_const", const=True,
                         help="Include the folder in periodic scans")
    enabled.add_argument("--disable", dest="enabled", action="store_const", const=False,
                         help="Exclude the folder from periodic scans")
    recursive = set_parser.add_mutually_exclusive_group()
    recursive.add_argument("--recursive", dest="recursive", action="store_const", const=True,
                           help="Descend into subdirectories")
    recursive.add_argument("--no-recursive", dest="recursive", action="store_const", const=False,
                           help="Only scan the top level")

    remove_parser = subparsers.add_parser("remove-folder", help="Stop watching a folder")
    remove_parser.add_argument("folder_id", type=int, help="Folder ID")


def _add_scan_parsers(subparsers):
    """Add scan command parsers."""
    scan_parser = subparsers.add_parser("scan", help="Scan one folder")
    target = scan_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--folder-id", type=int, help="Registered folder ID")
    target.add_argument("--path", help="Directory path (registered or not)")
    scan_parser.add_argument("--no-recursive", action="store_true",
                             help="For unregistered paths, only scan the top level")
    scan_parser.add_argument("--no-wait", action="store_true",
                             help="Skip instead of waiting when another scan is running")
    scan_parser.add_argument("--progress", action="store_true",
                             help="Show a progress bar")

    subparsers.add_parser("scan-all", help="Scan every enabled folder (skips if busy)")

    cleanup_parser = subparsers.add_parser("cleanup", help="Drop entries for files missing on disk")
    cleanup_parser.add_argument("--prefix", help="Only check assets under this path prefix")

    watch_parser = subparsers.add_parser("watch", help="Run periodic scans until interrupted")
    watch_parser.add_argument("--interval", type=float, default=None,
                              help="Minutes between scans (default: 15, 0 disables)")


def _add_asset_parsers(subparsers):
    """Add asset command parsers."""
    delete_parser = subparsers.add_parser("delete", help="Remove an asset from the catalog")
    delete_parser.add_argument("--asset-id", type=int, required=True, help="Asset ID")
    delete_parser.add_argument("--delete-file", action="store_true",
                               help="Also delete the file from disk")


def _add_stats_parser(subparsers):
    """Add stats command parser."""
    subparsers.add_parser("stats", help="Show catalog statistics")


def build_config(args) -> CatalogConfig:
    """Environment settings overlaid with whatever the command line set explicitly."""
    return CatalogConfig.from_env(
        db_path=args.db,
        thumbnail_dir=args.thumbnails,
        phash_enabled=False if args.no_phash else None,
        show_progress=True if getattr(args, "progress", False) else None,
        black_frame_threshold=args.black_threshold,
        white_frame_threshold=args.white_threshold,
    )


def main(argv=None):
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    as_json = args.json

    if as_json:
        # For JSON output, send logs to stderr and suppress info noise
        enable_json_logging()
    else:
        setup_logging(args.verbose)

    logging.debug("Parsed arguments: %s", args)

    db_manager = None
    try:
        config = build_config(args)
        logging.info("Using database: %s", config.db_path)
        db_manager = DatabaseManager(config.db_path, max_attempts=config.tx_max_attempts)

        if args.command == "add-folder":
            return cmd_add_folder(db_manager, args.path, not args.no_recursive, as_json)

        elif args.command == "list-folders":
            return cmd_list_folders(db_manager, as_json)

        elif args.command == "set-folder":
            return cmd_set_folder(db_manager, args.folder_id, args.recursive, args.enabled, as_json)

        elif args.command == "remove-folder":
            return cmd_remove_folder(db_manager, args.folder_id, as_json)

        elif args.command == "scan":
            command = ScanCommand(db_manager, config)
            if args.folder_id is not None:
                return command.scan(folder_id=args.folder_id, wait=not args.no_wait, as_json=as_json)
            return command.scan(path=args.path, recursive=not args.no_recursive,
                                wait=not args.no_wait, as_json=as_json)

        elif args.command == "scan-all":
            return ScanCommand(db_manager, config).scan_all(as_json)

        elif args.command == "cleanup":
            return ScanCommand(db_manager, config).cleanup(args.prefix, as_json)

        elif args.command == "watch":
            return ScanCommand(db_manager, config).watch(args.interval)

        elif args.command == "delete":
            store = ThumbnailStore(config.thumbnail_dir, config.thumbnail_size)
            return cmd_delete_asset(db_manager, store, args.asset_id, args.delete_file, as_json)

        elif args.command == "stats":
            return cmd_show_stats(db_manager, as_json)

    except KeyboardInterrupt:
        if as_json:
            from .jsonio import error
            return error(args.command, "Operation interrupted by user", code=130)
        logging.warning("Operation interrupted by user.")
        return 130
    except Exception as e:
        if as_json:
            from .jsonio import error
            debug_info = {"exception_type": type(e).__name__} if args.verbose else None
            return error(args.command, str(e), debug=debug_info, code=1)
        logging.error("Error occurred: %s", e, exc_info=args.verbose)
        return 1
    finally:
        if db_manager is not None:
            db_manager.close()


if __name__ == "__main__":
    sys.exit(main())
