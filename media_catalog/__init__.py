"""Media Catalog - folder ingestion with perceptual duplicate grouping."""

__version__ = "1.0.0"
__author__ = "Media Tool Team"

# Import key classes for convenient top-level access
from .config import CatalogConfig
from .database import DatabaseManager
from .scanning.scanner import CatalogScanner, PeriodicScanner, ScanResult
from .grouping import DuplicateGroupResolver
from .cascade import DeletionCascade
from .folders import FolderRegistry
from .models import Asset, AssetMetadata, PerceptualHashes, Folder

__all__ = [
    # Core classes
    'CatalogConfig',
    'DatabaseManager',
    'CatalogScanner',
    'PeriodicScanner',
    'ScanResult',
    'DuplicateGroupResolver',
    'DeletionCascade',
    'FolderRegistry',

    # Data models
    'Asset',
    'AssetMetadata',
    'PerceptualHashes',
    'Folder',

    # Package metadata
    '__version__',
    '__author__'
]
