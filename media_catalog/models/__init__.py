"""Data models for the Media Catalog."""

from .asset import Asset, AssetMetadata, PerceptualHashes
from .folder import Folder

__all__ = ['Asset', 'AssetMetadata', 'PerceptualHashes', 'Folder']
