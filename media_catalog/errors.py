"""Exception hierarchy for the Media Catalog ingestion core."""


class CatalogError(Exception):
    """Base class for all media catalog errors."""
    pass


class TransientStoreError(CatalogError):
    """Store lock wait or deadlock that survived every retry attempt."""
    pass


class FileIOError(CatalogError):
    """A media file is missing or unreadable."""

    def __init__(self, path, message=None):
        self.path = str(path)
        super().__init__(message or f"Cannot read {self.path}")


class CodecError(CatalogError):
    """Corrupt or unsupported media, or a failed probe/decode call."""
    pass


class ConfigurationError(CatalogError):
    """Invalid settings or an unusable directory."""
    pass
