"""Error types raised while running a batch."""


class BatchError(Exception):
    """Base class for every error the batch tools raise on purpose."""


class ConfigError(BatchError):
    """Configuration could not be resolved into usable settings."""


class MissingInputDirectory(BatchError):
    """A required input folder is missing or not a directory. Fatal."""

    def __init__(self, role, path):
        self.role = role
        self.path = path
        super().__init__(f"{role} directory not found: {path}")


class NoTemplatesFound(BatchError):
    """The input folder holds no files with the expected extension."""

    def __init__(self, path, extensions):
        self.path = path
        self.extensions = tuple(extensions)
        super().__init__(f"No {', '.join(self.extensions)} files found in: {path}")


class AssetNotFound(BatchError):
    """No photo matches a template's identifier."""


class PlacementFailure(BatchError):
    """The photo could not be placed into the template."""


class ExportFailure(BatchError):
    """The output file could not be written."""


class InvalidDimension(BatchError):
    """An image has a zero or negative width or height."""


class HostBusy(BatchError):
    """The editing host already has a document open."""


class OpenFailure(BatchError):
    """A template or input image could not be opened."""
