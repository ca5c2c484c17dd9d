# backend/repositories/errors.py


class StorageError(Exception):
    """Base class for catalog storage failures."""


class StorageConfigError(StorageError):
    """The storage is not set up, e.g. a JSON data file is missing."""


class StorageUnavailableError(StorageError):
    """The database could not be reached or rejected the operation."""
