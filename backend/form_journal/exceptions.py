"""Errors raised by the analysis store."""


class StoreError(Exception):
    """Base class for analysis store failures."""


class StorageUnavailable(StoreError):
    """No durable storage could be opened. Fatal for the whole store."""


class InsertFailed(StoreError):
    """A single write transaction could not commit."""


class ReadFailed(StoreError):
    """A scan or indexed lookup could not complete."""
