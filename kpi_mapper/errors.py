"""Exceptions raised by the KPI pipeline."""


class KpiError(Exception):
    """Base class for KPI pipeline failures."""


class StorageError(KpiError):
    """The data store could not answer a request."""


class MalformedResultError(KpiError):
    """A single-row discovery query returned an unusable result."""
