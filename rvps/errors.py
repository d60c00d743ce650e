"""Exception hierarchy for the reference value provider service."""


class RvpsError(Exception):
    """Base class for every error raised by the service."""


class StorageError(RvpsError):
    """A reference value storage backend failed."""


class ExtractorError(RvpsError):
    """A provenance could not be verified or its reference values extracted."""