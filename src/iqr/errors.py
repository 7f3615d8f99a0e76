"""Exception taxonomy for iqr.

Per-file problems (CollectionError, ValidationError) are logged and folded
into results; CacheError means "treat as a cache miss"; only
ConfigurationError is fatal to a run.
"""


class IqrError(Exception):
    """Base class for every error raised by iqr."""


class CollectionError(IqrError):
    """A directory or file could not be read during collection."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class CacheError(IqrError):
    """The pattern cache is missing, stale, corrupt or could not be written."""


class ValidationError(IqrError):
    """A target file could not be read for validation."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot validate {path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigurationError(IqrError):
    """Invalid threshold, weights, paths or iteration settings."""


class OperationCancelled(IqrError):
    """A collection, profiling or validation pass was interrupted."""
