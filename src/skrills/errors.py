"""
Exception types for Skrills.

Only conditions the caller cannot recover from are raised; missing or
malformed state degrades to defaults instead.
"""


class SkrillsError(Exception):
    """Base class for all Skrills errors."""

    pass


class StateDirectoryError(SkrillsError):
    """Raised when the per-user state directory cannot be resolved."""

    pass
