"""Error taxonomy for the threat assessment core.

None of these are fatal to a refresh cycle: callers recover locally and keep
publishing the best state available.
"""

from __future__ import annotations


class ProviderUnavailable(RuntimeError):
    """A location or weather fetch failed or timed out."""


class PersistenceFailure(RuntimeError):
    """A key-value store read or write failed."""


class InvalidReading(ValueError):
    """A reading carried a negative, non-finite or non-numeric wind speed."""


__all__ = ["ProviderUnavailable", "PersistenceFailure", "InvalidReading"]
