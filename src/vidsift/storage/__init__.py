"""Fingerprint record storage backends."""

from .base import FingerprintStore
from .memory import MemoryFingerprintStore
from .sqlite import SqliteFingerprintStore, StoreOpenError

__all__ = [
    "FingerprintStore",
    "MemoryFingerprintStore",
    "SqliteFingerprintStore",
    "StoreOpenError",
]
