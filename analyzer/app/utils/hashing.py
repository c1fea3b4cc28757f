"""
Content hashing utilities.

Provides standardized helpers for computing the digests used as cache
keys throughout the Analyzer, ensuring consistent algorithms and encoding.
"""

from __future__ import annotations

import hashlib
from typing import Iterable


def digest_parts(parts: Iterable[str]) -> str:
    """
    SHA-256 over a sequence of strings.

    Each part is length-prefixed so that ("ab", "c") and ("a", "bc")
    produce different digests.
    """
    hasher = hashlib.sha256()
    for part in parts:
        encoded = part.encode("utf-8")
        hasher.update(len(encoded).to_bytes(8, "big"))
        hasher.update(encoded)
    return hasher.hexdigest()
