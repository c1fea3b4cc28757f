"""
Per-file analysis result cache.

Entries are keyed by a SHA-256 digest of the file content, the file name
and the option set, so a hit is only possible for byte-identical input
analyzed under identical options. Each entry expires after a fixed TTL.

The cache is an explicit object owned by the caller and injected into
the coordinator. Expiry is evaluated against an injectable clock: on
access for the requested key, and for every entry whenever a new entry
is stored. The number of live entries is capped; storing beyond the cap
evicts the oldest entry first.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from analyzer.app.schemas.analysis import ScanOptions
from analyzer.app.schemas.findings import Finding
from analyzer.app.utils.hashing import digest_parts

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_MAX_ENTRIES = 1024


class CacheStats(BaseModel):
    size: int
    hits: int
    misses: int

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class _Entry:
    findings: List[Finding]
    stored_at: float


class AnalysisCache:
    def __init__(
        self,
        ttl_seconds: float = 30 * 60,
        clock: Optional[Clock] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")

        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock or time.monotonic
        self._entries: Dict[str, _Entry] = {}
        self._hits = 0
        self._misses = 0

    @staticmethod
    def key_for(content: str, filename: str, options: ScanOptions) -> str:
        return "analysis:" + digest_parts(
            (content, filename, options.model_dump_json())
        )

    def get(self, key: str) -> Optional[List[Finding]]:
        entry = self._entries.get(key)

        if entry is not None and self._expired(entry):
            del self._entries[key]
            entry = None

        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        logger.debug("Analysis cache hit for %s", key)
        return list(entry.findings)

    def set(self, key: str, findings: List[Finding]) -> None:
        self._evict_expired()

        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Analysis cache full, evicted %s", oldest)

        self._entries[key] = _Entry(
            findings=list(findings),
            stored_at=self._clock(),
        )

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        self._evict_expired()
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
        )

    def _expired(self, entry: _Entry) -> bool:
        return self._clock() - entry.stored_at > self._ttl

    def _evict_expired(self) -> None:
        for key in [k for k, e in self._entries.items() if self._expired(e)]:
            del self._entries[key]
