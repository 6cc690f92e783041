"""
Memoized resolution results.

Evidence sources are assumed stable while a process runs, so a verdict is
computed once and reused until a caller forces a refresh.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from toolchaincheck.toolchain.resolver import CompatibilityResolver, Verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Stored outcome of one resolution."""

    resolved_path: str
    verdict: Verdict


class ResolutionCache:
    """
    Caches the resolver's verdict for the lifetime of this object.

    Example:
        >>> cache = ResolutionCache(resolver)
        >>> cache.resolve().ok      # probes
        True
        >>> cache.resolve().ok      # cached
        True
        >>> cache.resolve(force_refresh=True)   # probes again
    """

    def __init__(self, resolver: CompatibilityResolver):
        self.resolver = resolver
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    def resolve(self, force_refresh: bool = False) -> Verdict:
        """
        Return the cached verdict, resolving on first use or when forced.

        Args:
            force_refresh: Discard any cached verdict and probe again
        """
        with self._lock:
            if self._entry is not None and not force_refresh:
                return self._entry.verdict

            verdict = self.resolver.resolve()
            resolved_path = str(verdict.path) if verdict.ok else ""
            self._entry = CacheEntry(resolved_path=resolved_path, verdict=verdict)
            logger.debug(f"Cached verdict: {verdict.category.value} {resolved_path}")
            return verdict

    @property
    def is_set(self) -> bool:
        return self._entry is not None

    @property
    def resolved_path(self) -> str:
        """Resolved installation path, "" when unresolved or not compatible."""
        entry = self._entry
        return entry.resolved_path if entry else ""

    @property
    def verdict(self) -> Optional[Verdict]:
        entry = self._entry
        return entry.verdict if entry else None

    def clear(self):
        with self._lock:
            self._entry = None


__all__ = ["ResolutionCache", "CacheEntry"]
