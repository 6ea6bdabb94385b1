"""Result cache for analysis reports.

Reports are keyed by a SHA-256 fingerprint of ``(language, source)``. The
cache is bounded (least recently used entries are evicted) and single-flight:
while a report is being computed, later callers for the same key await the
in-flight computation instead of starting another one. Failed computations
are never stored.
"""

import asyncio
import hashlib
from collections import OrderedDict
from collections.abc import Awaitable, Callable

import structlog

from .models import CodeUnderstanding

logger = structlog.get_logger(__name__)


def fingerprint(language: str, source_code: str) -> str:
    """Compute the cache key of an analysis input.

    Args:
        language: Language tag.
        source_code: Source text.

    Returns:
        Hex SHA-256 digest over both values.
    """
    digest = hashlib.sha256()
    digest.update(language.encode("utf-8", "surrogatepass"))
    digest.update(b"\x00")
    digest.update(source_code.encode("utf-8", "surrogatepass"))
    return digest.hexdigest()


class AnalysisCache:
    """Bounded single-flight cache of CodeUnderstanding reports.

    The cache is meant to be used from a single event loop.

    Attributes:
        max_entries: Maximum number of stored reports.
        hits: Lookups answered from a stored report or an in-flight one.
        misses: Lookups that started a computation.
    """

    def __init__(self, max_entries: int = 256) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of stored reports.

        Raises:
            ValueError: If max_entries is less than 1.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[str, CodeUnderstanding] = OrderedDict()
        self._pending: dict[str, asyncio.Future[CodeUnderstanding]] = {}
        self._logger = logger.bind(component="analysis_cache")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> CodeUnderstanding | None:
        """Get a stored report and mark it as recently used."""
        report = self._entries.get(key)
        if report is not None:
            self._entries.move_to_end(key)
        return report

    def put(self, key: str, report: CodeUnderstanding) -> None:
        """Store a report, evicting the least recently used entry if full."""
        self._entries[key] = report
        self._entries.move_to_end(key)

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._logger.debug("cache_evicted", key=evicted[:12])

    def clear(self) -> None:
        """Drop every stored report and reset the counters."""
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    async def get_or_compute(
        self,
        language: str,
        source_code: str,
        compute: Callable[[], Awaitable[CodeUnderstanding]],
    ) -> CodeUnderstanding:
        """Return the cached report for an input, computing it at most once.

        Args:
            language: Language tag.
            source_code: Source text.
            compute: Coroutine factory producing the report on a miss.

        Returns:
            The report for the input.

        Raises:
            Exception: Whatever ``compute`` raised; concurrent waiters on the
                same key receive the same exception.
        """
        key = fingerprint(language, source_code)

        report = self.get(key)
        if report is not None:
            self.hits += 1
            return report

        pending = self._pending.get(key)
        if pending is not None:
            self.hits += 1
            # shield so a cancelled waiter does not cancel the shared computation
            return await asyncio.shield(pending)

        self.misses += 1
        future: asyncio.Future[CodeUnderstanding] = asyncio.get_running_loop().create_future()
        self._pending[key] = future

        try:
            report = await compute()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unawaited future does not log a warning
            future.exception()
            self._logger.warning("cache_compute_failed", key=key[:12], error=str(e))
            raise
        finally:
            self._pending.pop(key, None)

        self.put(key, report)
        future.set_result(report)
        return report
