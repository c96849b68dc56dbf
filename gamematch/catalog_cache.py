"""
Catalog snapshot cache.
Holds one immutable catalog snapshot per process and refreshes it after a TTL.
"""

import threading  # guards reloads only; readers get an immutable tuple
import time  # monotonic clock for TTL
from typing import Callable, Optional, Sequence, Tuple

from loguru import logger

from .errors import CatalogUnavailable
from .models import CatalogRecord


class CatalogCache:
	"""
	Wraps a catalog loader. get() returns the cached snapshot while it is fresh and reloads
	it otherwise. A failing loader raises CatalogUnavailable instead of serving stale data.
	"""

	def __init__(
		self,
		load_fn: Callable[[], Optional[Sequence[CatalogRecord]]],
		ttl_seconds: float = 300.0,
		clock: Callable[[], float] = time.monotonic,
	):
		self.load_fn = load_fn
		self.ttl_seconds = ttl_seconds
		self._clock = clock
		self._lock = threading.Lock()
		self._snapshot: Optional[Tuple[CatalogRecord, ...]] = None
		self._loaded_at = 0.0

	def get(self) -> Tuple[CatalogRecord, ...]:
		snapshot = self._snapshot
		if snapshot is not None and not self._expired():
			return snapshot

		with self._lock:
			# Another thread may have refreshed while we waited
			if self._snapshot is not None and not self._expired():
				return self._snapshot
			try:
				loaded = self.load_fn()
			except Exception as e:
				self._snapshot = None
				logger.error(f"[Catalog] Catalog load failed: {e}")
				raise CatalogUnavailable(f"catalog load failed: {e}") from e
			if loaded is None:
				self._snapshot = None
				logger.error("[Catalog] Catalog loader returned nothing")
				raise CatalogUnavailable("catalog loader returned no data")

			self._snapshot = tuple(loaded)
			self._loaded_at = self._clock()
			logger.info(f"[Catalog] Cached snapshot of {len(self._snapshot)} records (ttl={self.ttl_seconds}s)")
			return self._snapshot

	def invalidate(self) -> None:
		"""Force the next get() to reload."""
		with self._lock:
			self._snapshot = None

	def _expired(self) -> bool:
		return self._clock() - self._loaded_at >= self.ttl_seconds
