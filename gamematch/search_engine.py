"""
Search engine module.
Runs the tiered fallback search (exact -> partial -> category -> diverse) over an in-memory
catalog snapshot so a non-empty catalog always yields an explainable, non-empty result.
"""

from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple  # type annotations for clarity

# Import project modules for data structures and ordering
from .models import CatalogRecord, MatchType, ParsedQuery, SearchResult, TierOutcome  # core data classes
from .ranking import Ranker, quality_key  # ordering and hint scoring

# Import loguru for console logging
from loguru import logger  # simple structured logger


# A tier returns its candidate pool, or None when it does not apply to the query
TierFn = Callable[[ParsedQuery, Sequence[CatalogRecord]], Optional[List[CatalogRecord]]]


class TieredSearchEngine:
	"""
	Chain of pure tier functions evaluated in order and short-circuited by pool size.
	The winning tier alone produces the records, so match_type always tells the truth about
	how well the request was fulfilled.
	"""

	def __init__(self, ranker: Optional[Ranker] = None, min_pool_size: int = 3):
		if min_pool_size < 1:
			raise ValueError("min_pool_size must be at least 1")
		self.ranker = ranker or Ranker()  # ranker instance
		self.min_pool_size = min_pool_size  # pool size that lets a tier win outright
		# Ordered chain; DIVERSE is handled separately as the unconditional fallback
		self.tiers: List[Tuple[MatchType, TierFn]] = [
			(MatchType.EXACT, self._exact_tier),
			(MatchType.PARTIAL, self._partial_tier),
			(MatchType.CATEGORY, self._category_tier),
		]

	def search(self, query: ParsedQuery, catalog: Sequence[CatalogRecord], limit: int) -> SearchResult:
		"""Evaluate tiers in order and return the first pool that is large enough."""
		if limit < 1:
			raise ValueError("limit must be at least 1")

		records = self._unique_records(catalog)  # drop duplicate ids, keep first
		available = frozenset(f for r in records for f in r.facets)  # diagnostics
		logger.debug(
			f"[Engine] Searching {len(records)} records | facets={sorted(query.requested_facets)} "
			f"| categories={sorted(query.category_hints)} | themes={sorted(query.theme_hints)} | limit={limit}"
		)

		if not records:
			logger.info("[Engine] Empty catalog, returning empty diverse result")
			return SearchResult(
				records=[],
				match_type=MatchType.DIVERSE,
				requested_facets=query.requested_facets,
				available_facets=available,
				query=query,
				tiers_tried=[TierOutcome(MatchType.DIVERSE, 0)],
			)

		threshold = min(self.min_pool_size, limit)  # small limits must still let precise tiers win
		tried: List[TierOutcome] = []
		fallback: Optional[Tuple[MatchType, List[CatalogRecord]]] = None  # most specific non-empty pool

		for match_type, tier in self.tiers:
			pool = tier(query, records)
			if pool is None:
				logger.debug(f"[Engine] Tier {match_type.value} not applicable")
				continue
			tried.append(TierOutcome(match_type, len(pool)))
			logger.debug(f"[Engine] Tier {match_type.value} pool size={len(pool)} (threshold={threshold})")
			if len(pool) >= threshold:
				return self._finish(match_type, pool, query, available, tried, limit)
			if pool and fallback is None:
				fallback = (match_type, pool)

		if fallback is not None:
			match_type, pool = fallback
			logger.debug(f"[Engine] No tier reached threshold, using smaller {match_type.value} pool")
			return self._finish(match_type, pool, query, available, tried, limit)

		# Player count and weight still filter the fallback; an unsatisfiable filter falls back to everything
		constrained = [r for r in records if self.ranker.passes_constraints(r, query)]
		if not constrained:
			logger.debug("[Engine] No record passes the player/weight filter, diversifying the whole catalog")
		pool = self.ranker.diverse_selection(constrained or records, limit)
		tried.append(TierOutcome(MatchType.DIVERSE, len(pool)))
		return self._finish(MatchType.DIVERSE, pool, query, available, tried, limit)

	def _finish(
		self,
		match_type: MatchType,
		pool: List[CatalogRecord],
		query: ParsedQuery,
		available: FrozenSet[str],
		tried: List[TierOutcome],
		limit: int,
	) -> SearchResult:
		result = SearchResult(
			records=pool[:limit],
			match_type=match_type,
			requested_facets=query.requested_facets,
			available_facets=available,
			query=query,
			tiers_tried=tried,
		)
		if query.requested_facets and not result.fulfilled_facets:
			logger.info(
				f"[Engine] Requested facets {sorted(query.requested_facets)} not fulfilled; "
				f"missing from catalog: {sorted(result.missing_facets)}"
			)
		logger.info(f"[Engine] Returning {len(result.records)} records from tier {match_type.value}")
		return result

	def _exact_tier(self, query: ParsedQuery, records: Sequence[CatalogRecord]) -> Optional[List[CatalogRecord]]:
		if not query.requested_facets:
			return None
		wanted = query.requested_facets
		return self.ranker.rank_by_quality(r for r in records if wanted <= r.facets)

	def _partial_tier(self, query: ParsedQuery, records: Sequence[CatalogRecord]) -> Optional[List[CatalogRecord]]:
		if not query.requested_facets:
			return None
		wanted = query.requested_facets
		return self.ranker.rank_by_overlap((r for r in records if wanted & r.facets), wanted)

	def _category_tier(self, query: ParsedQuery, records: Sequence[CatalogRecord]) -> Optional[List[CatalogRecord]]:
		if not query.has_intent_hints():
			return None
		scored = []
		for record in records:
			if not self.ranker.passes_constraints(record, query):
				continue
			# requested facets count alongside hints so exact matches are not crowded out
			overlap = len(record.facets & query.requested_facets)
			score = self.ranker.hint_score(record, query) + overlap
			if score > 0:
				scored.append((score, overlap, record))
		# Highest score first, then facet overlap, explicit quality tie-break
		scored.sort(key=lambda item: (-item[0], -item[1], quality_key(item[2])))
		return [record for _, _, record in scored]

	@staticmethod
	def _unique_records(catalog: Sequence[CatalogRecord]) -> List[CatalogRecord]:
		seen = set()
		unique: List[CatalogRecord] = []
		for record in catalog:
			if record.id in seen:
				logger.warning(f"[Engine] Duplicate record id '{record.id}' ignored")
				continue
			seen.add(record.id)
			unique.append(record)
		return unique
