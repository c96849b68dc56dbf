"""
Recommender facade.
Wires the vocabulary, parser, tiered search, title matcher and claim validator behind the two
entry points callers use: search() before the model runs and reconcile() after it answers.
"""

from concurrent.futures import ThreadPoolExecutor  # optional per-candidate fan-out
from pathlib import Path  # default catalog location
from typing import Any, Callable, List, Optional, Sequence, Union  # type annotations

from loguru import logger  # console logging

from .candidates import Candidate, parse_model_response  # untrusted model output
from .catalog_cache import CatalogCache  # process-wide snapshot
from .claim_validator import ClaimValidator  # claim cross-checking
from .data_loader import CatalogLoader, format_range  # JSONL catalog + range display
from .errors import CatalogUnavailable  # the only fatal condition
from .facet_vocabulary import FacetVocabulary  # shared normalization table
from .fuzzy_matcher import TitleMatcher  # title binding
from .models import CatalogRecord, MatchedRecommendation, SearchResult  # data classes
from .observability import LoggerRejectionSink, RejectionSink  # rejection reporting
from .query_parser import QueryParser  # free text -> ParsedQuery
from .ranking import Ranker  # tier ordering
from .search_engine import TieredSearchEngine  # tiered fallback search
from .settings import MatchingSettings  # tunables

DEFAULT_CATALOG_PATH = Path("data/games.jsonl")

CatalogSource = Union[CatalogCache, Callable[[], Optional[Sequence[CatalogRecord]]], Sequence[CatalogRecord]]


class MatchingEngine:
	"""
	High-level API over the matching pipeline.
	Holds no per-request state: every call reads one catalog snapshot and returns fresh objects,
	so a single instance can serve concurrent requests.
	"""

	def __init__(
		self,
		catalog_source: CatalogSource,  # cache, loader callable or a fixed sequence of records
		settings: Optional[MatchingSettings] = None,
		sink: Optional[RejectionSink] = None,
		vocabulary: Optional[FacetVocabulary] = None,
		parser: Optional[QueryParser] = None,
		engine: Optional[TieredSearchEngine] = None,
		matcher: Optional[TitleMatcher] = None,
		validator: Optional[ClaimValidator] = None,
	):
		self.catalog_source = catalog_source
		self.settings = settings or MatchingSettings()
		self.vocabulary = vocabulary or FacetVocabulary()
		self.parser = parser or QueryParser(self.vocabulary)
		self.engine = engine or TieredSearchEngine(Ranker(), min_pool_size=self.settings.min_pool_size)
		self.matcher = matcher or TitleMatcher(min_confidence=self.settings.match_threshold)
		self.validator = validator or ClaimValidator(
			self.vocabulary,
			sink=sink or LoggerRejectionSink(),
			complexity_tolerance=self.settings.complexity_tolerance,
			playtime_tolerance=self.settings.playtime_tolerance,
		)
		logger.info(
			f"[Recommender] Ready | limit={self.settings.default_limit} min_pool={self.settings.min_pool_size} "
			f"threshold={self.settings.match_threshold}"
		)

	@classmethod
	def from_settings(cls, settings: Optional[MatchingSettings] = None, **kwargs) -> "MatchingEngine":
		"""Build an engine that reads a JSONL catalog through a TTL cache."""
		settings = settings or MatchingSettings()
		vocabulary = kwargs.pop("vocabulary", None) or FacetVocabulary()
		path = settings.catalog_path or DEFAULT_CATALOG_PATH
		loader = CatalogLoader(vocabulary)
		cache = CatalogCache(lambda: loader.load_records_from_jsonl(path), ttl_seconds=settings.catalog_ttl_seconds)
		logger.info(f"[Recommender] Catalog source: {path}")
		return cls(cache, settings=settings, vocabulary=vocabulary, **kwargs)

	def search(self, text: str, limit: Optional[int] = None) -> SearchResult:
		"""Parse free text and run the tiered search over the current catalog snapshot."""
		if limit is None:
			limit = self.settings.default_limit
		catalog = self._load_catalog()
		parsed = self.parser.parse(text)
		return self.engine.search(parsed, catalog, limit)

	def reconcile(
		self,
		candidates: Any,
		catalog: Optional[Sequence[CatalogRecord]] = None,
		keep_unmatched: bool = False,
		max_workers: Optional[int] = None,
		sink: Optional[RejectionSink] = None,
	) -> List[MatchedRecommendation]:
		"""
		Bind each candidate to a catalog record and strip claims the record does not support.
		candidates may be Candidate objects or a raw model response (dict, list or JSON text).
		Output keeps input order; unmatched candidates are dropped unless keep_unmatched is set,
		and only the first candidate bound to a given record survives.
		"""
		items = self._as_candidates(candidates)
		records = list(catalog) if catalog is not None else list(self._load_catalog())

		def work(candidate: Candidate) -> MatchedRecommendation:
			record, confidence = self.matcher.match(candidate.proposed_title, records)
			if record is None:
				return self.validator.reject_unbound(candidate, confidence, sink=sink)
			return self.validator.validate(candidate, record, confidence, sink=sink)

		if max_workers and max_workers > 1 and len(items) > 1:
			with ThreadPoolExecutor(max_workers=max_workers) as pool:
				matched = list(pool.map(work, items))  # map preserves input order
		else:
			matched = [work(c) for c in items]

		results: List[MatchedRecommendation] = []
		bound_ids = set()
		for rec in matched:
			if rec.record is None:
				logger.info(f"[Recommender] No catalog match for '{rec.proposed_title}' (score={rec.match_confidence:.3f})")
				if keep_unmatched:
					results.append(rec)
				continue
			if rec.record.id in bound_ids:
				logger.info(f"[Recommender] Dropping duplicate '{rec.proposed_title}' -> '{rec.record.title}'")
				continue
			bound_ids.add(rec.record.id)
			results.append(rec)

		logger.info(f"[Recommender] Reconciled {len(results)} of {len(items)} candidates")
		return results

	def build_prompt_context(self, result: Union[SearchResult, Sequence[CatalogRecord]]) -> str:
		"""One line per record for the generation prompt: title | players | complexity | theme | mechanics."""
		records = result.records if isinstance(result, SearchResult) else result
		lines = []
		for record in records:
			complexity = "unknown" if record.complexity is None else f"{record.complexity:.1f}/5"
			mechanics = ", ".join(sorted(record.facets)) or "none listed"
			lines.append(
				f"{record.title} | Players: {format_range(record.player_range)} | Complexity: {complexity} "
				f"| Theme: {record.category or 'unknown'} | Mechanics: {mechanics}"
			)
		return "\n".join(lines)

	def _as_candidates(self, candidates: Any) -> List[Candidate]:
		if isinstance(candidates, (list, tuple)) and all(isinstance(c, Candidate) for c in candidates):
			return list(candidates)
		return parse_model_response(list(candidates) if isinstance(candidates, tuple) else candidates)

	def _load_catalog(self) -> Sequence[CatalogRecord]:
		source = self.catalog_source
		if isinstance(source, CatalogCache):
			return source.get()  # raises CatalogUnavailable itself
		try:
			loaded = source() if callable(source) else source
		except Exception as e:
			logger.error(f"[Recommender] Catalog source failed: {e}")
			raise CatalogUnavailable(f"catalog source failed: {e}") from e
		if loaded is None:
			raise CatalogUnavailable("catalog source returned no data")
		return tuple(loaded)
