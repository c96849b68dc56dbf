"""
Data models for the game matching engine.
Defines the core data structures shared by the parser, search tiers, matcher and validator.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Enum gives us closed sets of values that serialize as plain strings
from enum import Enum  # match types and complexity bands
# Import typing helpers for precise and self-documenting types
from typing import FrozenSet, List, Optional, Tuple  # sets, lists, optional values and ranges


class MatchType(str, Enum):
	"""Which search tier produced the final result set."""

	EXACT = "exact"  # every requested facet present
	PARTIAL = "partial"  # at least one requested facet present
	CATEGORY = "category"  # intent hints (family, party, themes...) matched
	DIVERSE = "diverse"  # unconditional broad fallback


class ComplexityBand(str, Enum):
	"""Coarse weight preference extracted from the query."""

	LIGHT = "light"
	MEDIUM = "medium"
	HEAVY = "heavy"

	def bounds(self) -> Tuple[float, float]:
		"""Inclusive (min, max) complexity for this band on the 1.0-5.0 scale."""
		if self is ComplexityBand.LIGHT:
			return (0.0, 2.5)
		if self is ComplexityBand.MEDIUM:
			return (2.0, 3.5)
		return (3.5, 5.0)

	def contains(self, complexity: Optional[float]) -> bool:
		"""Unknown complexity is never excluded."""
		if complexity is None:
			return True
		low, high = self.bounds()
		return low <= complexity <= high


@dataclass(frozen=True)
class CatalogRecord:
	"""
	A single game that may be recommended.
	Records are read-only snapshots of the external store; nothing in the engine mutates them.
	"""
	id: str  # stable identifier from the store
	title: str  # display title exactly as stored (e.g., "Brass: Birmingham")
	facets: FrozenSet[str] = frozenset()  # canonical mechanic tags only
	category: str = ""  # free-form theme (e.g., "nature/birds")
	complexity: Optional[float] = None  # weight on a 1.0-5.0 scale
	player_range: Optional[Tuple[int, int]] = None  # (min, max) supported players
	playtime_range: Optional[Tuple[int, int]] = None  # (min, max) minutes
	quality_tags: FrozenSet[str] = frozenset()  # descriptive tags ("family", "heavy", ...)
	rank: Optional[int] = None  # intrinsic quality rank, lower is better
	description: str = ""  # optional blurb, never used for facts

	def supports_players(self, count: int) -> bool:
		"""True if the record's player range includes count (unknown ranges pass)."""
		if self.player_range is None:
			return True
		low, high = self.player_range
		return low <= count <= high


@dataclass
class ParsedQuery:
	"""
	Represents the meaning we extract from the user's free-text request.
	Facets are already canonical (or vocabulary slugs) when this object is built.
	"""
	raw_query: str  # the original text the user typed
	requested_facets: FrozenSet[str] = frozenset()  # canonical mechanic tags asked for
	category_hints: FrozenSet[str] = frozenset()  # coarse intent families ("family", "party", ...)
	theme_hints: FrozenSet[str] = frozenset()  # theme families ("nature", "fantasy", ...)
	player_hint: Optional[int] = None  # e.g., 4 for "a game for 4 players"
	complexity_hint: Optional[ComplexityBand] = None  # weight band if the user stated one
	keywords: List[str] = field(default_factory=list)  # leftover tokens, diagnostics only

	def has_intent_hints(self) -> bool:
		return bool(self.category_hints or self.theme_hints)


@dataclass
class TierOutcome:
	"""How one tier fared during a search (for provenance and logging)."""
	match_type: MatchType
	pool_size: int


@dataclass
class SearchResult:
	"""Output of the tiered search: the final record set plus how it was produced."""
	records: List[CatalogRecord]  # ordered, unique by id
	match_type: MatchType  # tier that produced records
	requested_facets: FrozenSet[str]  # echo of the parsed request
	available_facets: FrozenSet[str]  # every facet present in the catalog
	query: Optional[ParsedQuery] = None  # full parsed query for callers that want hints
	tiers_tried: List[TierOutcome] = field(default_factory=list)  # evaluated tiers in order

	@property
	def fulfilled_facets(self) -> bool:
		"""False when the user asked for mechanics the catalog could not supply."""
		return self.match_type in (MatchType.EXACT, MatchType.PARTIAL)

	@property
	def missing_facets(self) -> FrozenSet[str]:
		"""Requested facets that no catalog record carries."""
		return self.requested_facets - self.available_facets


@dataclass
class SpecRejection:
	"""A numeric/text spec claim that disagreed with the catalog record."""
	field: str  # "players", "playtime" or "complexity"
	claimed: str  # what the model said, as text
	actual: str  # authoritative value from the record, as text
	reason: str  # "mismatch" or "unparseable"


@dataclass
class MatchedRecommendation:
	"""
	A model candidate bound to a catalog record (or explicitly unbound).
	Facts come from the record; only narrative_text is passed through from the model.
	"""
	proposed_title: str  # title as the model wrote it
	record: Optional[CatalogRecord]  # bound record, None when no catalog match
	match_confidence: float  # 0.0-1.0 from the fuzzy matcher
	accepted_facets: List[str] = field(default_factory=list)  # canonical, subset of record.facets
	rejected_facets: List[str] = field(default_factory=list)  # claims discarded as unsupported
	rejected_specs: List[SpecRejection] = field(default_factory=list)  # spec claims discarded
	narrative_text: str = ""  # prose, not fact-checked

	@property
	def matched(self) -> bool:
		return self.record is not None

	@property
	def specs(self) -> dict:
		"""Authoritative specs taken from the record, never from the model."""
		if self.record is None:
			return {"players": None, "playtime": None, "complexity": None}
		return {
			"players": self.record.player_range,
			"playtime": self.record.playtime_range,
			"complexity": self.record.complexity,
		}
