"""
Ranking module.
Deterministic ordering helpers for the search tiers: quality tie-breaks, facet overlap,
intent-hint scoring and category round-robin diversification.
"""

from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from .facet_vocabulary import fold_text, tokenize
from .models import CatalogRecord, ParsedQuery


def quality_key(record: CatalogRecord) -> Tuple[bool, int, str, str]:
	"""
	Catalog-intrinsic ordering: ranked records first (lower rank is better),
	then folded title, then id. Used as the explicit tie-break everywhere.
	"""
	return (record.rank is None, record.rank or 0, fold_text(record.title), record.id)


class Ranker:
	"""
	Scores records against a parsed query for the category tier and orders pools.
	Thresholds are tunable; defaults follow the weight bands used by the catalog curators.
	"""

	# Quality tags that satisfy each intent family
	HINT_TAGS: Dict[str, FrozenSet[str]] = {
		"family": frozenset({"family", "gateway", "kids"}),
		"party": frozenset({"party", "social"}),
		"strategy": frozenset({"strategy", "strategic", "thinky", "heavy", "engine", "optimization"}),
		"date": frozenset({"date", "two-player", "couples", "romantic"}),
		"quick": frozenset({"quick", "filler"}),
		"heavy": frozenset({"heavy", "complex", "expert"}),
		"cooperative": frozenset({"cooperative", "coop"}),
		"puzzly": frozenset({"puzzly", "puzzle", "abstract"}),
		"relaxing": frozenset({"relaxing", "peaceful", "low-conflict", "cozy", "chill"}),
		"competitive": frozenset({"competitive", "cutthroat", "tournament"}),
		"gateway": frozenset({"gateway", "beginner"}),
	}

	# Words in a record's category text that place it in a theme family
	THEME_CATEGORY_WORDS: Dict[str, FrozenSet[str]] = {
		"nature": frozenset({"nature", "birds", "animals", "wildlife", "flowers", "gardening", "forest", "hiking"}),
		"fantasy": frozenset({"fantasy", "magic", "dragons", "medieval", "wizards"}),
		"sci-fi": frozenset({"sci", "space", "science", "aliens", "robots", "planet"}),
		"historical": frozenset({"historical", "history", "ancient", "civilizations", "renaissance", "revolution"}),
		"economic": frozenset({"economic", "business", "industry", "industrial", "trade", "market", "restaurants"}),
		"abstract": frozenset({"abstract", "tiles"}),
		"horror": frozenset({"horror", "zombies", "monsters"}),
		"nautical": frozenset({"pirates", "naval", "ocean", "sailing"}),
		"farming": frozenset({"farming", "farm", "agriculture", "harvest"}),
	}

	def __init__(
		self,
		family_max_complexity: float = 2.5,
		heavy_min_complexity: float = 3.5,
		strategy_min_complexity: float = 3.5,
		quick_max_playtime: int = 30,
		party_min_players: int = 6,
	):
		self.family_max_complexity = family_max_complexity
		self.heavy_min_complexity = heavy_min_complexity
		self.strategy_min_complexity = strategy_min_complexity
		self.quick_max_playtime = quick_max_playtime
		self.party_min_players = party_min_players

	def rank_by_overlap(self, records: Iterable[CatalogRecord], facets: FrozenSet[str]) -> List[CatalogRecord]:
		"""Intersection size descending, then quality key."""
		return sorted(records, key=lambda r: (-len(r.facets & facets), quality_key(r)))

	def rank_by_quality(self, records: Iterable[CatalogRecord]) -> List[CatalogRecord]:
		return sorted(records, key=quality_key)

	def hint_score(self, record: CatalogRecord, parsed: ParsedQuery) -> int:
		"""Number of intent and theme hints the record satisfies."""
		score = sum(1 for hint in parsed.category_hints if self._satisfies_hint(record, hint))
		score += sum(1 for theme in parsed.theme_hints if self._satisfies_theme(record, theme))
		return score

	def passes_constraints(self, record: CatalogRecord, parsed: ParsedQuery) -> bool:
		"""Player count and weight band act as filters; unknown record values pass."""
		if parsed.player_hint is not None and not record.supports_players(parsed.player_hint):
			return False
		if parsed.complexity_hint is not None and not parsed.complexity_hint.contains(record.complexity):
			return False
		return True

	def _satisfies_hint(self, record: CatalogRecord, hint: str) -> bool:
		tagged = bool(record.quality_tags & self.HINT_TAGS.get(hint, frozenset({hint})))
		c = record.complexity
		players_max = record.player_range[1] if record.player_range else None
		playtime_max = record.playtime_range[1] if record.playtime_range else None

		if hint == "family":
			# family needs both the tag and a light enough weight
			return tagged and (c is None or c <= self.family_max_complexity)
		if hint == "party":
			return tagged or (players_max is not None and players_max >= self.party_min_players)
		if hint == "strategy":
			return tagged or (c is not None and c >= self.strategy_min_complexity)
		if hint == "date":
			return tagged or players_max == 2
		if hint == "quick":
			return tagged or (playtime_max is not None and playtime_max <= self.quick_max_playtime)
		if hint == "heavy":
			return tagged or (c is not None and c >= self.heavy_min_complexity)
		if hint == "cooperative":
			return tagged or "cooperative" in record.facets
		return tagged

	def _satisfies_theme(self, record: CatalogRecord, theme: str) -> bool:
		if theme in record.quality_tags:
			return True
		words = self.THEME_CATEGORY_WORDS.get(theme, frozenset({theme}))
		return bool(words & set(tokenize(record.category)))

	def diverse_selection(self, records: Sequence[CatalogRecord], limit: int) -> List[CatalogRecord]:
		"""
		Round-robin across distinct categories so results are not one theme repeated.
		Buckets are visited in order of their best record's quality key; records within a
		bucket follow the quality key as well.
		"""
		buckets: Dict[str, List[CatalogRecord]] = {}
		for record in records:
			key = fold_text(record.category).strip() or "unknown"
			buckets.setdefault(key, []).append(record)
		ordered: List[List[CatalogRecord]] = [self.rank_by_quality(b) for b in buckets.values()]
		ordered.sort(key=lambda bucket: (quality_key(bucket[0]), fold_text(bucket[0].category)))

		selected: List[CatalogRecord] = []
		depth = 0
		while len(selected) < limit:
			added = False
			for bucket in ordered:
				if depth < len(bucket):
					selected.append(bucket[depth])
					added = True
					if len(selected) >= limit:
						break
			if not added:
				break
			depth += 1
		return selected
