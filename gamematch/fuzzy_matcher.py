"""
Fuzzy title matching module.
Binds a model-proposed title to exactly one catalog record, or reports no match.
"""

from functools import lru_cache  # titles repeat across requests
from typing import List, Optional, Sequence, Tuple  # type annotations

from rapidfuzz import fuzz, utils  # string similarity and default preprocessing

from loguru import logger  # console logging

from .facet_vocabulary import fold_text  # diacritic folding shared with the vocabulary
from .models import CatalogRecord  # catalog record type
from .ranking import quality_key  # deterministic tie-break


@lru_cache(maxsize=8192)
def normalize_title(title: str) -> str:
	"""
	Lowercase, strip diacritics and punctuation, drop a leading article, collapse whitespace.
	"Brass: Birmingham" -> "brass birmingham", "The Crew" -> "crew".
	"""
	if not title:
		return ""
	text = fold_text(title).replace("&", " and ")
	words = utils.default_process(text).split()
	if len(words) > 1 and words[0] in ("the", "a", "an"):
		words = words[1:]
	return " ".join(words)


class TitleMatcher:
	"""
	Scores every record title against the proposed title and keeps the best one.
	Signals, strongest first: exact normalized equality, word-boundary containment
	(subtitles and editions), near-identical spelling, and fuzzy token-set overlap.
	"""

	# Titles made only of these words are too generic to bind by containment
	GENERIC_WORDS = frozenset({
		"game", "games", "card", "cards", "board", "the", "edition", "deluxe", "expansion", "big", "box", "and",
	})

	def __init__(
		self,
		min_confidence: float = 0.5,
		token_similarity: int = 88,
		near_equal_ratio: int = 90,
		min_containment_chars: int = 4,
	):
		self.min_confidence = min_confidence  # below this we report no match
		self.token_similarity = token_similarity  # rapidfuzz ratio for two words to count as shared
		self.near_equal_ratio = near_equal_ratio  # whole-title ratio treated as a misspelling
		self.min_containment_chars = min_containment_chars  # shorter side must be at least this long

	def match(self, proposed_title: str, catalog: Sequence[CatalogRecord]) -> Tuple[Optional[CatalogRecord], float]:
		"""Return (record, confidence) for the best match, or (None, best_score) below threshold."""
		proposed = normalize_title(proposed_title or "")
		if not proposed or not catalog:
			logger.debug(f"[Matcher] Nothing to match for '{proposed_title}'")
			return None, 0.0

		scored = [(self.score(proposed, normalize_title(record.title)), record) for record in catalog]
		# Highest score wins; equal scores fall back to catalog quality ordering
		best_score, best = min(scored, key=lambda item: (-item[0], quality_key(item[1])))

		if best_score < self.min_confidence:
			logger.debug(f"[Matcher] No match for '{proposed_title}' (best score={best_score:.3f})")
			return None, round(best_score, 4)

		logger.debug(f"[Matcher] '{proposed_title}' -> '{best.title}' ({best.id}) confidence={best_score:.3f}")
		return best, round(best_score, 4)

	def score(self, a: str, b: str) -> float:
		"""Similarity of two normalized titles in [0, 1]."""
		if not a or not b:
			return 0.0
		if a == b:
			return 1.0
		return max(self._containment(a, b), self._near_equal(a, b), self._token_overlap(a, b))

	def _containment(self, a: str, b: str) -> float:
		shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
		short_tokens, long_tokens = shorter.split(), longer.split()
		if len(shorter) < self.min_containment_chars or set(short_tokens) <= self.GENERIC_WORDS:
			return 0.0
		position = self._find_run(short_tokens, long_tokens)
		if position is None:
			return 0.0
		coverage = len(shorter) / len(longer)
		if position == 0:
			return 0.8 + 0.2 * coverage  # "wingspan" vs "wingspan the card game"
		return 0.6 + 0.2 * coverage  # "catan" vs "settlers of catan"

	def _near_equal(self, a: str, b: str) -> float:
		ratio = fuzz.ratio(a, b)
		if ratio < self.near_equal_ratio:
			return 0.0
		return 0.9 * ratio / 100.0

	def _token_overlap(self, a: str, b: str) -> float:
		tokens_a, tokens_b = set(a.split()), set(b.split())
		shared = []
		for token in sorted(tokens_a):
			if token in tokens_b:
				shared.append(token)
			elif len(token) >= 4 and any(
				fuzz.ratio(token, other) >= self.token_similarity for other in tokens_b if len(other) >= 4
			):
				shared.append(token)
		# "card game" alone says nothing about which game
		if set(shared) <= self.GENERIC_WORDS:
			return 0.0
		union = len(tokens_a) + len(tokens_b) - len(shared)
		return len(shared) / union if union else 0.0

	@staticmethod
	def _find_run(needle: List[str], haystack: List[str]) -> Optional[int]:
		"""Index where needle occurs as a contiguous run of whole words in haystack."""
		size = len(needle)
		for start in range(0, len(haystack) - size + 1):
			if haystack[start:start + size] == needle:
				return start
		return None
