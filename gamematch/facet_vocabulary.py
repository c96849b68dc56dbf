"""
Facet vocabulary module.
Maps free-text mechanic phrasing (from users or from the model) onto a closed set of canonical facet tags.
"""

import re  # tokenization and slug cleanup
import unicodedata  # diacritic stripping
from typing import Dict, FrozenSet, List, Optional, Set, Tuple  # type annotations

from rapidfuzz import fuzz, process  # typo-tolerant single-word lookup

from loguru import logger  # console logging


_TOKEN_RE = re.compile(r"[a-z0-9]+")


def fold_text(text: str) -> str:
	"""Lowercase and strip diacritics ("Café" -> "cafe"); None-safe."""
	if not text:
		return ""
	decomposed = unicodedata.normalize("NFKD", text)
	return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def tokenize(text: str) -> List[str]:
	"""Split folded text into alphanumeric tokens; punctuation and hyphens separate words."""
	return _TOKEN_RE.findall(fold_text(text))


def slugify(text: str) -> str:
	"""Best-effort tag for a phrase: lowercase, punctuation stripped, words hyphenated."""
	return "-".join(tokenize(text))


class FacetVocabulary:
	"""
	Bidirectional normalization between arbitrary phrasing and canonical facet tags.
	Lookup is longest-phrase-first over token windows, with a slug fallback for short
	unrecognized phrases. Pure: no state changes after construction, never raises on input.
	"""

	# Closed set of canonical mechanic tags the catalog is allowed to carry
	CANONICAL_FACETS: FrozenSet[str] = frozenset({
		"action-points",
		"area-control",
		"auction-bidding",
		"bluffing",
		"card-drafting",
		"card-play",
		"communication",
		"cooperative",
		"deck-building",
		"deduction",
		"dice-rolling",
		"engine-building",
		"hand-management",
		"hidden-roles",
		"legacy",
		"modular-board",
		"negotiation",
		"network-building",
		"pattern-building",
		"pick-up-and-deliver",
		"point-to-point-movement",
		"push-your-luck",
		"real-time",
		"resource-management",
		"roll-and-write",
		"route-building",
		"set-collection",
		"simultaneous-action-selection",
		"social-deduction",
		"tableau",
		"tableau-building",
		"team-play",
		"tile-laying",
		"trading",
		"trick-taking",
		"variable-player-powers",
		"word-game",
		"worker-placement",
	})

	# Synonym mapping: common user/model phrasings -> single canonical tag
	# (spaced forms of every canonical tag are added automatically)
	FACET_SYNONYMS: Dict[str, str] = {
		"simultaneous": "simultaneous-action-selection",
		"simultaneous action": "simultaneous-action-selection",
		"simultaneous play": "simultaneous-action-selection",
		"worker placer": "worker-placement",
		"workers placement": "worker-placement",
		"deckbuilding": "deck-building",
		"deckbuilder": "deck-building",
		"deck builder": "deck-building",
		"deck building game": "deck-building",
		"area majority": "area-control",
		"area influence": "area-control",
		"area majority influence": "area-control",
		"territory control": "area-control",
		"tile placement": "tile-laying",
		"tile laying game": "tile-laying",
		"pattern recognition": "pattern-building",
		"collecting sets": "set-collection",
		"engine builder": "engine-building",
		"tableau builder": "tableau-building",
		"drafting": "card-drafting",
		"draft": "card-drafting",
		"auction": "auction-bidding",
		"auctions": "auction-bidding",
		"bidding": "auction-bidding",
		"negotiate": "negotiation",
		"coop": "cooperative",
		"co op": "cooperative",
		"co operative": "cooperative",
		"cooperative game": "cooperative",
		"trick taker": "trick-taking",
		"roll write": "roll-and-write",
		"roll n write": "roll-and-write",
		"flip and write": "roll-and-write",
		"dice rolling": "dice-rolling",
		"dice roller": "dice-rolling",
		"dice game": "dice-rolling",
		"managing resources": "resource-management",
		"realtime": "real-time",
		"card game": "card-play",
		"variable powers": "variable-player-powers",
		"asymmetric powers": "variable-player-powers",
		"asymmetric": "variable-player-powers",
		"point to point": "point-to-point-movement",
		"word games": "word-game",
		"wordplay": "word-game",
		"teams": "team-play",
		"team based": "team-play",
		"press your luck": "push-your-luck",
		"bluff": "bluffing",
		"hidden role": "hidden-roles",
		"hidden traitor": "hidden-roles",
		"traitor": "hidden-roles",
		"action point allowance": "action-points",
		"pickup and deliver": "pick-up-and-deliver",
	}

	# Words that never carry meaning on their own when building a slug
	FILLER_WORDS: FrozenSet[str] = frozenset({
		"a", "an", "the", "game", "games", "mechanic", "mechanics", "mechanism", "mechanisms",
	})

	MAX_SLUG_TOKENS = 4  # longer unrecognized text is treated as prose, not a facet
	FUZZY_MIN_TOKEN_LENGTH = 7  # short tokens are too collision-prone for typo matching
	FUZZY_SCORE_CUTOFF = 90  # rapidfuzz ratio required for a typo match

	def __init__(self, extra_synonyms: Optional[Dict[str, str]] = None):
		# Build the normalized phrase table once; keys are space-joined tokens
		table: Dict[str, str] = {}
		for tag in self.CANONICAL_FACETS:
			table[" ".join(tokenize(tag))] = tag
		for phrase, tag in self.FACET_SYNONYMS.items():
			table[" ".join(tokenize(phrase))] = tag
		for phrase, tag in (extra_synonyms or {}).items():
			if tag not in self.CANONICAL_FACETS:
				raise ValueError(f"Synonym '{phrase}' maps to non-canonical tag '{tag}'")
			table[" ".join(tokenize(phrase))] = tag

		self._phrases = table
		self._max_phrase_len = max(len(key.split()) for key in table)
		# Single-word keys long enough for typo matching, sorted for deterministic ties
		self._fuzzy_words = sorted(
			key for key in table if " " not in key and len(key) >= self.FUZZY_MIN_TOKEN_LENGTH
		)
		logger.debug(
			f"[Vocabulary] Initialized with {len(self.CANONICAL_FACETS)} canonical tags and {len(table)} phrases"
		)

	@property
	def canonical_tags(self) -> FrozenSet[str]:
		return self.CANONICAL_FACETS

	def is_canonical(self, tag: str) -> bool:
		return tag in self.CANONICAL_FACETS

	def lookup(self, phrase: str) -> Optional[str]:
		"""Exact table lookup for one phrase (tolerates a trailing plural 's')."""
		key = " ".join(tokenize(phrase))
		if key in self._phrases:
			return self._phrases[key]
		if key.endswith("s") and key[:-1] in self._phrases:
			return self._phrases[key[:-1]]
		return None

	def match_phrases(self, text: str) -> Set[str]:
		"""Canonical tags recognizable inside text via the phrase table (no slug fallback)."""
		tags, _ = self._scan(tokenize(text))
		return tags

	def normalize(self, text: str) -> Set[str]:
		"""
		Return the canonical tags found in text.
		Falls back to a slug for short unrecognized phrases; long or empty text yields an empty set.
		"""
		tokens = tokenize(text)
		if not tokens:
			return set()

		tags, _ = self._scan(tokens)
		if tags:
			return tags

		# Slug fallback for phrase-like text only
		content = [t for t in tokens if t not in self.FILLER_WORDS]
		if 0 < len(content) <= self.MAX_SLUG_TOKENS:
			slug = "-".join(content)
			logger.debug(f"[Vocabulary] No phrase match for '{text}', using slug '{slug}'")
			return {slug}
		return set()

	def _scan(self, tokens: List[str]) -> Tuple[Set[str], List[bool]]:
		"""Longest-match-first phrase scan; returns tags and which tokens were consumed."""
		consumed = [False] * len(tokens)
		tags: Set[str] = set()

		for size in range(min(self._max_phrase_len, len(tokens)), 0, -1):
			for start in range(0, len(tokens) - size + 1):
				if any(consumed[start:start + size]):
					continue
				tag = self.lookup(" ".join(tokens[start:start + size]))
				if tag is None:
					continue
				tags.add(tag)
				for i in range(start, start + size):
					consumed[i] = True
				logger.debug(f"[Vocabulary] Phrase match: '{' '.join(tokens[start:start + size])}' -> '{tag}'")

		# Typo tolerance on leftover long tokens (e.g., "cooperativ" -> cooperative)
		for i, token in enumerate(tokens):
			if consumed[i] or len(token) < self.FUZZY_MIN_TOKEN_LENGTH or not self._fuzzy_words:
				continue
			best = process.extractOne(
				token, self._fuzzy_words, scorer=fuzz.ratio, score_cutoff=self.FUZZY_SCORE_CUTOFF
			)
			if best:
				tags.add(self._phrases[best[0]])
				consumed[i] = True
				logger.debug(f"[Vocabulary] Fuzzy match: token='{token}' -> '{best[0]}' (score={best[1]:.0f})")

		return tags, consumed
