"""
Query parsing module.
Extracts requested mechanics (facets), intent hints, themes, player count and weight from free text.
This is a keyword/phrase recall layer: it never raises on unexpected input.
"""

import re  # keyword boundaries and number extraction
from typing import Dict, FrozenSet, List, Optional, Set, Tuple  # type annotations

from loguru import logger  # console logging

from .facet_vocabulary import FacetVocabulary, slugify, tokenize  # facet normalization
from .models import ComplexityBand, ParsedQuery  # structured query representation


class QueryParser:
	"""
	Parses free-text requests into a structured ParsedQuery.
	Uses the facet vocabulary for mechanics, fixed keyword families for intent and themes,
	and regex for player counts. Identical input always yields an identical ParsedQuery.
	"""

	# Intent keyword families: hint -> phrases that signal it
	CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
		"family": ("family", "families", "kid", "kids", "children", "child", "parents", "casual"),
		"party": ("party", "parties", "social", "group", "large group", "crowd", "laughs"),
		"strategy": ("strategy", "strategic", "thinking", "brain", "thinky", "deep"),
		"date": ("date", "date night", "couple", "couples", "romantic", "partner", "two player", "2 player"),
		"quick": ("quick", "fast", "short", "filler", "lunch break"),
		"heavy": ("heavy", "expert", "experts", "complex", "brain burner", "brain burn", "crunchy"),
		"cooperative": ("cooperative", "coop", "co op", "together", "team up"),
		"puzzly": ("puzzle", "puzzly", "logic", "brain teaser"),
		"relaxing": ("relaxing", "chill", "peaceful", "zen", "calm", "cozy"),
		"competitive": ("competitive", "cutthroat", "tournament", "contest"),
		"gateway": ("gateway", "beginner", "beginners", "newcomer", "newcomers", "introduction", "starter"),
	}

	# Theme keyword families matched against a record's category text
	THEME_KEYWORDS: Dict[str, Tuple[str, ...]] = {
		"nature": ("nature", "wildlife", "animals", "birds", "forest", "environment", "garden"),
		"fantasy": ("fantasy", "magic", "dragons", "dragon", "medieval", "wizards"),
		"sci-fi": ("space", "sci fi", "science fiction", "alien", "aliens", "robot", "robots", "futuristic"),
		"historical": ("historical", "history", "ancient", "civilization", "civilizations", "war"),
		"economic": ("economic", "economy", "business", "money", "industrial", "market"),
		"abstract": ("abstract", "mathematical"),
		"horror": ("horror", "zombie", "zombies", "scary", "monsters"),
		"nautical": ("pirate", "pirates", "sailing", "naval", "ocean"),
		"farming": ("farming", "farm", "agriculture", "harvest", "crops"),
	}

	# Complexity keyword families (checked in order; the heaviest band mentioned wins)
	COMPLEXITY_KEYWORDS: Tuple[Tuple[ComplexityBand, Tuple[str, ...]], ...] = (
		(ComplexityBand.LIGHT, ("simple", "easy", "light", "lightweight", "casual", "easy to learn")),
		(ComplexityBand.MEDIUM, ("medium", "moderate", "midweight", "medium weight")),
		(ComplexityBand.HEAVY, ("heavy", "complex", "brain burn", "brain burner", "heavyweight")),
	)

	NUMBER_WORDS: Dict[str, int] = {
		"one": 1, "two": 2, "three": 3, "four": 4, "five": 5, "six": 6,
		"seven": 7, "eight": 8, "nine": 9, "ten": 10, "twelve": 12,
	}

	# "4 players", "2-player", "three people", "6 person"
	RE_PLAYERS = re.compile(
		r"\b(\d{1,2}|one|two|three|four|five|six|seven|eight|nine|ten|twelve)\s*-?\s*(?:players?|persons?|people)\b"
	)
	RE_SOLO = re.compile(r"\b(?:solo|solitaire|single player|by myself)\b")
	# Up to four words directly before "mechanic(s)"/"mechanism(s)"
	RE_MECHANIC_PHRASE = re.compile(r"((?:[a-z0-9]+\s+){1,4})mechani(?:c|cs|sm|sms)\b")

	# Words that end a mechanic phrase when scanning backwards ("games with time travel mechanics")
	PHRASE_BREAKERS: FrozenSet[str] = frozenset({
		"with", "and", "or", "using", "use", "uses", "has", "have", "having", "featuring",
		"like", "of", "for", "that", "the", "a", "an", "some", "any", "game", "games", "good", "great",
	})

	STOP_WORDS: FrozenSet[str] = frozenset({
		"a", "an", "the", "and", "or", "with", "for", "of", "to", "in", "on", "at", "by", "my", "our",
		"me", "we", "i", "is", "are", "that", "this", "some", "any", "game", "games", "board",
		"boardgame", "boardgames", "play", "want", "looking", "recommend", "something", "about",
		"mechanic", "mechanics", "players", "player", "people",
	})

	def __init__(self, vocabulary: Optional[FacetVocabulary] = None):
		self.vocabulary = vocabulary or FacetVocabulary()
		# Pre-compile a boundary regex per keyword family to avoid substring hits ("update" != "date")
		self._category_patterns = {
			hint: self._compile_family(words) for hint, words in self.CATEGORY_KEYWORDS.items()
		}
		self._theme_patterns = {
			hint: self._compile_family(words) for hint, words in self.THEME_KEYWORDS.items()
		}
		self._complexity_patterns = [
			(band, self._compile_family(words)) for band, words in self.COMPLEXITY_KEYWORDS
		]
		logger.debug(
			f"[Parser] Initialized with {len(self._category_patterns)} intent families and {len(self._theme_patterns)} theme families"
		)

	@staticmethod
	def _compile_family(words: Tuple[str, ...]) -> "re.Pattern":
		# Longest phrases first so alternation prefers "brain burner" over "brain"
		ordered = sorted(words, key=len, reverse=True)
		alternation = "|".join(r"\s+".join(map(re.escape, w.split())) for w in ordered)
		return re.compile(rf"\b(?:{alternation})\b")

	def parse(self, query: str) -> ParsedQuery:
		"""Main entry: produce a ParsedQuery from a raw string (empty input gives empty hints)."""
		raw = query if isinstance(query, str) else ""
		# Fold case/diacritics and turn punctuation into spaces so boundaries behave
		q = " ".join(tokenize(raw))
		logger.debug(f"[Parser] Input query: '{raw}' -> normalized: '{q}'")

		if not q:
			logger.debug("[Parser] Empty query after normalization, no hints extracted")
			return ParsedQuery(raw_query=raw)

		# 1) Facets (vocabulary phrases + explicit "<phrase> mechanics" slugs)
		facets = self._extract_facets(q)

		# 2) Intent families and themes
		categories = self._match_families(q, self._category_patterns)
		themes = self._match_families(q, self._theme_patterns)

		# 3) Player count and complexity band
		players = self._extract_player_hint(q)
		complexity = self._extract_complexity(q)

		# 4) Leftover keywords for diagnostics
		keywords = self._extract_keywords(q)

		parsed = ParsedQuery(
			raw_query=raw,
			requested_facets=frozenset(facets),
			category_hints=frozenset(categories),
			theme_hints=frozenset(themes),
			player_hint=players,
			complexity_hint=complexity,
			keywords=keywords,
		)
		logger.debug(
			f"[Parser] Parsed result | facets={sorted(parsed.requested_facets)} | categories={sorted(parsed.category_hints)} "
			f"| themes={sorted(parsed.theme_hints)} | players={parsed.player_hint} | complexity={parsed.complexity_hint} "
			f"| keywords={parsed.keywords}"
		)
		return parsed

	def _extract_facets(self, q: str) -> Set[str]:
		facets = set(self.vocabulary.match_phrases(q))
		for tag in sorted(facets):
			logger.debug(f"[Parser] Facet phrase match -> '{tag}'")

		# "<phrase> mechanics": keep what the user named even if the vocabulary does not know it
		for m in self.RE_MECHANIC_PHRASE.finditer(q):
			words = m.group(1).split()
			phrase: List[str] = []
			for word in reversed(words):
				if word in self.PHRASE_BREAKERS:
					break
				phrase.insert(0, word)
			if not phrase:
				continue
			text = " ".join(phrase)
			known = self.vocabulary.match_phrases(text)
			if known:
				facets.update(known)
				continue
			slug = slugify(text)
			facets.add(slug)
			logger.debug(f"[Parser] Unrecognized mechanic phrase '{text}' -> slug '{slug}'")
		return facets

	def _match_families(self, q: str, patterns: Dict[str, "re.Pattern"]) -> Set[str]:
		found: Set[str] = set()
		for hint, pattern in patterns.items():
			m = pattern.search(q)
			if m:
				found.add(hint)
				logger.debug(f"[Parser] Keyword family match: '{m.group(0)}' -> '{hint}'")
		return found

	def _extract_player_hint(self, q: str) -> Optional[int]:
		m = self.RE_PLAYERS.search(q)
		if m:
			value = m.group(1)
			count = int(value) if value.isdigit() else self.NUMBER_WORDS[value]
			if count > 0:
				logger.debug(f"[Parser] Found player count '{m.group(0)}' -> {count}")
				return count
		if self.RE_SOLO.search(q):
			logger.debug("[Parser] Found solo keyword -> 1")
			return 1
		logger.debug("[Parser] No player count found")
		return None

	def _extract_complexity(self, q: str) -> Optional[ComplexityBand]:
		band: Optional[ComplexityBand] = None
		for candidate, pattern in self._complexity_patterns:
			if pattern.search(q):
				band = candidate
		if band:
			logger.debug(f"[Parser] Complexity band -> {band.value}")
		return band

	def _extract_keywords(self, q: str) -> List[str]:
		# Deduplicate while preserving order
		seen = set()
		keywords = []
		for token in q.split():
			if token in self.STOP_WORDS or token.isdigit() or token in seen:
				continue
			seen.add(token)
			keywords.append(token)
		logger.debug(f"[Parser] Final keywords: {keywords}")
		return keywords
