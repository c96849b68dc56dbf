"""
Unit tests for QueryParser: mechanics, intent families, player counts and weight bands.
Run: python tests/test_query_parser.py
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from gamematch.models import ComplexityBand
from gamematch.query_parser import QueryParser


def assert_equal(actual, expected, msg):
	if actual != expected:
		raise AssertionError(f"{msg} | expected={expected}, actual={actual}")


def assert_true(cond, msg):
	if not cond:
		raise AssertionError(msg)


def test_mechanic_phrases(parser: QueryParser):
	pq = parser.parse("games with worker placement")
	assert_equal(pq.requested_facets, frozenset({"worker-placement"}), "worker placement phrase")

	pq = parser.parse("a deckbuilder for 2 players")
	assert_equal(pq.requested_facets, frozenset({"deck-building"}), "deckbuilder synonym")
	assert_equal(pq.player_hint, 2, "numeric player count")


def test_unknown_mechanic_becomes_slug(parser: QueryParser):
	pq = parser.parse("games with time travel mechanics")
	assert_equal(pq.requested_facets, frozenset({"time-travel"}), "slug for unknown mechanic")


def test_known_mechanic_phrase_before_mechanics(parser: QueryParser):
	pq = parser.parse("anything with drafting mechanics")
	assert_equal(pq.requested_facets, frozenset({"card-drafting"}), "known phrase is not slugged")


def test_intent_and_theme_families(parser: QueryParser):
	pq = parser.parse("A relaxing family game about nature")
	assert_equal(pq.category_hints, frozenset({"relaxing", "family"}), "intent families")
	assert_equal(pq.theme_hints, frozenset({"nature"}), "theme family")
	assert_true(pq.has_intent_hints(), "hints present")


def test_keyword_boundaries(parser: QueryParser):
	# "update" must not trigger the "date" family
	pq = parser.parse("any update on new releases")
	assert_true("date" not in pq.category_hints, "no substring matches")


def test_player_counts(parser: QueryParser):
	assert_equal(parser.parse("party game for six people").player_hint, 6, "number word")
	assert_equal(parser.parse("something I can play solo").player_hint, 1, "solo keyword")
	assert_equal(parser.parse("a 4-player game").player_hint, 4, "hyphenated count")
	assert_equal(parser.parse("a fun game").player_hint, None, "no count")


def test_complexity_band(parser: QueryParser):
	assert_equal(parser.parse("a light and easy game").complexity_hint, ComplexityBand.LIGHT, "light band")
	assert_equal(parser.parse("heavy strategy game").complexity_hint, ComplexityBand.HEAVY, "heavy band")
	assert_equal(parser.parse("medium weight euro").complexity_hint, ComplexityBand.MEDIUM, "medium band")


def test_total_on_noise(parser: QueryParser):
	for raw in ["", "   ", "🎲🎲🎲", "¿¿!!??", "ÉLÈVE ÇA", None, 42]:
		pq = parser.parse(raw)
		assert_equal(pq.requested_facets, frozenset(), f"no facets for {raw!r}")
	assert_equal(parser.parse(None).raw_query, "", "non-string input becomes empty")


def test_deterministic(parser: QueryParser):
	text = "cooperative deck building for 3 players, nothing too heavy"
	assert_equal(parser.parse(text), parser.parse(text), "same input, same parse")


def test_keywords_drop_stop_words(parser: QueryParser):
	pq = parser.parse("a game with the dragons")
	assert_equal(pq.keywords, ["dragons"], "leftover keywords")


def main():
	parser = QueryParser()
	print("Running QueryParser tests...")
	test_mechanic_phrases(parser)
	test_unknown_mechanic_becomes_slug(parser)
	test_known_mechanic_phrase_before_mechanics(parser)
	print(" - mechanics ok")
	test_intent_and_theme_families(parser)
	test_keyword_boundaries(parser)
	print(" - families ok")
	test_player_counts(parser)
	test_complexity_band(parser)
	print(" - players and weight ok")
	test_total_on_noise(parser)
	test_deterministic(parser)
	test_keywords_drop_stop_words(parser)
	print("All QueryParser tests passed!")


if __name__ == "__main__":
	main()
