"""
Tiered search tests: exact -> partial -> category -> diverse, honesty about unmet requests,
non-emptiness and determinism.
Run: python tests/test_search_engine.py
"""

import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from sample_catalog import build_catalog, make_record

from gamematch.models import MatchType
from gamematch.query_parser import QueryParser
from gamematch.search_engine import TieredSearchEngine


def ids(result):
	return [r.id for r in result.records]


def test_exact_tier_returns_every_tagged_record(parser: QueryParser, engine: TieredSearchEngine):
	catalog = [make_record(f"wp-{i}", f"Placement Game {i}", {"worker-placement"}, rank=i + 1) for i in range(5)]
	catalog += [make_record(f"other-{i}", f"Other Game {i}", {"dice-rolling"}, rank=100 + i) for i in range(200)]

	result = engine.search(parser.parse("games with worker placement"), catalog, limit=10)

	assert result.match_type == MatchType.EXACT
	assert ids(result) == [f"wp-{i}" for i in range(5)]
	assert all("worker-placement" in r.facets for r in result.records)
	assert result.fulfilled_facets


def test_partial_tier_orders_by_rank(parser, engine, catalog):
	result = engine.search(parser.parse("deck building and worker placement games"), catalog, limit=10)

	# nobody has both, three records have one of them
	assert result.match_type == MatchType.PARTIAL
	assert ids(result) == ["great-western-trail", "dominion", "parks"]
	assert [t.match_type for t in result.tiers_tried] == [MatchType.EXACT, MatchType.PARTIAL]


def test_unknown_mechanic_falls_through(parser, engine, catalog):
	result = engine.search(parser.parse("games with time travel mechanics"), catalog, limit=5)

	assert result.requested_facets == frozenset({"time-travel"})
	assert result.match_type == MatchType.DIVERSE
	assert len(result.records) == 5
	assert not result.fulfilled_facets
	assert result.missing_facets == frozenset({"time-travel"})


def test_absent_canonical_facet_is_never_exact(parser, engine, catalog):
	result = engine.search(parser.parse("a legacy game"), catalog, limit=5)

	assert result.match_type not in (MatchType.EXACT, MatchType.PARTIAL)
	assert result.records
	assert "legacy" in result.missing_facets


def test_category_tier_ranks_by_hints(parser, engine, catalog):
	result = engine.search(parser.parse("a relaxing family game about nature"), catalog, limit=10)

	assert result.match_type == MatchType.CATEGORY
	# cascadia satisfies all three hints, parks two
	assert ids(result)[:2] == ["cascadia", "parks"]
	assert "brass-birmingham" not in ids(result)


def test_category_tier_applies_player_filter(parser, engine, catalog):
	result = engine.search(parser.parse("a party game for 8 players"), catalog, limit=10)

	assert result.match_type == MatchType.CATEGORY
	assert set(ids(result)) == {"codenames", "just-one"}


def test_diverse_respects_player_count(parser, engine, catalog):
	result = engine.search(parser.parse("a game for 8 players"), catalog, limit=5)

	assert result.match_type == MatchType.DIVERSE
	assert ids(result) == ["codenames", "just-one"]


def test_diverse_respects_weight_band(parser, engine, catalog):
	result = engine.search(parser.parse("something simple and light"), catalog, limit=len(catalog))

	assert result.match_type == MatchType.DIVERSE
	assert result.records
	assert all(r.complexity <= 2.5 for r in result.records)
	assert {"brass-birmingham", "great-western-trail", "trailblazers"}.isdisjoint(ids(result))


def test_unsatisfiable_filter_still_returns_records(parser, engine, catalog):
	result = engine.search(parser.parse("a game for 20 players"), catalog, limit=3)

	assert result.match_type == MatchType.DIVERSE
	assert len(result.records) == 3


def test_category_tier_keeps_exact_matches_first(parser, engine, catalog):
	result = engine.search(parser.parse("a quick game with worker placement"), catalog, limit=5)

	# four quick games outnumber the single worker placement game, which still leads
	assert result.match_type == MatchType.CATEGORY
	assert ids(result) == ["parks", "codenames", "dominion", "splendor", "just-one"]


def test_small_pool_is_not_padded(parser, engine, catalog):
	result = engine.search(parser.parse("worker placement"), catalog, limit=10)

	# one record only, but precision beats padding with other tiers
	assert result.match_type == MatchType.EXACT
	assert ids(result) == ["parks"]


def test_limit_one_lets_precise_tier_win(parser, engine, catalog):
	result = engine.search(parser.parse("deck building"), catalog, limit=1)

	assert result.match_type == MatchType.EXACT
	assert ids(result) == ["great-western-trail"]


def test_diverse_round_robin_by_category(parser, engine, catalog):
	result = engine.search(parser.parse(""), catalog, limit=len(catalog))

	assert result.match_type == MatchType.DIVERSE
	assert ids(result)[:5] == ["brass-birmingham", "great-western-trail", "wingspan", "cascadia", "azul"]
	# second "nature" record only after every other category had a turn
	assert ids(result)[-1] == "parks"
	assert len(set(ids(result))) == len(catalog)


@pytest.mark.parametrize("text", ["", "   ", "🎲🎲🎲", "¿¿!!??", "zzzz qqqq", "games with time travel mechanics"])
def test_non_empty_for_non_empty_catalog(parser, engine, catalog, text):
	result = engine.search(parser.parse(text), catalog, limit=3)
	assert len(result.records) >= 1
	assert len(result.records) <= 3


def test_empty_catalog(parser, engine):
	result = engine.search(parser.parse("games with worker placement"), [], limit=5)

	assert result.records == []
	assert result.match_type == MatchType.DIVERSE


def test_invalid_limit(parser, engine, catalog):
	with pytest.raises(ValueError):
		engine.search(parser.parse("anything"), catalog, limit=0)


def test_deterministic_regardless_of_catalog_order(parser, engine, catalog):
	shuffled = list(catalog)
	random.Random(7).shuffle(shuffled)
	for text in ["a relaxing family game about nature", "", "set collection", "deck building and worker placement"]:
		first = engine.search(parser.parse(text), catalog, limit=6)
		second = engine.search(parser.parse(text), shuffled, limit=6)
		assert ids(first) == ids(second)
		assert first.match_type == second.match_type


def test_duplicate_ids_are_dropped(parser, engine, catalog):
	result = engine.search(parser.parse("set collection"), catalog + catalog, limit=10)
	assert len(ids(result)) == len(set(ids(result)))


def main():
	parser = QueryParser()
	engine = TieredSearchEngine()
	print("Running tiered search tests...")
	test_exact_tier_returns_every_tagged_record(parser, engine)
	test_partial_tier_orders_by_rank(parser, engine, build_catalog())
	test_unknown_mechanic_falls_through(parser, engine, build_catalog())
	test_category_tier_ranks_by_hints(parser, engine, build_catalog())
	test_diverse_round_robin_by_category(parser, engine, build_catalog())
	test_empty_catalog(parser, engine)
	print("All tiered search tests passed!")


if __name__ == "__main__":
	main()
