"""
Check a catalog file before serving it.

This script:
1) Loads games from data/games.jsonl (or the path given as the first argument)
2) Reports facet coverage per canonical tag
3) Lists canonical tags no game carries (queries for them can never be EXACT)
4) Runs a handful of sample searches and prints which tier answered

Usage:
    python -m scripts.check_catalog [path/to/games.jsonl]
"""

import sys  # optional path argument
import time  # measure load time
from collections import Counter  # facet coverage
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from gamematch.data_loader import CatalogLoader  # data ingestion
from gamematch.facet_vocabulary import FacetVocabulary  # canonical tags
from gamematch.recommender import MatchingEngine  # end-to-end search

SAMPLE_QUERIES = [
	"games with worker placement",
	"a cooperative game for 4 players",
	"light family game about nature",
	"heavy economic game with network building",
	"games with time travel mechanics",
]


def main():
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Catalog Check")
	logger.info("=" * 60)

	root = Path(__file__).resolve().parents[1]  # project root
	data_path = Path(sys.argv[1]) if len(sys.argv) > 1 else root / "data" / "games.jsonl"

	# 1) Load data
	logger.info("[1/4] Loading games...")
	t0 = time.time()
	vocabulary = FacetVocabulary()
	records = CatalogLoader(vocabulary).load_records_from_jsonl(str(data_path))
	logger.info(f"[OK] Loaded {len(records)} games in {time.time() - t0:.2f}s")

	# 2) Facet coverage
	logger.info("\n[2/4] Facet coverage...")
	coverage = Counter(tag for record in records for tag in record.facets)
	for tag, count in sorted(coverage.items(), key=lambda item: (-item[1], item[0])):
		logger.info(f"  {tag:<32} {count}")
	untagged = [r.title for r in records if not r.facets]
	if untagged:
		logger.warning(f"Games without any facet: {untagged}")

	# 3) Canonical tags nobody carries
	logger.info("\n[3/4] Unused canonical tags...")
	unused = sorted(vocabulary.canonical_tags - set(coverage))
	logger.info(f"  {len(unused)} unused: {', '.join(unused) or 'none'}")

	# 4) Sample searches
	logger.info("\n[4/4] Sample searches...")
	engine = MatchingEngine(records)
	for query in SAMPLE_QUERIES:
		result = engine.search(query, limit=5)
		titles = ", ".join(r.title for r in result.records)
		logger.info(f"  '{query}' -> {result.match_type.value}: {titles}")

	logger.info("\nAll done!")
	logger.info("=" * 60)


if __name__ == "__main__":
	main()  # invoke checker
