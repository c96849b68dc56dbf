"""
Title binding tests: containment, misspellings, generic titles and tie-breaks.
"""

import pytest

from sample_catalog import make_record

from gamematch.fuzzy_matcher import TitleMatcher, normalize_title


def test_normalize_title():
	assert normalize_title("Brass: Birmingham") == "brass birmingham"
	assert normalize_title("The Crew") == "crew"
	assert normalize_title("Pokémon  Go!") == "pokemon go"
	assert normalize_title("Dungeons & Dragons") == "dungeons and dragons"
	assert normalize_title("") == ""


def test_subtitle_binds_by_prefix_containment(matcher: TitleMatcher, catalog):
	record, confidence = matcher.match("Wingspan: The Card Game", catalog)

	assert record is not None and record.id == "wingspan"
	assert confidence >= 0.8


def test_exact_match_ignores_case_and_punctuation(matcher, catalog):
	record, confidence = matcher.match("BRASS BIRMINGHAM", catalog)
	assert record.id == "brass-birmingham"
	assert confidence == 1.0


def test_inner_containment(matcher):
	catalog = [make_record("catan", "The Settlers of Catan", rank=5)]
	record, confidence = matcher.match("Catan", catalog)
	assert record is not None and record.id == "catan"
	assert 0.6 <= confidence < 0.8


def test_misspelling(matcher, catalog):
	record, confidence = matcher.match("Cascadiia", catalog)
	assert record.id == "cascadia"
	assert confidence >= 0.8


@pytest.mark.parametrize("title", ["Monopoly", "Card Game", "The Game", "", "   "])
def test_unrelated_titles_do_not_bind(matcher, catalog, title):
	record, confidence = matcher.match(title, catalog)
	assert record is None
	assert confidence < matcher.min_confidence


def test_generic_words_never_bind_by_containment(matcher):
	catalog = [make_record("wingspan-cards", "Wingspan The Card Game")]
	record, _ = matcher.match("The Card Game", catalog)
	assert record is None


def test_tie_breaks_on_rank(matcher):
	catalog = [
		make_record("azul-reprint", "Azul", rank=900),
		make_record("azul", "Azul", rank=70),
	]
	record, confidence = matcher.match("azul", catalog)
	assert record.id == "azul"
	assert confidence == 1.0


def test_empty_catalog(matcher):
	assert matcher.match("Azul", []) == (None, 0.0)


def test_threshold_is_configurable(catalog):
	strict = TitleMatcher(min_confidence=0.95)
	record, confidence = strict.match("Wingspan: The Card Game", catalog)
	assert record is None
	assert confidence >= 0.8
