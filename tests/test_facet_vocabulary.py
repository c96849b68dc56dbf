"""
Unit tests for FacetVocabulary: synonyms, longest-match-first, slug fallback and typo tolerance.
"""

import pytest

from gamematch.facet_vocabulary import FacetVocabulary, fold_text, slugify, tokenize


def test_synonyms_map_to_canonical(vocabulary: FacetVocabulary):
	assert vocabulary.normalize("Worker Placement") == {"worker-placement"}
	assert vocabulary.normalize("deck-builder") == {"deck-building"}
	assert vocabulary.normalize("variable powers") == {"variable-player-powers"}
	assert vocabulary.normalize("drafting") == {"card-drafting"}
	assert vocabulary.normalize("simultaneous-action-selection") == {"simultaneous-action-selection"}


def test_every_synonym_target_is_canonical(vocabulary: FacetVocabulary):
	for phrase, tag in FacetVocabulary.FACET_SYNONYMS.items():
		assert vocabulary.is_canonical(tag), f"{phrase} -> {tag}"


def test_longest_phrase_wins(vocabulary: FacetVocabulary):
	# "tableau building" must not also produce the shorter "tableau"
	assert vocabulary.match_phrases("a tableau building game") == {"tableau-building"}
	assert vocabulary.match_phrases("deck building game") == {"deck-building"}


def test_multiple_phrases_in_text(vocabulary: FacetVocabulary):
	tags = vocabulary.normalize("deck building and worker placement")
	assert tags == {"deck-building", "worker-placement"}


def test_plural_lookup(vocabulary: FacetVocabulary):
	assert vocabulary.lookup("worker placements") == "worker-placement"
	assert vocabulary.lookup("nothing like this") is None


def test_slug_fallback_for_short_unknown_phrase(vocabulary: FacetVocabulary):
	assert vocabulary.normalize("time travel") == {"time-travel"}
	assert vocabulary.normalize("time travel mechanics") == {"time-travel"}


def test_long_prose_and_empty_input_yield_nothing(vocabulary: FacetVocabulary):
	assert vocabulary.normalize("the art on this one is really lovely to look at") == set()
	assert vocabulary.normalize("") == set()
	assert vocabulary.normalize("!!!") == set()


def test_typo_tolerance_on_long_tokens(vocabulary: FacetVocabulary):
	assert vocabulary.match_phrases("cooperativ") == {"cooperative"}


def test_extra_synonyms(vocabulary: FacetVocabulary):
	custom = FacetVocabulary(extra_synonyms={"meeple placement": "worker-placement"})
	assert custom.normalize("meeple placement") == {"worker-placement"}
	# The shared instance is untouched
	assert vocabulary.normalize("meeple placement") == {"meeple-placement"}


def test_extra_synonym_must_target_canonical_tag():
	with pytest.raises(ValueError):
		FacetVocabulary(extra_synonyms={"time travel": "time-travel"})


def test_text_helpers():
	assert fold_text("Crème BRÛLÉE") == "creme brulee"
	assert tokenize("Brass: Birmingham (2nd ed.)") == ["brass", "birmingham", "2nd", "ed"]
	assert slugify("Time  Travel!") == "time-travel"
