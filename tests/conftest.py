import pytest

from sample_catalog import CollectingSink, build_catalog

from gamematch.claim_validator import ClaimValidator
from gamematch.facet_vocabulary import FacetVocabulary
from gamematch.fuzzy_matcher import TitleMatcher
from gamematch.query_parser import QueryParser
from gamematch.search_engine import TieredSearchEngine


@pytest.fixture(scope="session")
def vocabulary():
	return FacetVocabulary()


@pytest.fixture(scope="session")
def parser(vocabulary):
	return QueryParser(vocabulary)


@pytest.fixture
def catalog():
	return build_catalog()


@pytest.fixture
def engine():
	return TieredSearchEngine()


@pytest.fixture
def matcher():
	return TitleMatcher()


@pytest.fixture
def sink():
	return CollectingSink()


@pytest.fixture
def validator(vocabulary, sink):
	return ClaimValidator(vocabulary, sink=sink)
