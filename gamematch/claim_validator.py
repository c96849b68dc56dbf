"""
Claim validation module.
Cross-checks what the model said about a game against the bound catalog record.
Facts in the output always come from the record; unsupported claims are dropped and reported.
"""

from typing import List, Optional, Set  # type annotations

from loguru import logger  # console logging

from .candidates import Candidate  # validated model suggestion
from .data_loader import format_range, parse_range  # range text handling shared with the loader
from .facet_vocabulary import FacetVocabulary  # claim normalization
from .models import CatalogRecord, MatchedRecommendation, SpecRejection  # output types
from .observability import NullRejectionSink, RejectionSink  # injected rejection reporting


class ClaimValidator:
	"""
	Accepts a facet claim only when its canonical tags are on the record and a spec claim only
	when it agrees with the record within tolerance. Never raises on candidate content.
	"""

	def __init__(
		self,
		vocabulary: Optional[FacetVocabulary] = None,
		sink: Optional[RejectionSink] = None,
		complexity_tolerance: float = 0.3,
		playtime_tolerance: int = 10,
	):
		self.vocabulary = vocabulary or FacetVocabulary()
		self.sink = sink or NullRejectionSink()  # default sink drops rejections
		self.complexity_tolerance = complexity_tolerance
		self.playtime_tolerance = playtime_tolerance

	def validate(
		self,
		candidate: Candidate,
		record: CatalogRecord,
		match_confidence: float = 1.0,
		sink: Optional[RejectionSink] = None,
	) -> MatchedRecommendation:
		"""Bind candidate to record, keeping only claims the record supports."""
		sink = sink or self.sink
		title = candidate.proposed_title

		accepted, rejected = self._check_facets(candidate.claimed_facets, record)
		rejected_specs = self._check_specs(candidate, record)

		for claim in rejected:
			self._report(sink.log_rejected_claim, title, claim)
		for rejection in rejected_specs:
			self._report(sink.log_rejected_spec, title, rejection)

		logger.debug(
			f"[Validator] '{title}' -> '{record.title}': accepted={accepted} rejected={rejected} "
			f"spec_rejections={[r.field for r in rejected_specs]}"
		)
		return MatchedRecommendation(
			proposed_title=title,
			record=record,
			match_confidence=match_confidence,
			accepted_facets=accepted,
			rejected_facets=rejected,
			rejected_specs=rejected_specs,
			narrative_text=candidate.narrative_text,
		)

	def reject_unbound(
		self,
		candidate: Candidate,
		match_confidence: float = 0.0,
		sink: Optional[RejectionSink] = None,
	) -> MatchedRecommendation:
		"""A candidate with no catalog record: nothing can be verified, so every facet claim is rejected."""
		sink = sink or self.sink
		rejected: List[str] = []
		for claim in candidate.claimed_facets:
			rejected.extend(self._rejection_forms(claim, self.vocabulary.normalize(claim)))
		rejected = self._dedupe(rejected)
		for claim in rejected:
			self._report(sink.log_rejected_claim, candidate.proposed_title, claim)
		return MatchedRecommendation(
			proposed_title=candidate.proposed_title,
			record=None,
			match_confidence=match_confidence,
			rejected_facets=rejected,
			narrative_text=candidate.narrative_text,
		)

	def _check_facets(self, claims: List[str], record: CatalogRecord):
		accepted: Set[str] = set()
		rejected: List[str] = []
		for claim in claims:
			tags = self.vocabulary.normalize(claim)
			supported = tags & record.facets
			accepted.update(supported)
			# "deck building and worker placement" on a deck-builder: reject only the missing half
			rejected.extend(self._rejection_forms(claim, tags - record.facets, partly_supported=bool(supported)))
		return sorted(accepted), self._dedupe(rejected)

	def _rejection_forms(self, claim: str, unsupported: Set[str], partly_supported: bool = False) -> List[str]:
		"""
		Rejections are reported as canonical tags; a claim that names no canonical tag
		(prose, unknown mechanics) is reported as written.
		"""
		canonical = sorted(t for t in unsupported if self.vocabulary.is_canonical(t))
		if canonical or partly_supported:
			return canonical
		return [claim]

	@staticmethod
	def _dedupe(items: List[str]) -> List[str]:
		return list(dict.fromkeys(items))

	def _check_specs(self, candidate: Candidate, record: CatalogRecord) -> List[SpecRejection]:
		specs = candidate.claimed_specs
		rejections: List[SpecRejection] = []

		if specs.players is not None:
			claimed = parse_range(specs.players)
			actual = format_range(record.player_range)
			if claimed is None:
				rejections.append(SpecRejection("players", specs.players, actual, "unparseable"))
			elif record.player_range is None or claimed != record.player_range:
				rejections.append(SpecRejection("players", specs.players, actual, "mismatch"))

		if specs.playtime is not None:
			claimed = parse_range(specs.playtime, minutes=True)
			actual = format_range(record.playtime_range)
			if claimed is None:
				rejections.append(SpecRejection("playtime", specs.playtime, actual, "unparseable"))
			elif record.playtime_range is None or not self._within_minutes(claimed, record.playtime_range):
				rejections.append(SpecRejection("playtime", specs.playtime, actual, "mismatch"))

		if specs.complexity is not None:
			actual = "unknown" if record.complexity is None else f"{record.complexity:g}"
			if record.complexity is None or abs(specs.complexity - record.complexity) > self.complexity_tolerance + 1e-9:
				rejections.append(SpecRejection("complexity", f"{specs.complexity:g}", actual, "mismatch"))

		return rejections

	def _within_minutes(self, claimed, actual) -> bool:
		return all(abs(c - a) <= self.playtime_tolerance for c, a in zip(claimed, actual))

	@staticmethod
	def _report(method, title: str, payload) -> None:
		# Rejection reporting must never break validation
		try:
			method(title, payload)
		except Exception as e:
			logger.warning(f"[Validator] Rejection sink failed for '{title}': {e}")
