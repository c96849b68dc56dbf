"""
Observability sinks for rejected model claims.
The validator reports through an injected sink so concurrent requests never share log state.
"""

import sys  # default stderr sink
from typing import Optional, Protocol  # sink interface

from loguru import logger  # console logging

from .models import SpecRejection  # structured spec rejections


class RejectionSink(Protocol):
	"""Fire-and-forget receiver for claims the validator discarded."""

	def log_rejected_claim(self, candidate_title: str, rejected_facet: str) -> None:
		...

	def log_rejected_spec(self, candidate_title: str, rejection: SpecRejection) -> None:
		...


class LoggerRejectionSink:
	"""
	Emits one structured loguru entry per rejection.
	With configure_logging(enqueue=True) the write happens on loguru's worker thread,
	so the request path never blocks on I/O.
	"""

	def __init__(self, request_id: Optional[str] = None):
		self._log = logger.bind(component="validator", request_id=request_id)

	def log_rejected_claim(self, candidate_title: str, rejected_facet: str) -> None:
		self._log.bind(event="rejected_claim", candidate=candidate_title, claim=rejected_facet).info(
			f"[Validator] Rejected facet claim '{rejected_facet}' for '{candidate_title}'"
		)

	def log_rejected_spec(self, candidate_title: str, rejection: SpecRejection) -> None:
		self._log.bind(event="rejected_spec", candidate=candidate_title, field=rejection.field).info(
			f"[Validator] Rejected {rejection.field} claim '{rejection.claimed}' for '{candidate_title}' "
			f"(catalog: {rejection.actual}, reason: {rejection.reason})"
		)


class NullRejectionSink:
	"""Discards every rejection."""

	def log_rejected_claim(self, candidate_title: str, rejected_facet: str) -> None:
		return None

	def log_rejected_spec(self, candidate_title: str, rejection: SpecRejection) -> None:
		return None


def configure_logging(level: str = "INFO", enqueue: bool = True) -> int:
	"""Replace loguru's default handler with a non-blocking stderr handler."""
	logger.remove()
	handler_id = logger.add(
		sys.stderr,
		level=level.upper(),
		enqueue=enqueue,
		format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
	)
	return handler_id
