"""
Candidate intake module.
Validates the generative model's structured output. Everything here is untrusted input:
malformed items are skipped, never allowed to break the batch.
"""

import json  # raw model responses arrive as JSON text
import re  # code-fence stripping and title recovery
from typing import Any, List, Optional  # type annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from loguru import logger  # console logging


RE_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.I)
RE_TITLE_FIELD = re.compile(r'"title"\s*:\s*"([^"]+)"')


class ClaimedSpecs(BaseModel):
	"""Numeric/text claims the model made about a game; checked later against the catalog."""

	model_config = ConfigDict(extra="ignore")

	players: Optional[str] = None  # e.g. "2-4"
	playtime: Optional[str] = None  # e.g. "30-45 min"
	complexity: Optional[float] = None  # e.g. 2.4

	@field_validator("players", "playtime", mode="before")
	@classmethod
	def _as_text(cls, value: Any) -> Optional[str]:
		if value is None or (isinstance(value, str) and not value.strip()):
			return None
		return str(value).strip()

	@field_validator("complexity", mode="before")
	@classmethod
	def _as_float(cls, value: Any) -> Optional[float]:
		# Models write "2.4", "2.4/5" or "medium"; anything non-numeric is dropped
		if value is None or isinstance(value, bool):
			return None
		if isinstance(value, (int, float)):
			return float(value)
		m = re.search(r"\d+(?:\.\d+)?", str(value))
		return float(m.group(0)) if m else None


class Candidate(BaseModel):
	"""One model-proposed suggestion before binding and validation."""

	model_config = ConfigDict(extra="ignore", populate_by_name=True)

	proposed_title: str = Field(alias="title")
	claimed_facets: List[str] = Field(default_factory=list, alias="mechanics")
	claimed_specs: ClaimedSpecs = Field(default_factory=ClaimedSpecs, alias="specs")
	narrative_text: str = Field(default="", alias="narrative")

	@model_validator(mode="before")
	@classmethod
	def _collect_loose_fields(cls, data: Any) -> Any:
		"""Accept the flat shape the model is prompted with (players/playtime at top level, pitch + reasoning)."""
		if not isinstance(data, dict):
			return data
		data = dict(data)
		if "specs" not in data and "claimed_specs" not in data:
			flat = {k: data[k] for k in ("players", "playtime", "complexity") if k in data}
			if flat:
				data["specs"] = flat
		if "narrative" not in data and "narrative_text" not in data:
			parts = [data.get(k) for k in ("sommelierPitch", "pitch", "reasoning")]
			data["narrative"] = " ".join(p.strip() for p in parts if isinstance(p, str) and p.strip())
		if "title" not in data and "proposed_title" not in data and "name" in data:
			data["title"] = data["name"]
		return data

	@field_validator("proposed_title")
	@classmethod
	def _title_required(cls, value: str) -> str:
		value = value.strip()
		if not value:
			raise ValueError("title must not be empty")
		return value

	@field_validator("claimed_facets", mode="before")
	@classmethod
	def _as_list(cls, value: Any) -> List[str]:
		if value is None:
			return []
		if isinstance(value, str):
			return [value]
		return [str(item) for item in value if item is not None and str(item).strip()]


def parse_model_response(payload: Any) -> List[Candidate]:
	"""
	Turn a model response into candidates.
	Accepts a dict with a "recommendations" list, a bare list, or JSON text (optionally inside
	markdown code fences). Unparseable text falls back to recovering "title" fields line by line.
	"""
	if isinstance(payload, (bytes, bytearray)):
		payload = payload.decode("utf-8", errors="replace")

	if isinstance(payload, str):
		cleaned = RE_CODE_FENCE.sub("", payload.strip())
		try:
			payload = json.loads(cleaned)
		except json.JSONDecodeError as e:
			logger.warning(f"[Candidates] Response is not valid JSON ({e}); recovering titles by pattern")
			titles = RE_TITLE_FIELD.findall(cleaned)
			return [Candidate(title=t) for t in titles if t.strip()]

	if isinstance(payload, dict):
		items = payload.get("recommendations") or payload.get("candidates") or []
	elif isinstance(payload, list):
		items = payload
	else:
		logger.warning(f"[Candidates] Unsupported response type {type(payload).__name__}, no candidates")
		return []

	candidates: List[Candidate] = []
	for index, item in enumerate(items):
		if isinstance(item, str):
			item = {"title": item}
		try:
			candidates.append(Candidate.model_validate(item))
		except ValidationError as e:
			logger.warning(f"[Candidates] Skipping invalid candidate #{index}: {e.errors()[0].get('msg')}")
	logger.debug(f"[Candidates] Parsed {len(candidates)} of {len(items)} candidates")
	return candidates
