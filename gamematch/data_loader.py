"""
Data loading and preprocessing module.
Handles loading games from JSONL (or already-fetched rows) and normalizing them into CatalogRecords.
"""

# Standard libs for JSON parsing, regex, typing, and paths
import json  # read JSON lines
import re  # range parsing
from pathlib import Path  # filesystem-safe paths
from typing import Any, Dict, Iterable, List, Optional, Tuple  # type hints

# Console logging
from loguru import logger  # console logger

# Project modules
from .facet_vocabulary import FacetVocabulary  # mechanic normalization
from .models import CatalogRecord  # structured game record


RE_PARENTHESIZED = re.compile(r"\([^)]*\)")  # "(best 2-3)" notes
RE_INTEGER = re.compile(r"\d+")
RE_HOURS = re.compile(r"\b(?:hours?|hrs?|h)\b", re.I)


def parse_range(value: Any, minutes: bool = False) -> Optional[Tuple[int, int]]:
	"""
	Parse a player or playtime range into (min, max).
	Accepts "1–4 (best 2–3)", "2-8+", "30–45 min", "3", 3 and (2, 4).
	With minutes=True, values written in hours are converted ("1-2 hours" -> (60, 120)).
	Returns None when no number can be read.
	"""
	if value is None or isinstance(value, bool):
		return None
	if isinstance(value, (list, tuple)):
		numbers = [int(v) for v in value if isinstance(v, (int, float)) and not isinstance(v, bool)]
	elif isinstance(value, (int, float)):
		numbers = [int(value)]
	else:
		text = RE_PARENTHESIZED.sub(" ", str(value))  # recommended counts are not limits
		numbers = [int(n) for n in RE_INTEGER.findall(text)]
		if minutes and numbers and RE_HOURS.search(text):
			numbers = [n * 60 for n in numbers]

	if not numbers:
		return None
	low, high = numbers[0], numbers[1] if len(numbers) > 1 else numbers[0]
	return (min(low, high), max(low, high))


def format_range(value: Optional[Tuple[int, int]]) -> str:
	"""(2, 4) -> "2-4", (3, 3) -> "3", None -> "unknown"."""
	if value is None:
		return "unknown"
	low, high = value
	return str(low) if low == high else f"{low}-{high}"


class CatalogLoader:
	"""
	Handles loading and preprocessing of catalog data.
	Mechanics are passed through the facet vocabulary; anything that is not a canonical tag
	is dropped with a warning so records only ever carry canonical facets.
	"""

	def __init__(self, vocabulary: Optional[FacetVocabulary] = None):
		self.vocabulary = vocabulary or FacetVocabulary()  # shared normalization table

	def load_records_from_jsonl(self, filepath: str) -> List[CatalogRecord]:
		"""
		Load games from a JSON Lines (JSONL) file where each line is one JSON object.
		Returns a list of CatalogRecord objects.
		"""
		records = []  # accumulator
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Catalog data file not found: {filepath}")

		logger.info(f"[Catalog] Loading games from {filepath}...")

		with open(filepath, "r", encoding="utf-8") as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():
					continue
				try:
					data = json.loads(line)
					records.append(self._parse_record(data))
				except json.JSONDecodeError as e:
					logger.warning(f"[Catalog] Skipping invalid JSON at line {line_num}: {e}")
				except (KeyError, TypeError, ValueError) as e:
					logger.warning(f"[Catalog] Error parsing game at line {line_num}: {e}")

		logger.info(f"[Catalog] Successfully loaded {len(records)} games.")
		return records

	def records_from_rows(self, rows: Iterable[Dict]) -> List[CatalogRecord]:
		"""Convert rows fetched from any store (dicts) into records, skipping bad rows."""
		records = []
		for index, row in enumerate(rows):
			try:
				records.append(self._parse_record(row))
			except (KeyError, TypeError, ValueError) as e:
				logger.warning(f"[Catalog] Skipping row #{index}: {e}")
		return records

	def _parse_record(self, data: Dict) -> CatalogRecord:
		"""
		Convert a raw dictionary into a CatalogRecord.
		id and title are required; everything else has a safe default.
		"""
		record_id = str(data.get("id", "")).strip()
		title = str(data.get("title") or data.get("name") or "").strip()
		if not record_id:
			raise ValueError("missing id")
		if not title:
			raise ValueError(f"missing title for id '{record_id}'")

		raw_mechanics = data.get("mechanics", data.get("facets", []))
		facets = set()
		for mechanic in self._parse_comma_separated(raw_mechanics):
			tags = self.vocabulary.normalize(mechanic)
			canonical = {t for t in tags if self.vocabulary.is_canonical(t)}
			if not canonical:
				logger.warning(f"[Catalog] '{title}': non-canonical mechanic '{mechanic}' dropped")
			facets.update(canonical)

		tags = self._parse_comma_separated(data.get("tags", data.get("quality_tags", [])))
		complexity = data.get("complexity")
		rank = data.get("rank", data.get("bgg_rank"))

		return CatalogRecord(
			id=record_id,
			title=title,
			facets=frozenset(facets),
			category=str(data.get("category") or data.get("theme") or "").strip().lower(),
			complexity=float(complexity) if complexity not in (None, "") else None,
			player_range=parse_range(data.get("players")),
			playtime_range=parse_range(data.get("playtime"), minutes=True),
			quality_tags=frozenset(t.lower() for t in tags),
			rank=int(rank) if rank not in (None, "") else None,
			description=str(data.get("description") or "").strip(),
		)

	def _parse_comma_separated(self, value) -> List[str]:
		"""
		Normalize a value that may be None, a list, or a comma-separated string
		into a list of clean strings.
		"""
		if value is None:
			return []
		if isinstance(value, (list, tuple)):
			return [str(item).strip() for item in value if item]
		if isinstance(value, str):
			return [item.strip() for item in value.split(",") if item.strip()]
		return []
