"""
Configuration settings for the matching engine.
Every tunable can be overridden with a GAMEMATCH_* environment variable.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchingSettings(BaseSettings):
	"""Engine configuration"""

	model_config = SettingsConfigDict(env_prefix="GAMEMATCH_")

	catalog_path: Optional[Path] = Field(default=None)  # JSONL catalog file, if loading from disk
	catalog_ttl_seconds: float = Field(default=300.0, ge=0.0)  # process-wide snapshot refresh interval
	default_limit: int = Field(default=10, ge=1)  # records returned by search when no limit given
	min_pool_size: int = Field(default=3, ge=1)  # pool size that lets a tier win outright
	match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)  # fuzzy binding acceptance
	complexity_tolerance: float = Field(default=0.3, ge=0.0)  # allowed drift on claimed weight
	playtime_tolerance: int = Field(default=10, ge=0)  # minutes allowed on each playtime bound
	log_level: str = Field(default="INFO")
