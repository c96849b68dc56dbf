"""
Rejection sink and settings tests.
"""

from loguru import logger

from gamematch.models import SpecRejection
from gamematch.observability import LoggerRejectionSink, NullRejectionSink, configure_logging
from gamematch.settings import MatchingSettings


def test_logger_sink_emits_structured_entries():
	messages = []
	handler_id = logger.add(messages.append, level="INFO", format="{message}")
	try:
		sink = LoggerRejectionSink(request_id="req-1")
		sink.log_rejected_claim("Azul", "worker-placement")
		sink.log_rejected_spec("Azul", SpecRejection("players", "2-6", "2-4", "mismatch"))
	finally:
		logger.remove(handler_id)

	assert len(messages) == 2
	claim, spec = (m.record["extra"] for m in messages)
	assert claim["event"] == "rejected_claim"
	assert claim["claim"] == "worker-placement"
	assert claim["request_id"] == "req-1"
	assert spec["event"] == "rejected_spec"
	assert spec["field"] == "players"
	assert "Rejected facet claim 'worker-placement' for 'Azul'" in messages[0]


def test_null_sink_accepts_everything():
	sink = NullRejectionSink()
	assert sink.log_rejected_claim("Azul", "x") is None
	assert sink.log_rejected_spec("Azul", SpecRejection("players", "9", "2-4", "mismatch")) is None


def test_configure_logging_returns_handler():
	handler_id = configure_logging("debug", enqueue=False)
	try:
		assert isinstance(handler_id, int)
	finally:
		logger.remove(handler_id)


def test_settings_from_environment(monkeypatch):
	monkeypatch.setenv("GAMEMATCH_DEFAULT_LIMIT", "7")
	monkeypatch.setenv("GAMEMATCH_MATCH_THRESHOLD", "0.65")

	settings = MatchingSettings()

	assert settings.default_limit == 7
	assert settings.match_threshold == 0.65
	assert settings.min_pool_size == 3
	assert settings.catalog_path is None
