import json
import logging

from webapi.logging_config import CorrelationFilter, JSONFormatter, configure_logging, correlation_id
from webapi.settings import ServiceSettings


def _record(**extra):
    record = logging.LogRecord("webapi.test", logging.INFO, __file__, 1, "stored %s", ("a-1",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_correlation_and_extra():
    token = correlation_id.set("cid-42")
    try:
        line = JSONFormatter().format(_record(extra_data={"parts": 2}))
    finally:
        correlation_id.reset(token)
    entry = json.loads(line)
    assert entry["msg"] == "stored a-1"
    assert entry["service"] == "damage-assessment"
    assert entry["correlation_id"] == "cid-42"
    assert entry["data"] == {"parts": 2}
    assert entry["level"] == "INFO"


def test_correlation_filter_defaults_to_dash():
    record = _record()
    assert CorrelationFilter().filter(record)
    assert record.correlation_id == "-"


def test_configure_logging_quiets_http_clients():
    configure_logging(level="DEBUG", fmt="text")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    assert len(logging.getLogger().handlers) == 1


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    monkeypatch.setenv("ASSESSMENT_MAX_TOKENS", "2048")
    monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "30")
    settings = ServiceSettings()
    assert settings.provider_keys()["Gemini"] == "g-key"
    assert settings.assessment_max_tokens == 2048
    assert settings.llm_timeout_seconds == 30.0


def test_settings_defaults_are_demo_mode(monkeypatch):
    for name in ("STRIPE_SECRET_KEY", "POSTGRES_DSN", "ASSESSMENT_PROVIDER"):
        monkeypatch.delenv(name, raising=False)
    settings = ServiceSettings(_env_file=None)
    assert settings.stripe_secret_key == ""
    assert settings.postgres_dsn == ""
    assert settings.assessment_provider == "Claude"
