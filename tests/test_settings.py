import pytest
from pydantic import ValidationError

from bridgegate.app.core.config import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.rate_limit_requests == 50
    assert settings.rate_limit_window_seconds == 30
    assert settings.rate_limit_algorithm == "fixed_window"
    assert settings.static_cache_max_age == 31536000
    assert settings.dynamic_cache_max_age == 3600
    assert settings.default_input_chain == 1
    assert settings.gzip_enabled is True


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "5")
    monkeypatch.setenv("RATE_LIMIT_ALGORITHM", " Token_Bucket ")
    monkeypatch.setenv("STATIC_DIR", "/srv/widget/dist")

    settings = Settings(_env_file=None)

    assert settings.rate_limit_requests == 5
    assert settings.rate_limit_algorithm == "token_bucket"
    assert settings.static_dir == "/srv/widget/dist"


@pytest.mark.parametrize(
    "overrides",
    [
        {"rate_limit_requests": 0},
        {"rate_limit_window_seconds": 0},
        {"rate_limit_max_entries": -1},
        {"slow_request_threshold_ms": -5},
        {"static_cache_max_age": -1},
        {"rate_limit_algorithm": "sliding_log"},
        {"log_format": "xml"},
    ],
)
def test_invalid_values_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
