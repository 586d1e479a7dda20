"""Shared fixtures: a fake clock, a throwaway widget bundle and an app wired to both."""

import pytest
from fastapi.testclient import TestClient

from bridgegate.app.core.config import Settings
from bridgegate.app.main import create_app
from bridgegate.app.services.rate_limiter import RateLimiter

INDEX_HTML = """<!doctype html>
<html lang="en">
  <head><title>J1T.FYI Bridge Gate</title></head>
  <body><div id="root"></div><script type="module" src="/assets/index.js"></script></body>
</html>
"""

APP_CSS = "body { background: #474646; color: #8f8f8f; font-family: Audiowide; }\n" * 40


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bundle_dir(tmp_path):
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    (dist / "assets" / "app.css").write_text(APP_CSS, encoding="utf-8")
    (dist / "favicon.ico").write_bytes(b"\x00\x00\x01\x00" + bytes(range(64)))
    (dist / "site.webmanifest").write_text('{"name": "J1T.FYI Bridge Gate"}', encoding="utf-8")
    return dist


@pytest.fixture
def app_settings(bundle_dir):
    return Settings(
        _env_file=None,
        static_dir=str(bundle_dir),
        rate_limit_requests=50,
        rate_limit_window_seconds=30,
    )


@pytest.fixture
def rate_limiter(app_settings, clock):
    return RateLimiter(
        limit=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_seconds,
        clock=clock,
    )


@pytest.fixture
def app(app_settings, rate_limiter):
    return create_app(app_settings, rate_limiter=rate_limiter)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)
