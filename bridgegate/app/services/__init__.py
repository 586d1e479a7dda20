"""Services for the edge server."""

from bridgegate.app.services.compression import accepts_gzip, maybe_compress
from bridgegate.app.services.rate_limiter import RateLimitDecision, RateLimiter
from bridgegate.app.services.static_assets import StaticAssetSource
from bridgegate.app.services.widget_config import (
    build_widget_config,
    fee_recipient,
    referral_key,
    widget_config_json,
)

__all__ = [
    "accepts_gzip",
    "maybe_compress",
    "RateLimitDecision",
    "RateLimiter",
    "StaticAssetSource",
    "build_widget_config",
    "fee_recipient",
    "referral_key",
    "widget_config_json",
]
