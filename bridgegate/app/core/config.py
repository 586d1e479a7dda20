from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


RATE_LIMIT_ALGORITHMS = ("fixed_window", "token_bucket")
LOG_FORMATS = ("text", "structured", "json")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - exposes exception types in 500 responses
    debug: bool = False

    # Server binding (python -m bridgegate.app)
    host: str = "0.0.0.0"
    port: int = 8000

    # Pre-built widget bundle
    static_dir: str = "widget-react-app/dist"
    index_file: str = "index.html"

    # Cache-Control max-age values in seconds
    static_cache_max_age: int = 31536000  # 1 year, fingerprinted /assets/*
    dynamic_cache_max_age: int = 3600  # 1 hour, everything else

    # Widget configuration
    default_input_chain: int = 1

    # Response compression
    gzip_enabled: bool = True

    # Rate limiting settings
    rate_limit_requests: int = 50
    rate_limit_window_seconds: float = 30.0
    rate_limit_algorithm: str = "fixed_window"  # fixed_window | token_bucket
    rate_limit_max_entries: int = 10000

    # Requests slower than this are logged as warnings
    slow_request_threshold_ms: float = 1000.0

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator("rate_limit_requests", "rate_limit_max_entries")
    @classmethod
    def validate_rate_limit_positive(cls, v: int) -> int:
        """Validate rate limit values are positive."""
        if v < 1:
            raise ValueError("Rate limit values must be at least 1")
        return v

    @field_validator("rate_limit_window_seconds", "slow_request_threshold_ms")
    @classmethod
    def validate_duration_positive(cls, v: float) -> float:
        """Validate durations are positive."""
        if v <= 0:
            raise ValueError("Durations must be positive")
        return v

    @field_validator("static_cache_max_age", "dynamic_cache_max_age")
    @classmethod
    def validate_max_age(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Cache max-age must not be negative")
        return v

    @field_validator("rate_limit_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in RATE_LIMIT_ALGORITHMS:
            raise ValueError(
                f"rate_limit_algorithm must be one of {', '.join(RATE_LIMIT_ALGORITHMS)}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
