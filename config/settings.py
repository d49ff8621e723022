"""Application configuration settings."""

from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=False
    )

    # OpenWeatherMap API Configuration
    openweather_api_key: str = Field(default="", alias="OPENWEATHER_API_KEY", description="OpenWeatherMap API key")
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="OPENWEATHER_BASE_URL",
        description="OpenWeatherMap weather API base URL"
    )
    openweather_geo_url: str = Field(
        default="https://api.openweathermap.org/geo/1.0",
        alias="OPENWEATHER_GEO_URL",
        description="OpenWeatherMap geocoding API base URL"
    )
    upstream_timeout_seconds: float = Field(
        default=10.0,
        alias="UPSTREAM_TIMEOUT_SECONDS",
        description="Timeout applied to every upstream request"
    )

    # Rate Limiting Configuration
    rate_limit_points: int = Field(default=100, alias="RATE_LIMIT_POINTS", description="Requests allowed per window")
    rate_limit_duration_seconds: float = Field(default=60.0, alias="RATE_LIMIT_DURATION_SECONDS", description="Window length")
    rate_limit_max_keys: int = Field(
        default=10000,
        alias="RATE_LIMIT_MAX_KEYS",
        description="Tracked client count above which expired buckets are swept"
    )
    trust_forwarded_for: bool = Field(
        default=False,
        alias="TRUST_FORWARDED_FOR",
        description="Use the first X-Forwarded-For hop as the client address"
    )

    # Application Configuration
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST", description="Application host")
    app_port: int = Field(default=8080, alias="APP_PORT", description="Application port")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION", description="Version reported by /health")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Log level")


# Global settings instance
settings = Settings()
