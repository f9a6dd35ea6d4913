from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "NBA Research Score API"
    environment: str = "development"
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_allow_origins: str = Field(default="http://localhost:3000,http://localhost:5173", validation_alias="CORS_ALLOW_ORIGINS")
    espn_api_url: str = Field(
        default="https://site.api.espn.com/apis/site/v2/sports/basketball/nba",
        validation_alias="ESPN_API_URL",
    )
    espn_timeout_seconds: int = Field(default=15, validation_alias="ESPN_TIMEOUT_SECONDS")
    espn_max_retries: int = Field(default=3, validation_alias="ESPN_MAX_RETRIES")
    espn_backoff_seconds: float = Field(default=1.0, validation_alias="ESPN_BACKOFF_SECONDS")
    espn_impersonate: str = Field(default="chrome", validation_alias="ESPN_IMPERSONATE")
    odds_api_url: str = Field(
        default="https://api.the-odds-api.com/v4",
        validation_alias="ODDS_API_URL",
    )
    odds_api_key: str | None = Field(default=None, validation_alias="ODDS_API_KEY")
    odds_regions: str = Field(default="us", validation_alias="ODDS_REGIONS")
    odds_markets: str = Field(default="spreads,h2h", validation_alias="ODDS_MARKETS")
    odds_timeout_seconds: int = Field(default=15, validation_alias="ODDS_TIMEOUT_SECONDS")
    odds_max_retries: int = Field(default=1, validation_alias="ODDS_MAX_RETRIES")
    odds_backoff_seconds: float = Field(default=1.5, validation_alias="ODDS_BACKOFF_SECONDS")

    # Slate settings
    slate_timezone: str = Field(default="America/Los_Angeles", validation_alias="SLATE_TIMEZONE")
    recent_games_limit: int = Field(default=10, validation_alias="RECENT_GAMES_LIMIT")
    fetch_workers: int = Field(default=8, validation_alias="FETCH_WORKERS")
    slate_cache_ttl_seconds: float = Field(default=300.0, validation_alias="SLATE_CACHE_TTL_SECONDS")

    # Cache settings
    cache_dir: str = Field(default="data/cache", validation_alias="CACHE_DIR")
    cache_default_ttl_seconds: float = Field(default=300.0, validation_alias="CACHE_DEFAULT_TTL_SECONDS")
    cache_espn_ttl_seconds: float = Field(default=300.0, validation_alias="CACHE_ESPN_TTL_SECONDS")
    cache_odds_ttl_seconds: float = Field(default=1800.0, validation_alias="CACHE_ODDS_TTL_SECONDS")

    # Collection logging
    collection_log_path: str = Field(default="logs/collection.jsonl", validation_alias="COLLECTION_LOG_PATH")

    database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
    )


settings = Settings()
