from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # GHL (LeadConnector) settings
    GHL_API_KEY: str | None = None
    GHL_LOCATION_ID: str | None = None
    GHL_BASE_URL: str = "https://services.leadconnectorhq.com"
    GHL_API_VERSION: str = "2021-07-28"
    GHL_REQUEST_TIMEOUT: float = 30.0

    # Supabase settings (call records live in a plain Postgres table)
    SUPABASE_DB_URL: str | None = None
    SUPABASE_TABLE: str = "retell_calls"

    # Cache windows
    METRICS_CACHE_TTL_SECONDS: float = 240.0  # 4 minutes
    TAG_COUNTS_CACHE_TTL_SECONDS: float = 300.0  # 5 minutes

    # Flat per-message SMS price in USD. Not synced with upstream pricing.
    SMS_COST_PER_MESSAGE: float = 0.0079

    # Client IP extraction behind a load balancer
    TRUST_X_FORWARDED_FOR: bool = False
    TRUSTED_PROXY_IPS: list[str] = []

    # =================================================================
    # DATABASE POOL SETTINGS - Simple and configurable
    # =================================================================
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 5
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def ghl_headers(self) -> dict[str, str]:
        """Headers required by every LeadConnector API call."""
        return {
            "Authorization": self.GHL_API_KEY or "",
            "Version": self.GHL_API_VERSION,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def ghl_configured(self) -> bool:
        return bool(self.GHL_API_KEY and self.GHL_LOCATION_ID)

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            # The dashboard only reads; a couple of connections is plenty locally
            config.update(
                {
                    "min_size": 1,
                    "max_size": 3,
                    "timeout": 15.0,
                }
            )

        return config


settings = Settings()
