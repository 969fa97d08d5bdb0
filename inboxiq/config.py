from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Postgres connection string (Supabase or plain Postgres)
    DATABASE_URL: str

    # Auth (bearer tokens issued elsewhere, verified here)
    AUTH_JWKS_URL: str | None = None
    AUTH_AUDIENCE: str = "authenticated"

    # Text generation for follow-up drafts
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_MAX_TOKENS: int = 300
    FOLLOWUP_TIMEOUT_SECONDS: float = 30.0

    # Lead detection rules
    LEAD_REPLY_WINDOW_DAYS: int = 3
    LEAD_FOLLOW_UP_DUE_DAYS: int = 1

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 3
    DB_POOL_MAX_SIZE: int = 12
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def jwks_url(self) -> str | None:
        return self.AUTH_JWKS_URL

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
            # Smaller pool for local Postgres
            config.update(
                {
                    "min_size": 1,
                    "max_size": 5,
                    "timeout": 15.0,
                }
            )
        elif self.environment == "test":
            config.update({"min_size": 1, "max_size": 2, "timeout": 5.0})

        return config


settings = Settings()
