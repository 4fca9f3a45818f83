# academy_reservations/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment (Docker Compose passes the
    # root .env through), so there is no env_file directive here.
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Production URLs (for inside Docker) ---
    DATABASE_URL_PROD: str = "postgresql://postgres:postgres@db:5432/academy_db"
    REDIS_URL_PROD: str = "redis://redis:6379/0"

    # --- Local Development URLs (for running locally) ---
    DATABASE_URL_LOCAL: str = "sqlite:///./academy_reservations.db"
    REDIS_URL_LOCAL: str = "redis://localhost:6379/0"

    # Auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"

    # --- Reservations ---
    # Minutes a CONFIRMED reservation holds its slot before it expires
    RESERVATION_CONFIRMATION_WINDOW_MINUTES: int = 15
    RESERVATION_SWEEP_INTERVAL_MINUTES: int = 1
    RESERVATION_CREATE_RATE_LIMIT: str = "30/minute"
    ENABLE_SCHEDULER: bool = True

    # --- Pagination ---
    PAGINATION_DEFAULT_LIMIT: int = 10
    PAGINATION_MAX_LIMIT: int = 100

    # --- Dynamic Properties ---
    # These properties return the correct URL based on the ENV
    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def REDIS_URL(self) -> str:
        return self.REDIS_URL_LOCAL if self.ENV == "local" else self.REDIS_URL_PROD


# Create a single instance of the settings
settings = Settings()
