from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKING_TIMEZONE: str = "Asia/Manila"
    BOOKING_REQUIRE_FUTURE_START: bool = True
    BOOKING_CANCEL_MODE: str = "delete"  # "delete" or "mark"
    COMPENSATION_ATTEMPTS: int = 3

    STORE_PROVIDER: str = "memory"  # "memory", "json", "firebase"
    JSON_STORE_PATH: str = "./data/events.json"
    FIREBASE_DATABASE_URL: str | None = None
    FIREBASE_AUTH_TOKEN: str | None = None

    HOURGLASS_BASE_URL: str = "http://hourglass-qa.shieldfoundry.com"
    HOURGLASS_API_KEY: str | None = None
    HOURGLASS_SERVICE_OFFERING_ID: int = 7
    HOURGLASS_TIMEOUT_SECONDS: float = 5.0
    HOURGLASS_MAX_ATTEMPTS: int = 2


settings = Settings()
