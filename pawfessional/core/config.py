from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    API_BASE_URL: str = "http://localhost:5000/api/mobile"
    EVENTS_URL: str = "http://localhost:5000/api/mobile/events"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    SESSION_STORE: str = "json"  # "json" | "memory"
    SESSION_FILE: str = "./data/session.json"

    REALTIME_ENABLED: bool = True
    REFRESH_EVENT_NAME: str = "appointments_updated"

    CONFIRMATION_DELAY_SECONDS: float = 2.0
    DELETE_ACCOUNT_COUNTDOWN_SECONDS: int = 3


settings = Settings()
