from pydantic_settings import BaseSettings, SettingsConfigDict

from data_assistant.llm.openrouter import DEFAULT_MODEL, OPENROUTER_BASE_URL


class Settings(BaseSettings):
    # Language model
    OPENROUTER_API_KEY: str | None = None
    OPENROUTER_MODEL: str = DEFAULT_MODEL
    LLM_BASE_URL: str = OPENROUTER_BASE_URL
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 1500
    LLM_INTERPRETATION_MAX_TOKENS: int = 1000
    LLM_TIMEOUT_SECONDS: float = 60.0
    APP_URL: str = "http://localhost:8080"
    APP_TITLE: str = "Ella Rises AI Assistant"
    ORGANIZATION_NAME: str = "Ella Rises"

    # Database
    DATABASE_URL: str = "postgresql+psycopg2://postgres@localhost:5432/ella_rises"
    DB_POOL_SIZE: int = 5
    DB_POOL_TIMEOUT_SECONDS: float = 10.0
    QUERY_TIMEOUT_SECONDS: float = 15.0

    # Conversation
    HISTORY_WINDOW: int = 10
    INTERPRETATION_MAX_ROWS: int = 200

    # Comma separated list of accepted X-API-Key values
    API_KEYS: str = ""

    ENVIRONMENT: str = "development"

    # Observability
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str | None = None  # "json" or "console"; defaults by environment
    OTEL_EXPORTER_OTLP_ENDPOINT: str = "disabled"

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def log_json(self) -> bool | None:
        if self.LOG_FORMAT is None:
            return None
        return self.LOG_FORMAT.lower() == "json"

    @property
    def api_key_list(self) -> list[str]:
        return [key.strip() for key in self.API_KEYS.split(",") if key.strip()]


# Create a single instance of the settings to use everywhere
settings = Settings()
