from pathlib import Path

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

ENV_FILE = Path(__file__).resolve().parents[3] / ".env"
load_dotenv(dotenv_path=ENV_FILE)


class Settings(BaseSettings):
    # Narrative LLM
    BILLINTEL_LLM_PROVIDER: str = "google"
    BILLINTEL_LLM_MODEL: str = "gemini-2.5-flash"
    GOOGLE_API_KEY: str = ""
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    NARRATIVE_TEMPERATURE: float = 0.4
    NARRATIVE_TIMEOUT_SECONDS: float = 30.0

    # Aggregation and scoring
    TOP_CUSTOMERS_LIMIT: int = 10
    MONTH_SWING_THRESHOLD: float = 0.35
    MIN_MONTHS_FOR_TREND: int = 3
    BASE_HEALTH_SCORE: int = 85
    CONSISTENCY_BONUS: int = 10
    ANOMALY_PENALTY: int = 5
    MAX_ANOMALY_PENALTY: int = 40

    # Analysis history (in-process only)
    HISTORY_MAX_ENTRIES: int = 200
    HISTORY_DEFAULT_LIMIT: int = 20

    # HTTP surface
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins(self) -> list[str]:
        origins = [origin.strip() for origin in (self.CORS_ORIGINS or "").split(",")]
        return [origin for origin in origins if origin] or ["*"]

    class Config:
        env_file = str(ENV_FILE)
        extra = "ignore"


settings = Settings()
