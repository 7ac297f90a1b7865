from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    DATABASE_URL: str = Field(..., description="Async PostgreSQL connection string (postgresql+asyncpg://...)")
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Redis (empty string disables AI rate limiting)
    REDIS_URL: str = Field("", description="redis://localhost:6379/0")

    # Auth
    SECRET_KEY: str = Field(..., description="Shared secret used to sign user tokens")
    TOKEN_TTL_SECONDS: int = 604800  # 7 days

    # AI gateway (Groq, OpenAI-compatible)
    GROQ_API_KEY: str = Field("", description="Groq API key for quiz generation and tutoring")
    GROQ_MODEL: str = Field("llama-3.3-70b-versatile", description="Groq model to use")
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1/chat/completions"
    AI_TIMEOUT_SECONDS: float = 120.0
    AI_MAX_TOKENS: int = 8192
    AI_RATE_LIMIT_PER_MINUTE: int = 20

    # Quiz Settings
    MCQ_MIN_QUESTIONS: int = 1
    MCQ_MAX_QUESTIONS: int = 30
    HISTORY_DEFAULT_LIMIT: int = 50

    # Chat Settings
    CHAT_HISTORY_LIMIT: int = 20
    CHAT_MAX_TOKENS: int = 2000

    # Environment
    FRONTEND_URL: str = "http://localhost:5173"
    ENV: str = "production"  # development, staging, production
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
