from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "postgresql+asyncpg://litejira:litejira_dev@db:5432/litejira"

    # Redis
    REDIS_URL: str = "redis://redis:6379/0"

    # Security
    SECRET_KEY: str = "dev-secret-key-not-for-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    ALLOWED_ORIGINS: str = "*"

    # SendGrid
    SENDGRID_API_KEY: str = "mock_sendgrid_key"
    FROM_EMAIL: str = "noreply@litejira.app"

    # AI Provider (OpenAI-compatible)
    AI_API_KEY: str = "mock_ai_key"
    AI_BASE_URL: str = "https://api.openai.com/v1"
    AI_MODEL: str = "gpt-4o-mini"
    AI_TIMEOUT_SECONDS: float = 60.0

    # Reporting
    REPORT_SCHEDULER_ENABLED: bool = True
    REPORT_SCHEDULER_TIMEZONE: str | None = None  # None = process-local time
    DAILY_REPORT_HOUR: int = 18
    DAILY_REPORT_MINUTE: int = 0
    WEEKLY_REPORT_DAY: str = "fri"
    WEEKLY_REPORT_HOUR: int = 18
    REPORT_RETENTION_DAYS: int = 180  # 0 = keep forever
    DAILY_EMAIL_TASK_LIMIT: int = 10
    WEEKLY_EMAIL_TASK_LIMIT: int = 20
    WEEKLY_PROMPT_TASK_LIMIT: int = 30

    # App
    APP_ENV: str = "development"
    APP_URL: str = "http://localhost:8000"
    FRONTEND_URL: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
