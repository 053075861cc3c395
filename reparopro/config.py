from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ROOT_DIR: str = '/'.join(__file__.split('/')[:-2])
    API_PREFIX: str = '/api/v1'
    PROJECT_NAME: str = "ReparoPro"

    # Database settings
    DATABASE_URL: str = "sqlite:///./reparopro.db"

    # Tokens issued by the authentication gate
    JWT_SECRET: str = "change-me-reparopro-development-secret"
    JWT_ALGORITHM: str = "HS256"

    # OpenAI configuration
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT: float = 30.0

    # Customer portal
    PORTAL_BASE_URL: str = "http://localhost:8079/portal"

    # Sentry configuration
    SENTRY_DSN: str = ""
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
