from pydantic_settings import BaseSettings

from dotenv import load_dotenv
load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "Shotboard API"
    API_PREFIX: str = "/api"

    # Any SQLAlchemy URL works; sqlite is the local default
    DATABASE_URL: str = "sqlite:///./shotboard.db"

    REDIS_URL: str = "redis://localhost:6379"
    # "memory" keeps presence in-process, "redis" shares it between instances
    PRESENCE_BACKEND: str = "memory"
    # redis members not refreshed within this window are treated as gone
    PRESENCE_TTL_SECONDS: int = 90

    SESSION_COOKIE_NAME: str = "shotboard_session"
    SESSION_TTL_HOURS: int = 24 * 7

    SUPERUSER_EMAIL: str = "admin"
    SUPERUSER_PASSWORD: str = "admin"

    RELAY_REQUIRE_AUTH: bool = True

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
