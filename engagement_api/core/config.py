# engagement_api/core/config.py
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "engagement_service"
    env: str = Field(default="local")
    host: str = "0.0.0.0"
    port: int = 8080

    mongo_dsn: str = Field(
        default="mongodb://mongo:27017/engagement?replicaSet=rs0",
        alias="MONGO_DSN"
    )
    mongo_db: str = Field(default="engagement", alias="MONGO_DB")

    sentry_dsn: str = Field(default="", alias="SENTRY_DSN")
    release: str | None = Field(default=None, alias="RELEASE")
    sentry_test_enabled: bool = Field(default=False,
                                      alias="SENTRY_TEST_ENABLED")

    # общий дедлайн на все обращения к Mongo в рамках одного запроса
    request_timeout_s: float = Field(default=5.0, alias="REQUEST_TIMEOUT_S")
    toggle_max_attempts: int = Field(default=3, alias="TOGGLE_MAX_ATTEMPTS")

    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    model_config = SettingsConfigDict(env_file="infra/.env",
                                      extra="ignore",
                                      populate_by_name=True)


settings = Settings()
