from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    archive_cron_hour: int = 3
    archive_cron_minute: int = 0
    archive_on_startup: bool = True

    pushgateway_url: str = "http://pushgateway:9091"
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
