from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    project_name: str = "rma-portal"
    database_url: str = "sqlite:///./rma_portal.db"

    admin_api_key: str = "dev-admin-key"
    cron_secret: str = "dev-cron-secret"

    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"

    archive_after_days: int = 30
    archive_cron_hour: int = 3

    rma_prefix: str = "RMA"
    rma_max_attempts: int = 10

    company_name: str = "ESYSYNC Service Center"
    seed_error_types: bool = True

    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None

    # UI runs on localhost:3001. Allow local dev + docker dev.
    cors_origins: list[str] = [
        "http://localhost:3001",
        "http://127.0.0.1:3001",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]


settings = Settings()
