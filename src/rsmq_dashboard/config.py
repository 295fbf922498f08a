"""Environment-based configuration for the queue dashboard."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Dashboard configuration.

    All settings can be overridden via environment variables with
    RSMQ_DASHBOARD_ prefix. For example:
        RSMQ_DASHBOARD_REDIS_URL=redis://prod-redis:6379
        RSMQ_DASHBOARD_NAMESPACE=jobs
    """

    # Backend
    redis_url: str = "redis://127.0.0.1:8909"
    namespace: str = "rsmq"

    # Event loop
    tick_interval: float = Field(default=1.0, gt=0)  # seconds
    quit_key: str = "q"

    # Logging (file only, the terminal belongs to the dashboard)
    log_file: Path | None = None
    log_level: str = "WARNING"

    model_config = {"env_prefix": "RSMQ_DASHBOARD_"}


settings = Settings()
