from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = "dev"
    country: str = "CL"
    local_percentage_threshold: float | None = None
    stale_after_seconds: int = 300
    media_id_whitelist: list[int] = []
    media_id_whitelist_path: str | None = None
    default_limit: int = 100
    default_created_since_days: float = 7.0
    default_created_until_days: float = 0.0
    default_updated_until_days: float = 1.0
    default_diagnosis_until_days: float = 1.0
    log_level: str = "DEBUG"
    log_dir: str = "logs"
    log_file: str | None = None
    log_max_bytes: int = 1 * 1024 * 1024
    log_backup_count: int = 7
    otel_enabled: bool = False
    otel_service_name: str = "postrefresh"
    otel_exporter_otlp_endpoint: str | None = None
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="PR_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
