from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "Legacy Data Migration Workbench"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Upload
    MAX_FILE_SIZE_MB: int = 50
    SUPPORTED_FORMATS: list = ["csv", "xlsx", "xls"]

    # Profiling
    PROFILE_SAMPLE_SIZE: int = 5
    KEY_NAME_POLICY: str = "substring"  # "substring" or "suffix"

    # Records endpoint pagination ceiling
    RECORDS_PAGE_LIMIT: int = 10_000

    # Bundled sample dataset (defaults to migrator/sample_data/baltimore_incidents.csv)
    SAMPLE_DATA_PATH: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origin_list(self) -> list:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
