# task_api/core/config.py
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ALLOWED_ENVS = {"dev", "prod", "test"}


class Settings(BaseSettings):
    # 기본 앱 설정
    env: str = Field("prod", alias="ENV")
    app_version: str = Field("1.0.0", alias="APP_VERSION")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    cors_allow_origins: str = Field(
        "http://localhost:3000,http://localhost:5173",
        alias="CORS_ALLOW_ORIGINS",
    )

    # DB (URL 자체는 db/session.py 에서 환경변수로 조립)
    db_auto_create: bool = Field(False, alias="DB_AUTO_CREATE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("env", mode="before")
    @classmethod
    def _normalize_env(cls, value):
        env = str(value or "").strip().lower()
        if env not in _ALLOWED_ENVS:
            allowed = "|".join(sorted(_ALLOWED_ENVS))
            raise ValueError(f"ENV must be one of {allowed}")
        return env

    @property
    def is_diagnostic(self) -> bool:
        """Only dev exposes internal error messages in 500 responses."""
        return self.env == "dev"

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
