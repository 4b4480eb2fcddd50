from __future__ import annotations

from typing import Literal

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ADMIN_PASSWORD_HASH = (
    "$2b$12$sdOU8uwfeIt/6CaZUIM6ke71zg30wHn0r3QC4TDA3xHYwQxTVEEXi"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="AIRBOARD_",
        case_sensitive=False,
    )

    env: str = Field(default="development")
    debug: bool = Field(default=False)
    docs_enabled: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    secret_key: str = Field(min_length=32)
    algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=30, ge=1, le=60 * 24 * 30)

    admin_username: str = Field(default="admin", min_length=3, max_length=64)
    admin_password_hash: str = Field(default=DEFAULT_ADMIN_PASSWORD_HASH, min_length=10)

    cors_origins: list[str] = Field(default_factory=list)
    trusted_hosts: list[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1"])

    store_backend: Literal["rtdb", "influx"] = Field(default="rtdb")
    store_url: AnyHttpUrl = Field(default="https://airboard-default-rtdb.firebaseio.com")
    store_auth_token: str | None = Field(default=None)
    store_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)
    data_root: str = Field(default="data", min_length=1)
    history_path_template: str = Field(default="data/{board}/historial", min_length=7)
    boards_path: str = Field(default="boards", min_length=1)

    influx_url: AnyHttpUrl = Field(default="http://influxdb:8086")
    influx_token: str = Field(default="")
    influx_org: str = Field(default="")
    influx_bucket: str = Field(default="")
    influx_measurement: str = Field(default="air_quality")
    influx_board_tag: str = Field(default="board")
    influx_timeout_ms: int = Field(default=10_000, ge=1000, le=120_000)

    realtime_window: int = Field(default=25, ge=1, le=1000)
    refresh_enabled: bool = Field(default=True)
    refresh_interval_seconds: float = Field(default=60.0, ge=0.25, le=3600.0)
    root_wait_timeout_seconds: float = Field(default=6.0, ge=0.0, le=60.0)
    store_wait_timeout_seconds: float = Field(default=8.0, ge=0.0, le=60.0)
    boards_poll_interval_seconds: float = Field(default=30.0, ge=0.5, le=3600.0)
    admin_pin_ttl_seconds: float = Field(default=300.0, ge=10.0, le=3600.0)
    stale_response_policy: Literal["last_request", "last_completion"] = Field(
        default="last_request"
    )

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


def load_settings() -> Settings:
    settings = Settings()
    if not settings.cors_origins:
        settings.cors_origins = ["http://localhost:3000", "http://localhost:8000"]
    return settings
