"""WolProxy configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from wolproxy.services.discovery import DiscoveryOptions


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "WolProxy"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # Network
    host: str = "0.0.0.0"
    port: int = 8000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    # Wake-on-LAN
    wol_port: int = 9
    wol_address_family: Literal["unspecified", "ipv4", "ipv6"] = "unspecified"
    wol_use_single_interface: bool = False
    wol_prefer_broadcast: bool = False
    interface_cache_ttl_seconds: int = 300  # 5 minutes

    # Mode: dev = log packets only, prod = really send
    mode: str = "prod"

    uvicorn_workers: int = 1

    @property
    def is_dev_mode(self) -> bool:
        return self.mode == "dev"

    def discovery_options(self) -> DiscoveryOptions:
        from wolproxy.services.discovery import DiscoveryOptions, IpFamily

        return DiscoveryOptions(
            address_family=IpFamily(self.wol_address_family),
            port=self.wol_port,
            use_single_interface=self.wol_use_single_interface,
            prefer_broadcast=self.wol_prefer_broadcast,
        )

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="WOLPROXY_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:5173"]

    @field_validator("wol_address_family", mode="before")
    @classmethod
    def normalize_address_family(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or "unspecified"
        return value

    @field_validator("wol_port")
    @classmethod
    def check_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError(f"wol_port out of range: {value}")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
