from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from deepmerge import Merger
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arc3_resolver.domain.models import PLACEHOLDER_IMAGE
from arc3_resolver.domain.urls import JSON_TYPE, UrlResolver

ENV_PREFIX = "ARC3__"


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",") if item.strip()]
        return items
    return value


class AppSettings(BaseModel):
    default_network: str = "testnet"
    placeholder_image: str = PLACEHOLDER_IMAGE


class NetworkSettings(BaseModel):
    ipfs_gateway: str = "https://ipfs.io/ipfs/"
    indexer_url: str = ""
    algod_url: str = ""
    algod_token: str | None = None


def _default_networks() -> dict[str, NetworkSettings]:
    return {
        "testnet": NetworkSettings(
            ipfs_gateway="https://ipfs.io/ipfs/",
            indexer_url="https://testnet-idx.algonode.cloud",
            algod_url="https://testnet-api.algonode.cloud",
        ),
        "mainnet": NetworkSettings(
            ipfs_gateway="https://ipfs.io/ipfs/",
            indexer_url="https://mainnet-idx.algonode.cloud",
            algod_url="https://mainnet-api.algonode.cloud",
        ),
    }


class HttpSettings(BaseModel):
    timeout_sec: float = 10.0
    retry_max_attempts: int = 3
    request_interval_ms: int = 0
    confirm_max_attempts: int = 10


class StorageSettings(BaseModel):
    json_content_types: list[str] = Field(default_factory=lambda: [JSON_TYPE])

    @field_validator("json_content_types", mode="before")
    @classmethod
    def _parse_types(cls, value: Any) -> Any:
        value = _split_csv(value)
        if isinstance(value, list):
            return [str(item).strip().lower() for item in value]
        return value


class LoggingSettings(BaseModel):
    level: str = "INFO"
    style: str = "json"
    console: bool = True
    file_path: str | None = None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    networks: dict[str, NetworkSettings] = Field(default_factory=_default_networks)
    http: HttpSettings = Field(default_factory=HttpSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def url_resolver(self) -> UrlResolver:
        return UrlResolver(self.networks)


_MERGER = Merger([(dict, ["merge"]), (list, ["override"])], ["override"], ["override"])


def _merge_settings(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    return _MERGER.merge(dict(base), override)


def load_settings(path: Path | None) -> Settings:
    file_data: dict[str, Any] = {}
    if path is not None:
        raw = path.read_text(encoding="utf-8")
        if path.suffix in {".yaml", ".yml"}:
            file_data = yaml.safe_load(raw) or {}
        elif path.suffix == ".json":
            file_data = json.loads(raw)
        else:
            raise ValueError(f"Unsupported config format: {path}")

    _sanitize_env_overrides()
    env_settings = Settings()
    overrides = env_settings.model_dump(exclude_unset=True)
    # partial network entries from file or env extend the built-in table
    defaults = {
        "networks": {name: net.model_dump() for name, net in _default_networks().items()}
    }
    merged = _merge_settings(_merge_settings(defaults, file_data), overrides)
    settings = Settings.model_validate(merged)
    if settings.app.default_network not in settings.networks:
        raise ValueError(
            f"default_network {settings.app.default_network!r} is not one of "
            f"{sorted(settings.networks)}"
        )
    return settings


def _sanitize_env_overrides(prefix: str = ENV_PREFIX) -> None:
    list_env_keys = {f"{prefix}STORAGE__JSON_CONTENT_TYPES"}
    for key in list(os.environ.keys()):
        if not key.startswith(prefix):
            continue
        value = os.environ.get(key)
        if value is None:
            continue
        if not value.strip():
            os.environ.pop(key, None)
            continue
        if key in list_env_keys:
            stripped = value.strip()
            if not (stripped.startswith("[") or stripped.startswith("{")):
                items = [item.strip() for item in stripped.split(",") if item.strip()]
                os.environ[key] = json.dumps(items)
                continue
        suffix = key[len(prefix) :]
        if "__" not in suffix:
            try:
                json.loads(value)
            except Exception:
                os.environ.pop(key, None)
