"""Configuration loading, validation, and access."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from cotation.core.exceptions import ConfigError


def _require_http_url(v: str) -> str:
    if not v.startswith(("http://", "https://")):
        raise ValueError("URL must use http:// or https://")
    return v


def _require_positive_timeout(v: int) -> int:
    if v < 1:
        raise ValueError("timeout_ms must be >= 1")
    return v


class ProviderConfig(BaseModel):
    """Upstream quote provider access."""

    model_config = ConfigDict(frozen=True)

    url: str = "https://economia.awesomeapi.com.br/json/last/USD-BRL"
    pair: str = "USD-BRL"
    timeout_ms: int = 200

    @field_validator("url")
    @classmethod
    def url_is_http(cls, v: str) -> str:
        return _require_http_url(v)

    @field_validator("timeout_ms")
    @classmethod
    def timeout_positive(cls, v: int) -> int:
        return _require_positive_timeout(v)

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000


class StorageConfig(BaseModel):
    """Ledger storage configuration.

    The 10ms default write deadline is inherited as-is; raise it through
    config rather than in code if the store cannot keep up.
    """

    model_config = ConfigDict(frozen=True)

    sqlite_path: str = "./storage/cotation.db"
    timeout_ms: int = 10

    @field_validator("timeout_ms")
    @classmethod
    def timeout_positive(cls, v: int) -> int:
        return _require_positive_timeout(v)

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000


class ServerConfig(BaseModel):
    """Quote server bind address."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8080

    @field_validator("port")
    @classmethod
    def port_in_range(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("port must be between 1 and 65535")
        return v


class ClientConfig(BaseModel):
    """Quote client configuration."""

    model_config = ConfigDict(frozen=True)

    server_url: str = "http://localhost:8080/cotacao"
    timeout_ms: int = 300
    output_path: str = "./cotation.txt"

    @field_validator("server_url")
    @classmethod
    def url_is_http(cls, v: str) -> str:
        return _require_http_url(v)

    @field_validator("timeout_ms")
    @classmethod
    def timeout_positive(cls, v: int) -> int:
        return _require_positive_timeout(v)

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000


class CotationConfig(BaseModel):
    """Root configuration shared by the server and the client."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderConfig = ProviderConfig()
    storage: StorageConfig = StorageConfig()
    server: ServerConfig = ServerConfig()
    client: ClientConfig = ClientConfig()


def load_config(
    config_path: str | None = None,
    env_prefix: str = "COTATION_",
) -> CotationConfig:
    """Load configuration from environment + YAML file + defaults.

    Resolution order (highest priority first):
    1. Environment variables (COTATION_PROVIDER__TIMEOUT_MS, etc.)
    2. YAML file at config_path
    3. Built-in defaults

    Nested keys use double-underscore in env vars:
        COTATION_STORAGE__SQLITE_PATH=/tmp/q.db  ->  storage.sqlite_path
    """
    try:
        yaml_path = _resolve_config_path(config_path)
        base: dict = {}
        if yaml_path is not None:
            base = _load_yaml(yaml_path)

        merged = _merge_env_vars(base, env_prefix)
        return CotationConfig.model_validate(merged)
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(str(e), context={"source": "load_config"}) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Determine config file path."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ConfigError(
                f"Config file not found: {explicit}",
                context={"field": "config_path", "value": explicit},
            )
        return p

    env_path = os.environ.get("COTATION_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.exists():
            raise ConfigError(
                f"Config file from COTATION_CONFIG not found: {env_path}",
                context={"field": "COTATION_CONFIG", "value": env_path},
            )
        return p

    default = Path("cotation.yml")
    if default.exists():
        return default

    return None


def _load_yaml(path: Path) -> dict:
    """Load and parse YAML file."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML config must be a mapping, got {type(data).__name__}",
                context={"field": "config_file", "value": str(path)},
            )
        return data
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e


def _merge_env_vars(base: dict, prefix: str) -> dict:
    """Overlay environment variables onto base config dict.

    Double-underscore separates nesting levels. Values stay strings; the
    config models coerce them to each field's type, so numeric text bound
    for a str field is kept as text.
    """
    result = dict(base)

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        parts = [p.lower() for p in remainder.split("__")]

        # COTATION_CONFIG names the file, it is not a setting
        if parts == ["config"]:
            continue

        target = result
        for part in parts[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[parts[-1]] = value

    return result
