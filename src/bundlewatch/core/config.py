"""Configuration loading (TOML, env vars, .env)."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from bundlewatch.ci.github import DEFAULT_API_URL, DEFAULT_TIMEOUT
from bundlewatch.ci.reporter import MAX_REPORTED_CONTEXTS

logger = logging.getLogger(__name__)

# Load .env from current directory (and parents), won't override existing env vars
load_dotenv()

ENV_MAP = {
    "github_uri": "BUNDLEWATCH_GITHUB_URI",
    "request_timeout": "BUNDLEWATCH_REQUEST_TIMEOUT",
    "max_contexts": "BUNDLEWATCH_MAX_CONTEXTS",
    "host": "BUNDLEWATCH_HOST",
    "port": "BUNDLEWATCH_PORT",
}


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Settings shared by the HTTP service and the CLI."""

    github_uri: str = DEFAULT_API_URL
    request_timeout: float = DEFAULT_TIMEOUT
    max_contexts: int = MAX_REPORTED_CONTEXTS
    host: str = "127.0.0.1"
    port: int = 8080


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}
    for name, env_var in ENV_MAP.items():
        if value := os.environ.get(env_var):
            config[name] = value
    return config


def load_toml_config(cwd: str | None = None) -> dict[str, Any]:
    """Load configuration from .bundlewatch/config.toml if it exists."""
    search_dirs = []
    if cwd:
        search_dirs.append(Path(cwd))
    search_dirs.append(Path.cwd())

    for d in search_dirs:
        toml_path = d / ".bundlewatch" / "config.toml"
        if toml_path.exists():
            try:
                with open(toml_path, "rb") as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                logger.warning("Cannot read config file %s: %s", toml_path, exc)
                continue
            # Settings may sit at top level or under [service]
            return data.get("service", data)
    return {}


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    """Convert raw values to the ServiceConfig field types, dropping bad ones."""
    types = {f.name: f.type for f in fields(ServiceConfig)}
    casts = {"str": str, "float": float, "int": int}
    result: dict[str, Any] = {}
    for name, raw in values.items():
        if name not in types:
            continue
        try:
            result[name] = casts[types[name]](raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid value for %s: %r", name, raw)
    return result


def resolve_service_config(cwd: str | None = None) -> ServiceConfig:
    """Resolve config: defaults < .bundlewatch/config.toml < environment."""
    config = ServiceConfig()
    config = replace(config, **_coerce(load_toml_config(cwd)))
    return replace(config, **_coerce(load_env_config()))
