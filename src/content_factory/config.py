from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.4
DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class ModelConfig:
    name: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    base_url: str = DEFAULT_BASE_URL
    source: str | None = None


def global_config_path() -> Path:
    override = os.environ.get("CONTENT_FACTORY_CONFIG")
    if override:
        return Path(override).expanduser()
    root = os.environ.get("XDG_CONFIG_HOME")
    if root:
        base = Path(root)
    else:
        base = Path.home() / ".config"
    return base / "content-factory" / "config.yaml"


def load_model_config(*, path: Path | None = None) -> ModelConfig:
    """Read the ``model`` section of the config file, then apply env overrides."""
    config_path = path or global_config_path()
    data = _load_yaml_mapping(config_path)
    raw = data.get("model")
    if raw is None:
        config = ModelConfig()
    elif isinstance(raw, Mapping):
        config = _parse_model_config(raw, source=str(config_path))
    else:
        raise ConfigError(f"Expected mapping for model in {config_path}")

    env_model = os.environ.get("GEMINI_MODEL")
    env_base_url = os.environ.get("GEMINI_BASE_URL")
    if env_model or env_base_url:
        config = ModelConfig(
            name=env_model or config.name,
            temperature=config.temperature,
            timeout_seconds=config.timeout_seconds,
            base_url=env_base_url or config.base_url,
            source="environment",
        )
    return config


def resolve_api_key() -> str | None:
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value and value.strip():
            return value.strip()
    return None


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML at {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Expected mapping YAML at {path}")
    return dict(loaded)


def _parse_model_config(raw: Mapping[str, Any], *, source: str) -> ModelConfig:
    fallback = ModelConfig()
    name = _parse_str(raw.get("name"), fallback.name, source=source, key="model.name")
    base_url = _parse_str(raw.get("base_url"), fallback.base_url, source=source, key="model.base_url")
    temperature = _parse_number(
        raw.get("temperature"),
        fallback.temperature,
        source=source,
        key="model.temperature",
    )
    if not 0.0 <= temperature <= 2.0:
        raise ConfigError(f"model.temperature must be between 0 and 2 in {source}")
    timeout_seconds = _parse_number(
        raw.get("timeout_seconds"),
        fallback.timeout_seconds,
        source=source,
        key="model.timeout_seconds",
    )
    if timeout_seconds <= 0:
        raise ConfigError(f"model.timeout_seconds must be positive in {source}")
    return ModelConfig(
        name=name,
        temperature=temperature,
        timeout_seconds=timeout_seconds,
        base_url=base_url,
        source=source,
    )


def _parse_str(value: object, fallback: str, *, source: str, key: str) -> str:
    if value is None:
        return fallback
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key} must be a non-empty string in {source}")
    if any(ch.isspace() for ch in value.strip()):
        raise ConfigError(f"{key} must not contain whitespace in {source}")
    return value.strip()


def _parse_number(value: object, fallback: float, *, source: str, key: str) -> float:
    if value is None:
        return fallback
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number in {source}")
    return float(value)
