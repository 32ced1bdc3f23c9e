from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from unspoken.llm import ChatClientConfig
from unspoken.llm.client import DEFAULT_API_URL, DEFAULT_MODEL

API_KEY_ENV = "OPENAI_API_KEY"


class ConfigError(Exception):
    """Configuration is missing or unreadable."""


@dataclass(frozen=True, slots=True)
class FileConfig:
    api_key: str | None = None
    url: str | None = None
    model: str | None = None
    system_message: str | None = None
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    timeout_s: float | None = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    api_key: str
    client: ChatClientConfig


def default_config_path() -> Path:
    return Path.home() / ".config" / "unspoken.toml"


_STR_KEYS = ("api_key", "url", "model", "system_message")
_FLOAT_KEYS = ("temperature", "top_p", "timeout_s")
_INT_KEYS = ("max_tokens",)


def _check_types(data: dict[str, Any]) -> None:
    for key in _STR_KEYS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"`{key}` must be a string, got {type(value).__name__}")
    for key in _FLOAT_KEYS:
        value = data.get(key)
        # TOML booleans are ints to isinstance; reject them explicitly.
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise ValueError(f"`{key}` must be a number, got {type(value).__name__}")
    for key in _INT_KEYS:
        value = data.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValueError(f"`{key}` must be an integer, got {type(value).__name__}")


def _parse_file_config(data: dict[str, Any], path: Path) -> FileConfig:
    try:
        _check_types(data)
    except ValueError as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e

    def _float(key: str) -> float | None:
        value = data.get(key)
        return float(value) if value is not None else None

    return FileConfig(
        api_key=data.get("api_key"),
        url=data.get("url"),
        model=data.get("model"),
        system_message=data.get("system_message"),
        temperature=_float("temperature"),
        top_p=_float("top_p"),
        max_tokens=data.get("max_tokens"),
        timeout_s=_float("timeout_s"),
    )


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e


def load_file_config(path: Path | None = None) -> FileConfig:
    """
    Load the TOML config file.

    An explicit `path` must exist. Without one, ~/.config/unspoken.toml is
    used when present; a missing default file yields an empty config.
    """
    if path is not None:
        resolved = path.expanduser()
        try:
            data = _read_toml(resolved)
        except OSError as e:
            raise ConfigError(f"Failed to read config file {resolved}: {e}") from e
        return _parse_file_config(data, resolved)

    default = default_config_path()
    try:
        data = _read_toml(default)
    except FileNotFoundError:
        return FileConfig()
    except OSError as e:
        raise ConfigError(f"Failed to read config file {default}: {e}") from e
    return _parse_file_config(data, default)


def load_env() -> None:
    """Load ./.env without overriding variables already set."""
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def resolve_config(
    *,
    config_path: Path | None = None,
    url: str | None = None,
    model: str | None = None,
    system_message: str | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> AppConfig:
    """
    Merge command line options, environment and config file.

    Command line options win over the config file; only unset values fall
    through, so an explicit empty string is kept. The API key comes from
    OPENAI_API_KEY first, then from the config file.
    """
    load_env()
    file_config = load_file_config(config_path)

    # An empty key cannot authenticate, so it falls through like an unset one.
    api_key = os.getenv(API_KEY_ENV) or file_config.api_key
    if not api_key:
        raise ConfigError(f"Set `api_key` in config or `{API_KEY_ENV}` env.")

    client = ChatClientConfig(
        api_url=_first(url, file_config.url, DEFAULT_API_URL),
        model=_first(model, file_config.model, DEFAULT_MODEL),
        system_message=_first(system_message, file_config.system_message),
        temperature=_first(temperature, file_config.temperature),
        top_p=file_config.top_p,
        max_tokens=_first(max_tokens, file_config.max_tokens),
        timeout_s=_first(file_config.timeout_s, 120.0),
    )
    return AppConfig(api_key=api_key, client=client)
