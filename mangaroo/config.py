"""Configuration read from environment variables."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any


class ConfigError(ValueError):
    """Raised when a configuration value cannot be parsed."""


_UNITS = {"ns": 0.001, "us": 1.0, "\u00b5s": 1.0, "\u03bcs": 1.0,
          "ms": 1e3, "s": 1e6, "m": 6e7, "h": 3.6e9}
_PART = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]*)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``30s``, ``500ms`` or ``1h30m``."""
    sign = -1 if text.startswith("-") else 1
    rest = text[1:] if text[:1] in ("+", "-") else text
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ConfigError(f'time: invalid duration "{text}"')
    total = 0.0
    for number, unit in _PART.findall(rest):
        if not number and not unit:
            continue
        if not number.strip("."):
            raise ConfigError(f'time: invalid duration "{text}"')
        if not unit:
            raise ConfigError(f'time: missing unit in duration "{text}"')
        if unit not in _UNITS:
            raise ConfigError(f'time: unknown unit "{unit}" in duration "{text}"')
        total += float(number) * _UNITS[unit]
    return timedelta(microseconds=sign * total)


def _parse_bool(text: str) -> bool:
    if text in ("1", "t", "T", "TRUE", "true", "True"):
        return True
    if text in ("0", "f", "F", "FALSE", "false", "False"):
        return False
    raise ConfigError(f'invalid syntax for bool: "{text}"')


def _parse_int(text: str) -> int:
    try:
        if re.fullmatch(r"[+-]?0[0-7]+", text):
            return int(text, 8)
        return int(text, 0)
    except ValueError:
        raise ConfigError(f'invalid syntax for int: "{text}"') from None


def _read(env: Mapping[str, str], key: str, default: str,
          convert: Callable[[str], Any] = str, type_name: str = "string") -> Any:
    value = env.get(key, default)
    try:
        return convert(value)
    except ValueError as exc:
        raise ConfigError(f"envconfig.Process: assigning {key}: converting '{value}' "
                          f"to type {type_name}. details: {exc}") from exc


@dataclass(frozen=True)
class ServerConfig:
    port: str = "8080"
    read_timeout: timedelta = timedelta(seconds=30)
    write_timeout: timedelta = timedelta(seconds=30)


@dataclass(frozen=True)
class ElasticsearchConfig:
    url: str = "http://elasticsearch:9200"


@dataclass(frozen=True)
class DownloaderSettings:
    output_folder: str = "output"
    user_agent: str = "Mozilla/5.0..."


@dataclass(frozen=True)
class Config:
    server: ServerConfig = field(default_factory=ServerConfig)
    elasticsearch: ElasticsearchConfig = field(default_factory=ElasticsearchConfig)
    downloader: DownloaderSettings = field(default_factory=DownloaderSettings)


@dataclass(frozen=True)
class BrowserConfig:
    user_agent: str = ""
    headless: bool = True
    timeout: timedelta = timedelta(seconds=30)
    user_data_dir: str = ""


@dataclass(frozen=True)
class DownloadConfig:
    output_folder: str = ""
    retry_count: int = 3
    delay_between: timedelta = timedelta(milliseconds=500)


def _env(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def load(environ: Mapping[str, str] | None = None) -> Config:
    """Load the server configuration from the environment."""
    env = _env(environ)
    try:
        return Config(
            ServerConfig(
                _read(env, "SERVER_PORT", "8080"),
                _read(env, "SERVER_READ_TIMEOUT", "30s", parse_duration, "Duration"),
                _read(env, "SERVER_WRITE_TIMEOUT", "30s", parse_duration, "Duration"),
            ),
            ElasticsearchConfig(_read(env, "ELASTICSEARCH_URL", "http://elasticsearch:9200")),
            DownloaderSettings(_read(env, "OUTPUT_FOLDER", "output"),
                               _read(env, "USER_AGENT", "Mozilla/5.0...")),
        )
    except ConfigError as exc:
        raise ConfigError(f"config load error: {exc}") from exc


def load_browser_config(environ: Mapping[str, str] | None = None) -> BrowserConfig:
    """Load the headless browser settings from the environment."""
    env = _env(environ)
    return BrowserConfig(
        _read(env, "BROWSER_USER_AGENT", ""),
        _read(env, "BROWSER_HEADLESS", "true", _parse_bool, "bool"),
        _read(env, "BROWSER_TIMEOUT", "30s", parse_duration, "Duration"),
        _read(env, "BROWSER_USER_DATA_DIR", ""),
    )


def load_download_config(environ: Mapping[str, str] | None = None) -> DownloadConfig:
    """Load the download retry settings from the environment."""
    env = _env(environ)
    return DownloadConfig(
        _read(env, "DOWNLOAD_OUTPUT", ""),
        _read(env, "DOWNLOAD_RETRIES", "3", _parse_int, "int"),
        _read(env, "DOWNLOAD_DELAY", "500ms", parse_duration, "Duration"),
    )