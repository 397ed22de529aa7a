# HomeFin - Personal & Family Finance Dashboard client
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for HomeFin.

This module is responsible for:
- loading the application configuration from a TOML file,
- applying defaults for every missing setting,
- exposing typed dataclasses used by the rest of the application.

Expected sections in the TOML file (all optional)
-------------------------------------------------
[api]
    base_url (str), timeout (float, seconds).

[session]
    token_file (str): where the CLI keeps the access/refresh tokens.
    Relative paths are resolved against the directory of the TOML file;
    ``~`` is expanded.

[reports]
    unknown_category_label, untitled_label (str): placeholder labels,
    default_period (str): one of mtd, last-month, ytd, year,
    top_n (int): number of rows kept in "top" report tables.

[display]
    currency (str), decimals (int).

The ``HOMEFIN_API_URL`` environment variable, when set, overrides
``api.base_url``.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .errors import ConfigError
from .periods import PERIOD_CHOICES

DEFAULT_CONFIG_FILE = "homefin_config.toml"
DEFAULT_BASE_URL = "http://localhost:8000/api/v1"
DEFAULT_TOKEN_FILE = "~/.homefin/tokens.json"
API_URL_ENV_VAR = "HOMEFIN_API_URL"


@dataclass(frozen=True)
class ApiConfig:
    """Where and how to reach the backend."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0


@dataclass(frozen=True)
class SessionConfig:
    token_file: Path = field(
        default_factory=lambda: Path(DEFAULT_TOKEN_FILE).expanduser()
    )


@dataclass(frozen=True)
class ReportsConfig:
    """Report options: placeholder labels, default period and table sizes."""

    unknown_category_label: str = "Unknown category"
    untitled_label: str = "Untitled"
    default_period: str = "mtd"
    top_n: int = 10


@dataclass(frozen=True)
class DisplayConfig:
    currency: str = "RUB"
    decimals: int = 2


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for HomeFin.

    This aggregates:
    - the backend API settings,
    - the session (token persistence) settings,
    - report options,
    - display options for tables.
    """

    api: ApiConfig = field(default_factory=ApiConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    reports: ReportsConfig = field(default_factory=ReportsConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        ConfigError: if the file does not exist or cannot be parsed.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ConfigError(f"Failed to parse TOML config file: {path}") from exc

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a TOML table, or an empty mapping when missing or malformed."""
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_api(section: Mapping[str, Any]) -> ApiConfig:
    base_url = str(section.get("base_url") or DEFAULT_BASE_URL)
    env_url = os.environ.get(API_URL_ENV_VAR)
    if env_url:
        base_url = env_url

    try:
        timeout = float(section.get("timeout", 10.0))
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            "Invalid value for 'api.timeout' in the configuration. "
            "Expected a number of seconds."
        ) from exc
    if timeout <= 0:
        raise ConfigError("'api.timeout' must be a positive number of seconds.")

    return ApiConfig(base_url=base_url.rstrip("/"), timeout=timeout)


def _parse_session(section: Mapping[str, Any], base_dir: Path) -> SessionConfig:
    raw_path = str(section.get("token_file") or DEFAULT_TOKEN_FILE)
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return SessionConfig(token_file=path)


def _parse_reports(section: Mapping[str, Any]) -> ReportsConfig:
    default_period = str(section.get("default_period", "mtd"))
    if default_period not in PERIOD_CHOICES:
        raise ConfigError(
            f"Invalid 'reports.default_period': {default_period!r}. "
            f"Expected one of: {', '.join(PERIOD_CHOICES)}."
        )

    try:
        top_n = int(section.get("top_n", 10))
    except (TypeError, ValueError):
        top_n = 10

    return ReportsConfig(
        unknown_category_label=str(
            section.get("unknown_category_label", "Unknown category")
        ),
        untitled_label=str(section.get("untitled_label", "Untitled")),
        default_period=default_period,
        top_n=max(top_n, 1),
    )


def _parse_display(section: Mapping[str, Any]) -> DisplayConfig:
    currency = str(section.get("currency", "RUB"))
    try:
        decimals = int(section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2
    return DisplayConfig(currency=currency, decimals=decimals)


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the HomeFin application configuration from a TOML file.

    When ``config_path`` is None, ``homefin_config.toml`` is looked up in the
    current working directory; if it does not exist, the defaults are used
    (environment overrides still apply). An explicit ``config_path`` must
    point to an existing file.

    Parameters
    ----------
    config_path:
        Optional path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.

    Raises
    ------
    ConfigError
        If an explicit file is missing, the TOML is invalid, or a value
        cannot be interpreted.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        raw: Mapping[str, Any] = (
            _load_toml(config_file) if config_file.is_file() else {}
        )
    else:
        config_file = Path(config_path).resolve()
        raw = _load_toml(config_file)

    base_dir = config_file.parent

    return AppConfig(
        api=_parse_api(_section(raw, "api")),
        session=_parse_session(_section(raw, "session"), base_dir),
        reports=_parse_reports(_section(raw, "reports")),
        display=_parse_display(_section(raw, "display")),
    )
