"""
Configuration management for the Claim Guard service.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    admin_user_ids: list[str]


@dataclass
class PlanLimitsConfig:
    """Daily evaluation limits per pricing plan."""
    free_daily_evals: int
    pro_daily_evals: int
    max_daily_evals: int


@dataclass
class PublicApiConfig:
    """Public read API settings."""
    api_key: str
    list_max_limit: int
    hide_private_reports: bool


@dataclass
class PathsConfig:
    """Path configuration settings."""
    data_dir: str
    ui_dir: str


def _positive_int(raw: Any, default: int) -> int:
    """Parse a positive integer, keeping the default for empty, invalid or non-positive values."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "claim_guard_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError) as e:
                logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")

        self._validate_limits()
        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 22590,
                "debug": False,
                "admin_user_ids": []
            },
            "plans": {
                "free_daily_evals": 1,
                "pro_daily_evals": 20,
                "max_daily_evals": 99
            },
            "public_api": {
                "api_key": "",
                "list_max_limit": 100,
                "hide_private_reports": False
            },
            "paths": {
                "data_dir": "data",
                "ui_dir": "ui"
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def _validate_limits(self) -> None:
        """Coerce numeric limits from the config file, keeping defaults for bad values."""
        defaults = self._get_default_config()
        checks = [("plans", key) for key in defaults["plans"]] + [("public_api", "list_max_limit")]
        for section, key in checks:
            if not isinstance(self._config.get(section), dict):
                self._config[section] = dict(defaults[section])
                continue
            raw = self._config[section].get(key)
            default = defaults[section][key]
            value = default if isinstance(raw, bool) else _positive_int(raw, default)
            if value == default and raw != default:
                logger.warning(f"Invalid {section}.{key}={raw!r} in config file, using {default}")
            self._config[section][key] = value

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("ADMIN_USER_IDS"):
            self._config["app"]["admin_user_ids"] = [
                uid.strip() for uid in os.getenv("ADMIN_USER_IDS").split(",") if uid.strip()
            ]

        # Plan limits
        plans = self._config["plans"]
        for env_name, key in (
            ("FREE_DAILY_EVALS", "free_daily_evals"),
            ("PRO_DAILY_EVALS", "pro_daily_evals"),
            ("MAX_DAILY_EVALS", "max_daily_evals"),
        ):
            if os.getenv(env_name):
                plans[key] = _positive_int(os.getenv(env_name), plans[key])

        # Public API
        if os.getenv("VEHICLECLAIM_API_KEY"):
            self._config["public_api"]["api_key"] = os.getenv("VEHICLECLAIM_API_KEY")

        if os.getenv("PUBLIC_API_LIST_MAX_LIMIT"):
            self._config["public_api"]["list_max_limit"] = _positive_int(
                os.getenv("PUBLIC_API_LIST_MAX_LIMIT"), self._config["public_api"]["list_max_limit"]
            )

        if os.getenv("PUBLIC_API_HIDE_PRIVATE"):
            self._config["public_api"]["hide_private_reports"] = os.getenv("PUBLIC_API_HIDE_PRIVATE").lower() == "true"

        # Paths
        if os.getenv("DATA_DIR"):
            self._config["paths"]["data_dir"] = os.getenv("DATA_DIR")

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            admin_user_ids=app_config["admin_user_ids"]
        )

    def get_plan_limits_config(self) -> PlanLimitsConfig:
        """Get per-plan daily evaluation limits."""
        plans = self._config["plans"]
        return PlanLimitsConfig(
            free_daily_evals=plans["free_daily_evals"],
            pro_daily_evals=plans["pro_daily_evals"],
            max_daily_evals=plans["max_daily_evals"]
        )

    def get_public_api_config(self) -> PublicApiConfig:
        """Get public read API configuration."""
        api_config = self._config["public_api"]
        return PublicApiConfig(
            api_key=api_config["api_key"],
            list_max_limit=api_config["list_max_limit"],
            hide_private_reports=api_config["hide_private_reports"]
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration."""
        paths_config = self._config["paths"]
        return PathsConfig(
            data_dir=paths_config["data_dir"],
            ui_dir=paths_config["ui_dir"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance
config_manager = ConfigManager()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_plan_limits_config() -> PlanLimitsConfig:
    """Get per-plan daily evaluation limits."""
    return config_manager.get_plan_limits_config()


def get_public_api_config() -> PublicApiConfig:
    """Get public read API configuration."""
    return config_manager.get_public_api_config()


def get_paths_config() -> PathsConfig:
    """Get paths configuration."""
    return config_manager.get_paths_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
