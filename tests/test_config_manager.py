"""
Test cases for the configuration management system.
Tests config loading, environment overrides, and typed accessors.
"""

import os
import json
from unittest.mock import patch, mock_open
import pytest

from config_manager import (
    ConfigManager,
    AppConfig,
    PlanLimitsConfig,
    PublicApiConfig,
    PathsConfig,
    get_app_config,
    get_plan_limits_config,
    get_public_api_config,
    get_paths_config,
)


class TestConfigManager:
    """Test the ConfigManager class functionality."""
    
    def test_defaults_without_config_file(self, tmp_path):
        """Test ConfigManager falls back to defaults when the file is missing."""
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(tmp_path / "missing.json"))
        
        assert manager.get_app_config().port == 22590
        assert manager.get_app_config().admin_user_ids == []
        plans = manager.get_plan_limits_config()
        assert (plans.free_daily_evals, plans.pro_daily_evals, plans.max_daily_evals) == (1, 20, 99)
        public_api = manager.get_public_api_config()
        assert public_api.api_key == ""
        assert public_api.list_max_limit == 100
        assert public_api.hide_private_reports is False
        assert manager.get_paths_config().data_dir == "data"
    
    def test_load_config_from_file(self, tmp_path):
        """Test file values are merged over the defaults section by section."""
        config_file = tmp_path / "claim_guard_config.json"
        config_file.write_text(json.dumps({
            "app": {"port": 8080, "admin_user_ids": ["admin1"]},
            "plans": {"pro_daily_evals": 50},
            "public_api": {"api_key": "file-key"},
        }))
        
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))
        
        app_config = manager.get_app_config()
        assert app_config.port == 8080
        assert app_config.host == "0.0.0.0"
        assert app_config.admin_user_ids == ["admin1"]
        assert manager.get_plan_limits_config().pro_daily_evals == 50
        assert manager.get_plan_limits_config().free_daily_evals == 1
        assert manager.get_public_api_config().api_key == "file-key"
    
    def test_invalid_config_file_is_ignored(self, tmp_path):
        """Test an unreadable file leaves the defaults in place."""
        config_file = tmp_path / "claim_guard_config.json"
        config_file.write_text("{not json")
        
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))
        
        assert manager.get_app_config().port == 22590
    
    def test_override_with_env_variables(self, tmp_path):
        """Test that environment variables override config file values."""
        env_vars = {
            "APP_HOST": "localhost",
            "APP_PORT": "8080",
            "APP_DEBUG": "true",
            "ADMIN_USER_IDS": "admin1, admin2,,admin3",
            "FREE_DAILY_EVALS": "2",
            "PRO_DAILY_EVALS": "25",
            "MAX_DAILY_EVALS": "150",
            "VEHICLECLAIM_API_KEY": "env-key",
            "PUBLIC_API_LIST_MAX_LIMIT": "50",
            "PUBLIC_API_HIDE_PRIVATE": "true",
            "DATA_DIR": "/var/lib/claims",
        }
        
        with patch.dict(os.environ, env_vars, clear=True):
            manager = ConfigManager(str(tmp_path / "missing.json"))
        
        app_config = manager.get_app_config()
        assert app_config.host == "localhost"
        assert app_config.port == 8080
        assert app_config.debug is True
        assert app_config.admin_user_ids == ["admin1", "admin2", "admin3"]
        plans = manager.get_plan_limits_config()
        assert (plans.free_daily_evals, plans.pro_daily_evals, plans.max_daily_evals) == (2, 25, 150)
        public_api = manager.get_public_api_config()
        assert public_api.api_key == "env-key"
        assert public_api.list_max_limit == 50
        assert public_api.hide_private_reports is True
        assert manager.get_paths_config().data_dir == "/var/lib/claims"
    
    @pytest.mark.parametrize("raw", ["abc", "0", "-4", "1.5"])
    def test_invalid_plan_env_keeps_default(self, tmp_path, raw):
        """Non-numeric or non-positive limits keep the configured value."""
        with patch.dict(os.environ, {"FREE_DAILY_EVALS": raw, "PRO_DAILY_EVALS": raw}, clear=True):
            manager = ConfigManager(str(tmp_path / "missing.json"))
        
        plans = manager.get_plan_limits_config()
        assert plans.free_daily_evals == 1
        assert plans.pro_daily_evals == 20

    @pytest.mark.parametrize("raw", ["abc", 0, -4, None, True, [5]])
    def test_invalid_plan_file_value_keeps_default(self, tmp_path, raw):
        """Bad limits in the config file fall back to the defaults."""
        config_file = tmp_path / "claim_guard_config.json"
        config_file.write_text(json.dumps({
            "plans": {"free_daily_evals": raw, "max_daily_evals": raw},
            "public_api": {"list_max_limit": raw},
        }))
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))

        plans = manager.get_plan_limits_config()
        assert plans.free_daily_evals == 1
        assert plans.max_daily_evals == 99
        assert manager.get_public_api_config().list_max_limit == 100

    def test_numeric_string_plan_file_value_is_coerced(self, tmp_path):
        config_file = tmp_path / "claim_guard_config.json"
        config_file.write_text(json.dumps({"plans": {"free_daily_evals": "3"}}))
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))

        assert manager.get_plan_limits_config().free_daily_evals == 3

    def test_non_object_plans_section_keeps_defaults(self, tmp_path):
        config_file = tmp_path / "claim_guard_config.json"
        config_file.write_text(json.dumps({"plans": "unlimited"}))
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))

        plans = manager.get_plan_limits_config()
        assert (plans.free_daily_evals, plans.pro_daily_evals, plans.max_daily_evals) == (1, 20, 99)

    def test_get_config_returns_copy(self, tmp_path):
        """Test getting raw configuration dictionary."""
        manager = ConfigManager(str(tmp_path / "missing.json"))
        
        config = manager.get_config()
        
        assert config == manager._config
        assert config is not manager._config  # Should be a copy
    
    def test_save_config(self, tmp_path):
        """Test saving configuration to file."""
        manager = ConfigManager(str(tmp_path / "missing.json"))
        
        with patch('builtins.open', mock_open()) as mock_file:
            manager.save_config()
            
            mock_file.assert_called_once()
            mock_file().write.assert_called()
    
    def test_save_and_reload_round_trip(self, tmp_path):
        """Test a saved file is picked up again on reload."""
        config_file = tmp_path / "claim_guard_config.json"
        with patch.dict(os.environ, {}, clear=True):
            manager = ConfigManager(str(config_file))
            manager._config["plans"]["max_daily_evals"] = 120
            manager.save_config()
            
            manager._config["plans"]["max_daily_evals"] = 1
            manager.reload()
        
        assert manager.get_plan_limits_config().max_daily_evals == 120


class TestConfigDataClasses:
    """Test the configuration data classes."""
    
    def test_app_config(self):
        config = AppConfig(host="localhost", port=8080, debug=True, admin_user_ids=["admin1"])
        assert config.host == "localhost"
        assert config.admin_user_ids == ["admin1"]
    
    def test_public_api_config(self):
        config = PublicApiConfig(api_key="k", list_max_limit=10, hide_private_reports=True)
        assert config.list_max_limit == 10
        assert config.hide_private_reports is True


class TestGlobalFunctions:
    """Test the global configuration functions."""
    
    def test_global_getters(self):
        assert isinstance(get_app_config(), AppConfig)
        assert isinstance(get_plan_limits_config(), PlanLimitsConfig)
        assert isinstance(get_public_api_config(), PublicApiConfig)
        assert isinstance(get_paths_config(), PathsConfig)
