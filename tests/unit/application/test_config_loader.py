"""
Unit tests for the configuration loader.

Tests loading from environment variables, dotenv files and YAML files.
"""

import os
from unittest.mock import patch

import pytest
import yaml

from subtrack.application.config import Environment
from subtrack.application.config_loader import ConfigLoader
from subtrack.application.interfaces.exceptions import ConfigurationError


class TestConfigLoaderFromEnv:
    """Loading from the process environment."""

    def test_defaults_with_empty_environment(self):
        with patch.dict(os.environ, {}, clear=True):
            config = ConfigLoader.from_env()

        assert config.environment == Environment.DEVELOPMENT
        assert config.logging.format_type == "json"

    def test_invalid_environment(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "moon"}, clear=True):
            with pytest.raises(ConfigurationError, match="ENVIRONMENT"):
                ConfigLoader.from_env()

    def test_dotenv_file_does_not_override_process(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("LOG_LEVEL=debug\nJWT_ISSUER=from-file\n")

        with patch.dict(os.environ, {"JWT_ISSUER": "from-process"}, clear=True):
            config = ConfigLoader.from_env(env_file=str(env_file))

        assert config.logging.level == "DEBUG"
        assert config.auth.issuer == "from-process"


class TestConfigLoaderYaml:
    """Loading from and saving to YAML."""

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "environment": "testing",
                    "auth": {"bcrypt_rounds": 4, "issuer": "yaml"},
                    "rate_limit": {"login_attempts": 10},
                }
            )
        )

        config = ConfigLoader.from_yaml(str(path))

        assert config.environment == Environment.TESTING
        assert config.auth.bcrypt_rounds == 4
        assert config.auth.issuer == "yaml"
        assert config.auth.refresh_token_expire_days == 7
        assert config.rate_limit.login_attempts == 10

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ConfigLoader.from_yaml(str(path)).auth.issuer == "subtrack"

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"auth": {"rounds": 4}}))

        with pytest.raises(ConfigurationError, match="unknown keys: rounds"):
            ConfigLoader.from_yaml(str(path))

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"migration": {"persistence_timeout_seconds": 3.0}}))
        config = ConfigLoader.from_yaml(str(path))

        dumped = yaml.safe_load(ConfigLoader.to_yaml(config))

        assert dumped["migration"]["persistence_timeout_seconds"] == 3.0
