"""
Configuration Loader - Handles IO operations for configuration management.

This module is responsible for loading configuration from various sources
(dotenv files, environment variables, YAML files) while keeping the
ApplicationConfig class focused on data representation and validation.
"""

import os
from dataclasses import fields, replace
from typing import Any

import yaml
from dotenv import load_dotenv

from subtrack.application.config import (
    ApplicationConfig,
    AuthConfig,
    DatabaseConfig,
    Environment,
    LoggingConfig,
    MigrationConfig,
    RateLimitConfig,
)
from subtrack.application.interfaces.exceptions import ConfigurationError


class ConfigLoader:
    """Handles loading and saving of configuration from various sources."""

    @classmethod
    def from_env(cls, env_file: str | None = None) -> ApplicationConfig:
        """
        Create configuration from environment variables.

        Args:
            env_file: Optional dotenv file loaded before reading the environment.
                Variables already set in the process take precedence.

        Returns:
            ApplicationConfig: Validated configuration loaded from environment
        """
        if env_file:
            load_dotenv(env_file, override=False)

        env_str = os.getenv("ENVIRONMENT", "development")
        try:
            environment = Environment(env_str)
        except ValueError:
            raise ConfigurationError("ENVIRONMENT", f"invalid environment '{env_str}'")

        config = ApplicationConfig(
            environment=environment,
            database=DatabaseConfig.from_env(),
            auth=AuthConfig.from_env(),
            rate_limit=RateLimitConfig.from_env(),
            migration=MigrationConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )
        config.validate()
        return config

    @classmethod
    def from_yaml(cls, path: str) -> ApplicationConfig:
        """
        Load configuration from YAML file.

        Sections missing from the file keep their defaults.

        Args:
            path: Path to YAML configuration file

        Returns:
            ApplicationConfig: Validated configuration loaded from YAML file
        """
        with open(path) as f:
            data = yaml.safe_load(f)

        config = ApplicationConfig()

        # Handle empty or null YAML files
        if not data:
            return config

        if "environment" in data:
            try:
                config.environment = Environment(data["environment"])
            except ValueError:
                raise ConfigurationError(
                    "environment", f"invalid environment '{data['environment']}'"
                )

        config.database = cls._section(config.database, data.get("database"), "database")
        config.auth = cls._section(config.auth, data.get("auth"), "auth")
        config.rate_limit = cls._section(config.rate_limit, data.get("rate_limit"), "rate_limit")
        config.migration = cls._section(config.migration, data.get("migration"), "migration")
        config.logging = cls._section(config.logging, data.get("logging"), "logging")

        config.validate()
        return config

    @staticmethod
    def _section(current: Any, section: dict[str, Any] | None, name: str) -> Any:
        if not section:
            return current
        known = {f.name for f in fields(current)}
        unknown = set(section) - known
        if unknown:
            raise ConfigurationError(name, f"unknown keys: {', '.join(sorted(unknown))}")
        return replace(current, **section)

    @classmethod
    def to_yaml(cls, config: ApplicationConfig) -> str:
        """
        Convert configuration to YAML string.

        Args:
            config: ApplicationConfig instance to convert

        Returns:
            str: YAML representation of the configuration
        """
        return yaml.dump(config.to_dict(), default_flow_style=False)
