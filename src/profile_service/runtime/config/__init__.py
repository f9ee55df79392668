"""Configuration models and loaders."""

from .config_data import AppConfig, ConfigData, DatabaseConfig, LoggingConfig, MetricsConfig
from .config_template import load_templated_yaml, parse_config_text, substitute_env_vars

__all__ = [
    "AppConfig",
    "ConfigData",
    "DatabaseConfig",
    "LoggingConfig",
    "MetricsConfig",
    "load_templated_yaml",
    "parse_config_text",
    "substitute_env_vars",
]
