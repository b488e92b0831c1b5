"""Configuration management for the comment notifier."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    AppConfig,
    DeliveryLogConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MailConfig,
)

__all__ = [
    "load_config",
    "parse_app_config",
    "load_environment_config",
    "AppConfig",
    "MailConfig",
    "DeliveryLogConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    "LogLevel",
    "LogFormat",
    "ConfigurationError",
]
