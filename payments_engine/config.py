"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class EngineConfig(BaseSettings):
    """Payments engine configuration"""

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_ENGINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Logging configuration
    log_level: str = "WARNING"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr
    rejection_log_level: str = "INFO"  # Level for skipped transactions

    # Input/output configuration
    input_encoding: str = "utf-8"
    sort_output: bool = True  # Emit client records ordered by client id


# Global configuration instance
config = EngineConfig()


def get_config() -> EngineConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> EngineConfig:
    """Reload configuration from environment"""
    global config
    config = EngineConfig()
    return config
