"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MailConfig(BaseModel):
    """Outgoing mail settings."""

    use_tls: bool = Field(True, description="Use TLS/STARTTLS for secure connection")
    max_workers: int = Field(
        2, ge=1, le=16, description="Threads delivering mail in the background"
    )
    sender_name: str = Field(
        "Wiki Comment Notifier", min_length=1, description="Display name for the From header"
    )
    shutdown_timeout: int = Field(
        30, ge=0, le=600, description="Seconds to wait for pending deliveries on shutdown"
    )

    @field_validator("sender_name")
    @classmethod
    def strip_sender_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("sender_name cannot be empty")
        return stripped


class DeliveryLogConfig(BaseModel):
    """Where mail delivery outcomes are recorded."""

    enabled: bool = Field(
        True, description="Record delivery outcomes in the database (otherwise only log them)"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the comment notifier."""

    wiki_name: str = Field(
        "XWiki", min_length=1, description="Name shown between brackets in subjects"
    )
    mail: MailConfig = Field(default_factory=MailConfig, description="Mail settings")
    delivery_log: DeliveryLogConfig = Field(
        default_factory=DeliveryLogConfig, description="Delivery tracking settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @field_validator("wiki_name")
    @classmethod
    def strip_wiki_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("wiki_name cannot be empty or whitespace-only")
        return stripped
