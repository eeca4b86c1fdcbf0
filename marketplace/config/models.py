"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field

from marketplace.domain.enums import UserRole


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


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AuthConfig(BaseModel):
    """OAuth login processing settings."""

    require_email: bool = Field(
        True,
        description=(
            "Reject every provider login whose claims carry no email. When false, "
            "users already linked to the provider subject may log in without one."
        ),
    )
    default_role: UserRole = Field(
        UserRole.MIXTE, description="Role given to accounts created by an OAuth login"
    )


class AppConfig(BaseModel):
    """Root configuration object for marketplace-core."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    auth: AuthConfig = Field(default_factory=AuthConfig, description="OAuth login settings")

    model_config = {"extra": "forbid"}
