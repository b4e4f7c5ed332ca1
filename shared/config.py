"""
Shared configuration management for the Summary Widget condition engine.
"""

from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError

_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class EvaluatorConfig(BaseSettings):
    """Condition evaluator settings, read from WIDGET_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WIDGET_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local", description="Deployment environment")
    log_level: str = Field(default="info", description="Root log level")

    # Evaluation
    log_malformed_conditions: bool = Field(
        default=True,
        description="Emit a debug log entry for every malformed condition that is skipped"
    )

    # Observability
    enable_metrics: bool = Field(default=True, description="Record prometheus metrics")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.lower()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


def get_config(env_file: Optional[str] = None, **overrides) -> EvaluatorConfig:
    """Get evaluator configuration, applying explicit overrides on top of the environment."""
    try:
        if env_file is not None:
            return EvaluatorConfig(_env_file=env_file, **overrides)
        return EvaluatorConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid evaluator configuration",
            details={"errors": e.errors(include_url=False)}
        ) from e
