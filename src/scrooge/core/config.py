import logging
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ScroogeConfig(BaseModel):
    """Base configuration for Scrooge components.

    This model loads configuration from environment variables and defaults.
    """
    # Fee optimizer configuration
    search_node_budget: int = Field(
        default=100_000,
        description="Maximum number of search nodes expanded per independent group"
    )
    selection_mode: Literal["optimal", "greedy"] = Field(
        default="optimal",
        description="Branch-and-bound search, or the greedy heuristic"
    )

    # Epoch handler configuration
    max_workers: int = Field(
        default=1,
        description="Number of threads optimizing independent groups concurrently"
    )
    group_size_warning: int = Field(
        default=16,
        description="Group size above which a truncated search is likely"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Level name passed to logging when configure_logging is used"
    )

    @field_validator("search_node_budget", "group_size_warning")
    def validate_positive(cls, value):
        """Validate budget style settings are positive."""
        if value <= 0:
            raise ValueError("Value must be greater than 0")
        return value

    @field_validator("max_workers")
    def validate_max_workers(cls, value):
        """Validate at least one worker is configured."""
        if value < 1:
            raise ValueError("max_workers must be at least 1")
        return value

    @field_validator("log_level")
    def validate_log_level(cls, value):
        """Validate the log level is one logging understands."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    model_config = {
        "env_prefix": "SCROOGE_",
        "validate_assignment": True,
    }


# Global config instance with default values
config = ScroogeConfig()


def load_config_from_env() -> ScroogeConfig:
    """Load configuration from environment variables.

    Returns:
        ScroogeConfig: Configuration instance with values from environment
    """
    import os

    env_settings = {}

    env_mappings = {
        "SCROOGE_SEARCH_NODE_BUDGET": "search_node_budget",
        "SCROOGE_SELECTION_MODE": "selection_mode",
        "SCROOGE_MAX_WORKERS": "max_workers",
        "SCROOGE_GROUP_SIZE_WARNING": "group_size_warning",
        "SCROOGE_LOG_LEVEL": "log_level",
    }

    for env_var, field_name in env_mappings.items():
        if env_var in os.environ:
            value = os.environ[env_var]

            # Handle type conversions
            if field_name in ["search_node_budget", "max_workers", "group_size_warning"]:
                value = int(value)
            elif field_name == "selection_mode":
                value = value.lower()

            env_settings[field_name] = value

    return ScroogeConfig(**env_settings)
