"""Engine settings loaded from YAML with Pydantic v2 validation.

Loads and validates a ``workflow-core.yaml`` file into a typed
:class:`EngineSettings` object.  Unknown keys are allowed so that settings
files written for newer releases still load.

Example
-------
>>> loader = ConfigLoader()
>>> settings = loader.load_string("max_menu_depth: 4")
>>> settings.max_menu_depth
4
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class EngineSettings(BaseModel):
    """Tunables for :class:`~bpm_workflow_core.core.WorkflowCore`."""

    model_config = {"extra": "allow"}

    log_level: str = Field(default="WARNING")
    install_base_property_groups: bool = Field(default=True)
    max_menu_depth: int = Field(default=8, ge=1)
    fetch_timeout_seconds: float = Field(default=30.0, gt=0)
    default_language: str = Field(default="en", min_length=2)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{value}'. Valid: {sorted(_LOG_LEVELS)}")
        return normalized


class ConfigLoader:
    """Loads and validates engine settings.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> settings = loader.load(Path("workflow-core.yaml"))
    """

    def load(self, config_path: Path) -> EngineSettings:
        """Load and validate a settings YAML file.

        Raises
        ------
        FileNotFoundError:
            When the settings file does not exist.
        ValueError:
            When the YAML content fails Pydantic validation.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Engine settings not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            raw: dict[str, object] = yaml.safe_load(fh) or {}

        logger.info("Loaded engine settings from %s", config_path)
        return EngineSettings.model_validate(raw)

    def load_string(self, yaml_content: str) -> EngineSettings:
        """Load and validate a YAML string directly."""
        raw: dict[str, object] = yaml.safe_load(yaml_content) or {}
        return EngineSettings.model_validate(raw)

    def defaults(self) -> EngineSettings:
        """Return settings with all defaults applied."""
        return EngineSettings()
