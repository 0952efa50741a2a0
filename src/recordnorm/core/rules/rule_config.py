"""
Pipeline configuration management.

Loads thresholds from YAML files and provides utilities
for building settings programmatically.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

CONFIG_ENV_VAR = "RECORDNORM_CONFIG"


class ConfigurationError(ValueError):
    """Raised when a settings file is missing, malformed or inconsistent."""
    pass


class PipelineSettings(BaseModel):
    """
    Thresholds shared by the inferencer, validators and cleaners.

    Attributes:
        phone_min_digits: Fewest digits a phone-like value may carry
        phone_max_digits: Most digits a phone-like value may carry
        max_collected_issues: Field issues kept in memory per validation run
        max_reported_issues: Field issues returned in a ValidationReport
        outlier_min_values: Numeric values needed before IQR fences apply
        iqr_multiplier: Tukey fence multiplier
        free_text_max_length: Longest free-text value before a warning
        warning_penalty_cap: Most points warnings may take off a field score
        fail_score_threshold: Dataset scores below this fail
        warn_score_threshold: Dataset scores below this warn
        max_error_ratio: Error-to-row ratio above which a dataset fails
        document_min_length: Shortest acceptable document text
        ocr_confidence_threshold: OCR confidence below this is flagged
        audio_summary_max_length: Audio text shorter than this mentioning "summary" fails
        default_speaker: Speaker filled into audio metadata
        default_user_id: User id filled into api/chat metadata
    """

    phone_min_digits: int = Field(7, ge=1)
    phone_max_digits: int = Field(15, ge=1)
    max_collected_issues: int = Field(1000, ge=0)
    max_reported_issues: int = Field(100, ge=0)
    outlier_min_values: int = Field(10, ge=4)
    iqr_multiplier: float = Field(1.5, gt=0)
    free_text_max_length: int = Field(10_000, ge=1)
    warning_penalty_cap: float = Field(50.0, ge=0, le=100)
    fail_score_threshold: int = Field(60, ge=0, le=100)
    warn_score_threshold: int = Field(90, ge=0, le=100)
    max_error_ratio: float = Field(0.1, ge=0)
    document_min_length: int = Field(50, ge=0)
    ocr_confidence_threshold: float = Field(0.7, ge=0, le=1)
    audio_summary_max_length: int = Field(500, ge=0)
    default_speaker: str = "Speaker 1"
    default_user_id: str = "anonymous"

    @model_validator(mode="after")
    def check_ranges(self) -> "PipelineSettings":
        """Validate that paired thresholds are ordered."""
        if self.phone_min_digits > self.phone_max_digits:
            raise ValueError("phone_min_digits must not exceed phone_max_digits")
        if self.max_reported_issues > self.max_collected_issues:
            raise ValueError("max_reported_issues must not exceed max_collected_issues")
        if self.fail_score_threshold > self.warn_score_threshold:
            raise ValueError("fail_score_threshold must not exceed warn_score_threshold")
        return self

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "phone_min_digits": 7,
                "phone_max_digits": 15,
                "outlier_min_values": 10,
                "document_min_length": 50,
            }
        }


class RuleConfigLoader:
    """
    Loads pipeline settings from YAML configuration files.

    Expected YAML format:
    ```yaml
    pipeline:
      phone_min_digits: 7
      phone_max_digits: 15
      document_min_length: 50
      ocr_confidence_threshold: 0.7
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            ConfigurationError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise ConfigurationError(f"Pipeline configuration file not found: {config_path}")

    def load_settings(self) -> PipelineSettings:
        """
        Load and parse pipeline settings from the YAML file.

        Returns:
            PipelineSettings with file values layered over the defaults

        Raises:
            ConfigurationError: If YAML is invalid or values are out of range
        """
        with open(self.config_path) as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not config or "pipeline" not in config:
            raise ConfigurationError("Configuration file must contain 'pipeline' section")

        section = config["pipeline"]
        if not isinstance(section, dict):
            raise ConfigurationError("'pipeline' section must be a mapping")

        return _build_settings(section)


class PipelineSettingsBuilder:
    """
    Programmatically build settings (for testing or per-call overrides).
    """

    def __init__(self):
        self.values: dict[str, Any] = {}

    def with_phone_digits(self, min_digits: int, max_digits: int) -> "PipelineSettingsBuilder":
        self.values["phone_min_digits"] = min_digits
        self.values["phone_max_digits"] = max_digits
        return self

    def with_issue_caps(self, collected: int, reported: int) -> "PipelineSettingsBuilder":
        self.values["max_collected_issues"] = collected
        self.values["max_reported_issues"] = reported
        return self

    def with_outlier_rule(self, min_values: int, multiplier: float = 1.5) -> "PipelineSettingsBuilder":
        self.values["outlier_min_values"] = min_values
        self.values["iqr_multiplier"] = multiplier
        return self

    def with_value(self, name: str, value: Any) -> "PipelineSettingsBuilder":
        self.values[name] = value
        return self

    def build(self) -> PipelineSettings:
        """Build and return the settings."""
        return _build_settings(self.values)


def _build_settings(values: dict[str, Any]) -> PipelineSettings:
    try:
        return PipelineSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid pipeline settings: {e}") from e


def load_settings(config_path: str | Path | None = None) -> PipelineSettings:
    """
    Resolve settings from an explicit path, $RECORDNORM_CONFIG, or defaults.

    Args:
        config_path: Optional path to a YAML settings file

    Returns:
        PipelineSettings instance
    """
    path = config_path or os.getenv(CONFIG_ENV_VAR)
    if path:
        return RuleConfigLoader(path).load_settings()
    return PipelineSettings()
