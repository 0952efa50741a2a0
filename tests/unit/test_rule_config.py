"""
Unit tests for pipeline settings loading.
"""

import os

import pytest

from recordnorm.core.rules import (
    ConfigurationError,
    PipelineSettings,
    PipelineSettingsBuilder,
    RuleConfigLoader,
    load_settings,
)
from recordnorm.core.rules.rule_config import CONFIG_ENV_VAR


class TestPipelineSettings:
    """Tests for PipelineSettings defaults and validation"""

    def test_defaults(self):
        settings = PipelineSettings()

        assert (settings.phone_min_digits, settings.phone_max_digits) == (7, 15)
        assert settings.max_collected_issues == 1000
        assert settings.max_reported_issues == 100
        assert settings.outlier_min_values == 10
        assert settings.document_min_length == 50
        assert settings.ocr_confidence_threshold == 0.7

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError):
            PipelineSettings(phone_digits=10)


class TestRuleConfigLoader:
    """Tests for YAML loading"""

    def test_load_fixture(self, test_data_dir):
        """Test file values are layered over the defaults"""
        settings = RuleConfigLoader(os.path.join(test_data_dir, "pipeline.yaml")).load_settings()

        assert settings.phone_min_digits == 8
        assert settings.phone_max_digits == 14
        assert settings.document_min_length == 40
        assert settings.ocr_confidence_threshold == 0.8
        assert settings.default_speaker == "Narrator"
        assert settings.outlier_min_values == 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            RuleConfigLoader(tmp_path / "absent.yaml")

        assert "not found" in str(exc_info.value)

    def test_missing_section(self, test_data_dir):
        loader = RuleConfigLoader(os.path.join(test_data_dir, "no_pipeline_section.yaml"))

        with pytest.raises(ConfigurationError) as exc_info:
            loader.load_settings()

        assert "pipeline" in str(exc_info.value)

    def test_inconsistent_values(self, test_data_dir):
        """Test ordered thresholds are checked"""
        loader = RuleConfigLoader(os.path.join(test_data_dir, "invalid_pipeline.yaml"))

        with pytest.raises(ConfigurationError) as exc_info:
            loader.load_settings()

        assert "phone_min_digits" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("pipeline: [unclosed\n")

        with pytest.raises(ConfigurationError):
            RuleConfigLoader(path).load_settings()

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("pipeline:\n  - 1\n  - 2\n")

        with pytest.raises(ConfigurationError):
            RuleConfigLoader(path).load_settings()


class TestLoadSettings:
    """Tests for settings resolution"""

    def test_defaults_without_config(self, isolated_config_env):
        assert load_settings() == PipelineSettings()

    def test_environment_variable(self, isolated_config_env, test_data_dir):
        isolated_config_env.setenv(CONFIG_ENV_VAR, os.path.join(test_data_dir, "pipeline.yaml"))
        assert load_settings().phone_min_digits == 8

    def test_explicit_path_wins(self, isolated_config_env, test_data_dir, tmp_path):
        """Test an explicit path takes precedence over the environment"""
        path = tmp_path / "explicit.yaml"
        path.write_text("pipeline:\n  document_min_length: 5\n")
        isolated_config_env.setenv(CONFIG_ENV_VAR, os.path.join(test_data_dir, "pipeline.yaml"))

        settings = load_settings(path)

        assert settings.document_min_length == 5
        assert settings.phone_min_digits == 7


class TestPipelineSettingsBuilder:
    """Tests for PipelineSettingsBuilder"""

    def test_build(self):
        settings = (
            PipelineSettingsBuilder()
            .with_phone_digits(10, 12)
            .with_issue_caps(collected=50, reported=10)
            .with_outlier_rule(min_values=20, multiplier=3.0)
            .with_value("fail_score_threshold", 50)
            .build()
        )

        assert (settings.phone_min_digits, settings.phone_max_digits) == (10, 12)
        assert (settings.max_collected_issues, settings.max_reported_issues) == (50, 10)
        assert (settings.outlier_min_values, settings.iqr_multiplier) == (20, 3.0)
        assert settings.fail_score_threshold == 50

    def test_invalid_build(self):
        """Test out-of-range values raise ConfigurationError"""
        with pytest.raises(ConfigurationError):
            PipelineSettingsBuilder().with_issue_caps(collected=5, reported=10).build()

    def test_unknown_setting(self):
        with pytest.raises(ConfigurationError):
            PipelineSettingsBuilder().with_value("colour", "red").build()
