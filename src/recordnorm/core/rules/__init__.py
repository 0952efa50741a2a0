"""
Record rules, rule engine and pipeline configuration.
"""

from .record_rules import (
    ApiPayloadRule,
    AudioTranscriptRule,
    DocumentTextRule,
    GeneralRule,
    RecordRule,
    TabularRowRule,
)
from .rule_config import (
    ConfigurationError,
    PipelineSettings,
    PipelineSettingsBuilder,
    RuleConfigLoader,
    load_settings,
)
from .rule_engine import RecordRuleEngine

__all__ = [
    "RecordRule",
    "GeneralRule",
    "AudioTranscriptRule",
    "DocumentTextRule",
    "ApiPayloadRule",
    "TabularRowRule",
    "RecordRuleEngine",
    "PipelineSettings",
    "PipelineSettingsBuilder",
    "RuleConfigLoader",
    "ConfigurationError",
    "load_settings",
]
