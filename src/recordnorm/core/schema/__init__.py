"""
Schema analysis, semantic type inference and column mapping.
"""

from .analysis import analyze_rows, collect_columns, detect_basic_type
from .inference import SemanticTypeInferrer
from .mapping import (
    AUTOMOBILE_SCHEMA,
    SCHEMAS,
    USER_SCHEMA,
    MappingConfigurationError,
    check_mapping,
    coerce_semantic_mapping,
    generate_mapping,
)

__all__ = [
    "SemanticTypeInferrer",
    "analyze_rows",
    "collect_columns",
    "detect_basic_type",
    "generate_mapping",
    "check_mapping",
    "coerce_semantic_mapping",
    "MappingConfigurationError",
    "USER_SCHEMA",
    "AUTOMOBILE_SCHEMA",
    "SCHEMAS",
]
