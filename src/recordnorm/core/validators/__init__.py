"""
Column validators and the tabular field validator.

Provides one validator per semantic type plus FieldValidator, which runs
them over row sequences and produces a ValidationReport.
"""

from .base_validator import BaseFieldValidator, FieldFinding
from .boolean_validator import BooleanFlagValidator
from .contact_validator import ContactInfoValidator
from .date_validator import DateValidator
from .field_validator import FieldValidator, field_score, round_half_up
from .identifier_validator import IdentifierValidator
from .numeric_validator import NumericAmountValidator
from .text_validator import CategoricalValidator, FreeTextValidator, NameValidator

__all__ = [
    "BaseFieldValidator",
    "FieldFinding",
    "IdentifierValidator",
    "NameValidator",
    "DateValidator",
    "NumericAmountValidator",
    "ContactInfoValidator",
    "CategoricalValidator",
    "BooleanFlagValidator",
    "FreeTextValidator",
    "FieldValidator",
    "field_score",
    "round_half_up",
]
