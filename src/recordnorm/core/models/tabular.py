"""
Column-oriented models for spreadsheet-like input.
"""

from enum import Enum

from pydantic import BaseModel, Field

from .unified_record import Scalar

Row = dict[str, Scalar]


class BasicType(str, Enum):
    """Storage-level type detected from raw cell values."""

    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"
    BOOLEAN = "Boolean"
    DATE = "Date"


class SemanticType(str, Enum):
    """Real-world meaning of a column, independent of its storage type."""

    IDENTIFIER = "identifier"
    NAME = "name"
    DATE = "date"
    NUMERIC_AMOUNT = "numeric_amount"
    CONTACT_INFO = "contact_info"
    CATEGORICAL = "categorical"
    BOOLEAN_FLAG = "boolean_flag"
    FREE_TEXT = "free_text"


SemanticMapping = dict[str, SemanticType]


class ColumnAnalysis(BaseModel):
    """
    Summary of one column as produced by the analysis stage.

    Attributes:
        name: Column name
        type: Detected basic type
        null_percentage: Share of rows with a missing value (0-100)
        sample_values: Up to a few non-null values
    """

    name: str = Field(..., min_length=1)
    type: BasicType = BasicType.STRING
    null_percentage: float = Field(0.0, ge=0.0, le=100.0)
    sample_values: list[Scalar] = Field(default_factory=list)


class CanonicalField(BaseModel):
    """A field of a target domain schema, with the column names it answers to."""

    id: str = Field(..., min_length=1)
    label: str
    required: bool = False
    type: BasicType = BasicType.STRING
    aliases: list[str] = Field(default_factory=list)
    unique: bool = False
    description: str | None = None


class DomainSchema(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    fields: list[CanonicalField]


class MappingResult(BaseModel):
    """
    Outcome of mapping detected columns onto target fields.

    Attributes:
        detected_columns: Columns seen in the input
        mapped_columns: Source column -> target field
        unknown_columns: Columns that matched no schema field
        missing_schema_fields: Required schema fields with no source column
    """

    detected_columns: list[str] = Field(default_factory=list)
    mapped_columns: dict[str, str] = Field(default_factory=dict)
    unknown_columns: list[str] = Field(default_factory=list)
    missing_schema_fields: list[str] = Field(default_factory=list)
