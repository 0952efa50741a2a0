"""
Mapping of detected columns onto canonical domain-schema fields.
"""

import re
from collections.abc import Mapping, Sequence

from recordnorm.core.models import (
    BasicType,
    CanonicalField,
    DomainSchema,
    MappingResult,
    SemanticMapping,
    SemanticType,
)
from recordnorm.observability.logger import get_logger

logger = get_logger(__name__)

FIELD_NAME_PATTERN = re.compile(r"[^a-z0-9]+")


class MappingConfigurationError(ValueError):
    """Raised when a column mapping or semantic mapping is malformed."""
    pass


USER_SCHEMA = DomainSchema(
    id="user",
    name="User Data (HR/CRM)",
    fields=[
        CanonicalField(id="user_id", label="User ID", required=True, unique=True,
                       aliases=["id", "userid", "uid", "user_no", "customer_id"]),
        CanonicalField(id="name", label="Name", required=True,
                       aliases=["fullname", "full_name", "customer_name", "client_name", "first_name"]),
        CanonicalField(id="email", label="Email", required=True,
                       aliases=["email_address", "e-mail", "mail", "emailid"]),
        CanonicalField(id="age", label="Age", type=BasicType.INTEGER, aliases=["years", "age_yrs"]),
        CanonicalField(id="salary", label="Salary", type=BasicType.FLOAT,
                       aliases=["wage", "income", "compensation", "ctc", "amount"]),
        CanonicalField(id="join_date", label="Join Date", type=BasicType.DATE,
                       aliases=["doj", "date_of_joining", "joined_at", "start_date", "created_at"]),
        CanonicalField(id="phone", label="Phone", aliases=["mobile", "cell", "contact", "phone_no", "tel"]),
        CanonicalField(id="is_active", label="Is Active", type=BasicType.BOOLEAN,
                       aliases=["active", "status", "enabled"]),
    ],
)

AUTOMOBILE_SCHEMA = DomainSchema(
    id="automobile",
    name="Automobile Inventory",
    fields=[
        CanonicalField(id="vin", label="VIN", required=True, unique=True,
                       aliases=["chassis_no", "serial_number", "vehicle_id", "id"]),
        CanonicalField(id="make", label="Make", required=True, aliases=["manufacturer", "brand", "company"]),
        CanonicalField(id="model", label="Model", required=True, aliases=["variant", "car_model"]),
        CanonicalField(id="year", label="Year", required=True, type=BasicType.INTEGER,
                       aliases=["mfg_year", "model_year", "manufacturing_year"]),
        CanonicalField(id="price", label="Price", required=True, type=BasicType.FLOAT,
                       aliases=["cost", "amount", "selling_price", "msrp"]),
        CanonicalField(id="fuel_type", label="Fuel Type", aliases=["fuel", "engine_type", "power_source"]),
        CanonicalField(id="mileage", label="Mileage", type=BasicType.INTEGER,
                       aliases=["odometer", "km_driven", "miles"]),
        CanonicalField(id="color", label="Color", aliases=["paint", "shade", "colour"]),
        CanonicalField(id="transmission", label="Transmission", aliases=["gearbox", "gear_type"]),
    ],
)

SCHEMAS: dict[str, DomainSchema] = {
    USER_SCHEMA.id: USER_SCHEMA,
    AUTOMOBILE_SCHEMA.id: AUTOMOBILE_SCHEMA,
}


def normalize_field_name(name: str) -> str:
    """
    Normalize a column or field name for matching.

    Examples:
        >>> normalize_field_name("  E-Mail Address ")
        'e_mail_address'
    """
    return FIELD_NAME_PATTERN.sub("_", name.lower()).strip("_")


def _free_target(column: str, used: set[str]) -> str:
    """
    Return the column name, suffixed with _2, _3, ... when already taken.

    Examples:
        >>> _free_target("name", {"name", "name_2"})
        'name_3'
    """
    if column not in used:
        return column
    n = 2
    while f"{column}_{n}" in used:
        n += 1
    return f"{column}_{n}"


def generate_mapping(columns: Sequence[str], schema: DomainSchema | None = None) -> MappingResult:
    """
    Map detected columns onto a target schema.

    Without a schema every column maps to itself. With a schema a column
    maps to the first field whose id or alias matches its normalized name;
    each field is claimed by at most one column. Unmatched columns keep
    their own name and are reported as unknown; when that name is already
    a target it gets a numeric suffix (``name_2``), so no two columns ever
    share a target.

    Args:
        columns: Detected column names
        schema: Optional target schema

    Returns:
        MappingResult
    """
    detected = list(columns)
    if schema is None:
        return MappingResult(
            detected_columns=detected,
            mapped_columns={column: column for column in detected},
        )

    lookup: dict[str, str] = {}
    for field in schema.fields:
        for candidate in [field.id, *field.aliases]:
            lookup.setdefault(normalize_field_name(candidate), field.id)

    mapped: dict[str, str] = {}
    unknown: list[str] = []
    claimed: set[str] = set()
    used: set[str] = set()
    for column in detected:
        target = lookup.get(normalize_field_name(column))
        if target is not None and target not in used:
            mapped[column] = target
            claimed.add(target)
            used.add(target)
            continue
        fallback = _free_target(column, used)
        mapped[column] = fallback
        used.add(fallback)
        unknown.append(column)

    missing = [field.id for field in schema.fields if field.required and field.id not in claimed]
    if missing:
        logger.info(
            "Required schema fields have no source column",
            extra={"schema": schema.id, "missing_fields": missing},
        )

    return MappingResult(
        detected_columns=detected,
        mapped_columns=mapped,
        unknown_columns=unknown,
        missing_schema_fields=missing,
    )


def check_mapping(mapping: Mapping[str, str], semantic_mapping: Mapping[str, SemanticType]) -> None:
    """
    Verify a column mapping and semantic mapping are well formed.

    Raises:
        MappingConfigurationError: On empty targets, duplicate targets or
            semantic types outside the closed set
    """
    seen: dict[str, str] = {}
    for source, target in mapping.items():
        if not isinstance(target, str) or not target.strip():
            raise MappingConfigurationError(f"Column '{source}' maps to an empty target field")
        if target in seen:
            raise MappingConfigurationError(
                f"Columns '{seen[target]}' and '{source}' both map to target field '{target}'"
            )
        seen[target] = source

    for column, semantic_type in semantic_mapping.items():
        if isinstance(semantic_type, SemanticType):
            continue
        try:
            SemanticType(semantic_type)
        except ValueError as e:
            raise MappingConfigurationError(
                f"Unknown semantic type '{semantic_type}' for column '{column}'"
            ) from e


def coerce_semantic_mapping(semantic_mapping: Mapping[str, SemanticType | str]) -> SemanticMapping:
    """Return a semantic mapping with every value as a SemanticType."""
    check_mapping({}, semantic_mapping)
    return {column: SemanticType(value) for column, value in semantic_mapping.items()}
