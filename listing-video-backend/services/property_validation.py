"""
Validation and sanitizing rules for the editable property fields.
"""

import math

TEXT_FIELDS = ("title", "description", "location", "additional_info")
DECIMAL_FIELDS = ("price", "area")
COUNT_FIELDS = ("bedrooms", "bathrooms")


class PropertyValidationError(ValueError):
    """Raised when a property field value cannot be saved."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"Invalid value for '{field}': {value!r}")


def _as_number(value):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and +/-inf are not storable numbers
    if not math.isfinite(number):
        return None
    return number


def validate_property(prop) -> bool:
    """A property is usable once it has a non-blank title."""
    if prop is None:
        return False
    title = prop.get("title") if isinstance(prop, dict) else getattr(prop, "title", None)
    return bool((title or "").strip())


def validate_property_field(field: str, value) -> bool:
    if field == "title":
        return isinstance(value, str) and bool(value.strip())
    if field in DECIMAL_FIELDS:
        if value is None:
            return True
        number = _as_number(value)
        return number is not None and number >= 0
    if field in COUNT_FIELDS:
        if value is None:
            return True
        number = _as_number(value)
        return number is not None and number >= 0 and number.is_integer()
    return True


def sanitize_property_value(field: str, value):
    """Normalizes a raw form value into what gets stored for the field."""
    if field in TEXT_FIELDS:
        return value.strip() if isinstance(value, str) else value
    if field in DECIMAL_FIELDS:
        if value == "" or value is None:
            return None
        number = _as_number(value)
        return value if number is None else number
    if field in COUNT_FIELDS:
        if value == "" or value is None:
            return None
        number = _as_number(value)
        return value if number is None else math.floor(number)
    return value
