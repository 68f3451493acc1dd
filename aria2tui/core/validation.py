"""
Live validation of the text typed into a field editor.
"""

import math
import os
import re
from dataclasses import dataclass

from aria2tui.models.fields import Field, FieldKind, FileField, StringField, StringFormat

RATE_LIMIT_PATTERN = re.compile(r"\d+[KMG]?", re.IGNORECASE | re.ASCII)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool = True
    message: str = ""
    warning: bool = False


def parse_number(text: str) -> int | float:
    """
    Parses a finite real number, returning an int when the value is integral.

    Raises:
        ValueError: If the text is not a finite number.
    """
    if "_" in text:
        raise ValueError(f"not a number: {text!r}")
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    if value.is_integer():
        return int(value)
    return value


def _is_path_field(field: Field) -> bool:
    if isinstance(field, FileField):
        return True
    return isinstance(field, StringField) and field.format == StringFormat.PATH


def _is_rate_field(field: Field) -> bool:
    return isinstance(field, StringField) and field.format == StringFormat.RATE


def validate_field_value(field: Field, value: str) -> ValidationResult:
    """
    Checks the text currently in an editor.

    Blank input is always valid. Numbers and speed limits can be invalid and
    block the commit; path checks only ever produce a warning.
    """
    if not value or not value.strip():
        return ValidationResult()

    if field.kind == FieldKind.NUMBER:
        try:
            parse_number(value)
        except ValueError:
            return ValidationResult(valid=False, message="Must be a valid number")
        return ValidationResult(message="Valid number")

    if _is_path_field(field):
        if os.path.exists(value):
            return ValidationResult(message="Path exists")
        return ValidationResult(
            message=(
                "Path does not exist (it will be created, or the download will fail)"
            ),
            warning=True,
        )

    if _is_rate_field(field):
        if RATE_LIMIT_PATTERN.fullmatch(value):
            return ValidationResult(message="Format OK")
        return ValidationResult(
            valid=False, message="Invalid format, use e.g. 10M, 1G, 500K"
        )

    return ValidationResult()
