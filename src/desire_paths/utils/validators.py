"""
Input validation helpers for Desire Paths.

Used by the configuration layer to reject out-of-range thresholds and
malformed block codes before the engine starts. Every helper returns
the value it checked so calls can be chained into assignments.
"""

from typing import Any, List, Optional


class ValidationError(Exception):
    """A single field failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


def validate_range(value: float, min_val: float, max_val: float,
                   field: str = "value") -> float:
    """Require ``min_val <= value <= max_val``."""
    if value < min_val or value > max_val:
        raise ValidationError(f"must be in [{min_val}, {max_val}], got {value}", field)
    return value


def validate_positive(value: float, field: str = "value",
                      allow_zero: bool = True) -> float:
    """Require a non-negative value, or a strictly positive one."""
    too_small = value < 0 if allow_zero else value <= 0
    if too_small:
        bound = "non-negative" if allow_zero else "positive"
        raise ValidationError(f"must be {bound}, got {value}", field)
    return value


def validate_not_empty(value: Any, field: str = "value") -> Any:
    if value is None or (hasattr(value, '__len__') and not len(value)):
        raise ValidationError("must not be empty", field)
    return value


def validate_type(value: Any, expected_type: type,
                  field: str = "value") -> Any:
    if not isinstance(value, expected_type):
        raise ValidationError(
            f"expected {getattr(expected_type, '__name__', expected_type)}, "
            f"got {type(value).__name__}",
            field
        )
    return value


def validate_block_code(code: str, field: str = "block_code") -> str:
    """
    Validate a block code of the form ``domain:path`` or ``path``.

    Both parts must be non-empty and the code may contain at most one
    domain separator.
    """
    validate_type(code, str, field)
    validate_not_empty(code, field)
    parts = code.split(":")
    if len(parts) > 2 or any(not part for part in parts):
        raise ValidationError(f"malformed block code '{code}'", field)
    return code


def validate_keywords(keywords: List[str], field: str = "keywords") -> List[str]:
    """Validate a list of lowercase, non-empty substrings."""
    validate_type(keywords, list, field)
    for word in keywords:
        validate_type(word, str, field)
        validate_not_empty(word, field)
        if word != word.lower():
            raise ValidationError(f"keyword '{word}' must be lowercase", field)
    return keywords
