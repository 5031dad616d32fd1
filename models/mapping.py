"""
Mapping rule schemas for spreadsheet ingestion.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from models.base import BaseSchema


class TransformOp(str, Enum):
    """Supported value transforms."""
    TRIM = "trim"
    LOWER = "lower"
    UPPER = "upper"
    REGEX = "regex"
    SPLIT = "split"
    JOIN = "join"
    TO_NUMBER = "to_number"


class TransformSpec(BaseSchema):
    """
    A single named operation plus its arguments.

    op is kept as a plain string: unknown operations are a passthrough,
    not a validation failure.
    """
    op: str
    args: dict[str, Any] = Field(default_factory=dict)


class MappingRule(BaseSchema):
    """
    source_field -> internal_field association.

    Rules are applied as an ordered list. When several rules target the
    same internal_field, the last one applied wins.
    """
    source_field: str = Field(..., min_length=1)
    internal_field: str = Field(..., min_length=1)
    transform: Optional[TransformSpec] = None
