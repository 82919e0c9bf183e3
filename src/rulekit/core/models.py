"""Core contracts for rulekit.

These models define the stable wire format for rule configuration:

    [
        {"field": "age", "predicates": [{"name": "isNumber"}], "optional": false},
        ...
    ]
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class ValidationMode(str, Enum):
    """How the validator proceeds after a failing predicate."""

    COLLECT_ALL = "COLLECT_ALL"  # Report every failure (default)
    FAIL_FAST = "FAIL_FAST"  # Stop the whole validation at the first failure
    FIRST_ERROR_PER_FIELD = "FIRST_ERROR_PER_FIELD"  # Stop the field, keep going


# =============================================================================
# Wire Models
# =============================================================================


class PredicateSpecModel(BaseModel):
    """A predicate reference inside a rule."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)


class RuleModel(BaseModel):
    """A single rule: one field, one or more predicates."""

    model_config = ConfigDict(extra="forbid")

    field: str | list[str | int]
    predicates: list[PredicateSpecModel]
    optional: bool = False

    @field_validator("predicates")
    @classmethod
    def validate_predicates(cls, v: list[PredicateSpecModel]) -> list[PredicateSpecModel]:
        """A rule must reference at least one predicate."""
        if not v:
            raise ValueError("predicates must not be empty")
        return v
