"""
Builtin predicates - Small, single-purpose value tests.

Each predicate tests exactly one property. Pick only what you need:

    registry = default_registry(["isString", "isNumber"])
"""

import math
import re
from collections.abc import Iterable, Mapping, Sized
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rulekit.core.paths import ABSENT
from rulekit.predicates.registry import PredicateRegistry
from rulekit.predicates.base import Predicate


# =============================================================================
# Type predicates
# =============================================================================


def is_string(value: Any) -> bool:
    """Value is a string."""
    return isinstance(value, str)


def is_number(value: Any) -> bool:
    """Value is a real number. NaN and booleans are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def is_integer(value: Any) -> bool:
    """Value is an integer (booleans excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_boolean(value: Any) -> bool:
    """Value is True or False."""
    return isinstance(value, bool)


def is_object(value: Any) -> bool:
    """Value is a mapping."""
    return isinstance(value, Mapping)


def is_array(value: Any) -> bool:
    """Value is a list or tuple."""
    return isinstance(value, (list, tuple))


def is_null(value: Any) -> bool:
    """Value is None."""
    return value is None


def is_defined(value: Any) -> bool:
    """Value is present and not None."""
    return value is not None and value is not ABSENT


def is_timestamp(value: Any) -> bool:
    """Value is a datetime, an ISO-8601 string, or a non-negative epoch number."""
    if isinstance(value, (datetime, date)):
        return True
    if isinstance(value, str):
        try:
            # fromisoformat does not accept a trailing "Z" before 3.11
            datetime.fromisoformat(value[:-1] + "+00:00" if value.endswith("Z") else value)
        except ValueError:
            return False
        return True
    if not is_number(value) or value < 0:
        return False
    # Huge ints cannot be converted to float; they are finite anyway
    return not isinstance(value, float) or math.isfinite(value)


def is_non_empty(value: Any) -> bool:
    """Value has a length greater than zero."""
    return isinstance(value, Sized) and len(value) > 0


# =============================================================================
# Parameterized predicates
# =============================================================================


class LengthParams(BaseModel):
    """Params for minLength / maxLength."""

    model_config = ConfigDict(extra="forbid")

    value: int = Field(ge=0)


class BoundParams(BaseModel):
    """Params for min / max."""

    model_config = ConfigDict(extra="forbid")

    value: float

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: float) -> float:
        """Bounds must be comparable."""
        if math.isnan(v):
            raise ValueError("bound must not be NaN")
        return v


class PatternParams(BaseModel):
    """Params for matches."""

    model_config = ConfigDict(extra="forbid")

    # Compiled once at bind time
    pattern: re.Pattern


class ChoiceParams(BaseModel):
    """Params for oneOf."""

    model_config = ConfigDict(extra="forbid")

    values: list[Any] = Field(min_length=1)


def min_length(value: Any, params: Mapping[str, Any]) -> bool:
    """Length is at least params['value']."""
    return isinstance(value, Sized) and len(value) >= params["value"]


def max_length(value: Any, params: Mapping[str, Any]) -> bool:
    """Length is at most params['value']."""
    return isinstance(value, Sized) and len(value) <= params["value"]


def minimum(value: Any, params: Mapping[str, Any]) -> bool:
    """Number is at least params['value']."""
    return is_number(value) and value >= params["value"]


def maximum(value: Any, params: Mapping[str, Any]) -> bool:
    """Number is at most params['value']."""
    return is_number(value) and value <= params["value"]


def matches(value: Any, params: Mapping[str, Any]) -> bool:
    """String fully matches params['pattern']."""
    return isinstance(value, str) and params["pattern"].fullmatch(value) is not None


def one_of(value: Any, params: Mapping[str, Any]) -> bool:
    """Value equals one of params['values']."""
    # bool == int in Python; keep True from matching 1
    return any(
        value == choice and isinstance(value, bool) == isinstance(choice, bool)
        for choice in params["values"]
    )


BUILTIN_PREDICATES: tuple[Predicate, ...] = (
    Predicate.from_callable("isString", is_string),
    Predicate.from_callable("isNumber", is_number),
    Predicate.from_callable("isInteger", is_integer),
    Predicate.from_callable("isBoolean", is_boolean),
    Predicate.from_callable("isObject", is_object),
    Predicate.from_callable("isArray", is_array),
    Predicate.from_callable("isNull", is_null),
    Predicate.from_callable("isDefined", is_defined),
    Predicate.from_callable("isTimestamp", is_timestamp),
    Predicate.from_callable("isNonEmpty", is_non_empty),
    Predicate.from_callable("minLength", min_length, params_model=LengthParams),
    Predicate.from_callable("maxLength", max_length, params_model=LengthParams),
    Predicate.from_callable("min", minimum, params_model=BoundParams),
    Predicate.from_callable("max", maximum, params_model=BoundParams),
    Predicate.from_callable("matches", matches, params_model=PatternParams),
    Predicate.from_callable("oneOf", one_of, params_model=ChoiceParams),
)


def default_registry(names: Iterable[str] | None = None) -> PredicateRegistry:
    """
    Create a new registry holding builtin predicates.

    Args:
        names: Only register these builtins (all of them if None)

    Returns:
        A fresh, unfrozen PredicateRegistry

    Raises:
        UnknownPredicateError: If a requested name is not a builtin
    """
    registry = PredicateRegistry()
    for pred in BUILTIN_PREDICATES:
        registry.register(pred.name, pred)

    if names is None:
        return registry
    return registry.subset(names)
