"""rulekit core - Contracts, paths and configuration errors."""

from rulekit.core.errors import (
    ConfigurationError,
    DuplicateNameError,
    InvalidRuleError,
    RegistryFrozenError,
    RulekitError,
    UnknownPredicateError,
)
from rulekit.core.models import PredicateSpecModel, RuleModel, ValidationMode
from rulekit.core.paths import ABSENT, FieldPath

__all__ = [
    "ABSENT",
    "ConfigurationError",
    "DuplicateNameError",
    "FieldPath",
    "InvalidRuleError",
    "PredicateSpecModel",
    "RegistryFrozenError",
    "RuleModel",
    "RulekitError",
    "UnknownPredicateError",
    "ValidationMode",
]
