"""rulekit - Compose small predicates into rule-based validators."""

from rulekit.config import Settings, configure_logging, get_settings
from rulekit.core.composition import (
    build_validator,
    merge_registries,
    merge_rule_sets,
    validator_from_settings,
)
from rulekit.core.errors import (
    ConfigurationError,
    DuplicateNameError,
    InvalidRuleError,
    RegistryFrozenError,
    RulekitError,
    UnknownPredicateError,
)
from rulekit.core.models import ValidationMode
from rulekit.core.paths import ABSENT, FieldPath
from rulekit.core.rules import PredicateSpec, Rule, RuleSet, load_rule_set, merge
from rulekit.core.validator import FieldError, ValidationResult, Validator, build
from rulekit.predicates import Predicate, PredicateRegistry, default_registry, predicate

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "ConfigurationError",
    "DuplicateNameError",
    "FieldError",
    "FieldPath",
    "InvalidRuleError",
    "Predicate",
    "PredicateRegistry",
    "PredicateSpec",
    "RegistryFrozenError",
    "Rule",
    "RuleSet",
    "RulekitError",
    "Settings",
    "UnknownPredicateError",
    "ValidationMode",
    "ValidationResult",
    "Validator",
    "build",
    "build_validator",
    "configure_logging",
    "default_registry",
    "get_settings",
    "load_rule_set",
    "merge",
    "merge_registries",
    "merge_rule_sets",
    "predicate",
    "validator_from_settings",
]
