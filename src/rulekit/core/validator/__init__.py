"""Validator - Rule set execution engine."""

from rulekit.core.validator.validator import (
    DEFAULT_MESSAGE_TEMPLATE,
    DEFAULT_REQUIRED_MESSAGE,
    REQUIRED_PREDICATE,
    FieldError,
    MessageTemplate,
    ValidationResult,
    Validator,
    build,
)

__all__ = [
    "DEFAULT_MESSAGE_TEMPLATE",
    "DEFAULT_REQUIRED_MESSAGE",
    "REQUIRED_PREDICATE",
    "FieldError",
    "MessageTemplate",
    "ValidationResult",
    "Validator",
    "build",
]
