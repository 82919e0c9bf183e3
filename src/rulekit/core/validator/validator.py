"""
Validator - Rule set execution engine.

The validator turns a RuleSet and a PredicateRegistry into an immutable,
reusable check over structured input:
1. Build - resolve every predicate name and bind params up front
2. Validate - walk rules in declaration order, run predicates in order
3. Report - collect failures as data, never as exceptions

Configuration mistakes surface at build time, all at once. A built
validator holds no per-call state and is safe to share across threads.
"""

import logging
import string
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from rulekit.core.errors import ConfigurationError, InvalidRuleError, UnknownPredicateError
from rulekit.core.models import ValidationMode
from rulekit.core.paths import ABSENT, FieldPath
from rulekit.core.rules import RuleSet
from rulekit.predicates.base import Predicate
from rulekit.predicates.registry import PredicateRegistry

logger = logging.getLogger(__name__)

# Reported when a non-optional field is absent
REQUIRED_PREDICATE = "required"

DEFAULT_MESSAGE_TEMPLATE = "{field} failed {predicate}"
DEFAULT_REQUIRED_MESSAGE = "{field} is required"

# str.format template, or (field, predicate, value, params) -> str
MessageTemplate = Union[str, Callable[[str, str, Any, Mapping[str, Any]], str]]

_TEMPLATE_FIELDS = frozenset({"field", "predicate", "value", "params"})
_TEMPLATE_CONVERSIONS = frozenset({"r", "s", "a"})


@dataclass(frozen=True)
class FieldError:
    """A single failed predicate for a single field."""

    field: str
    predicate: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "predicate": self.predicate, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """Result of validation."""

    valid: bool
    errors: tuple[FieldError, ...] = field(default_factory=tuple)

    def errors_for(self, field_name: str) -> list[FieldError]:
        """Errors reported for one field, in predicate order."""
        return [e for e in self.errors if e.field == field_name]

    @property
    def failed_fields(self) -> list[str]:
        """Distinct failing fields, in rule order."""
        return list(dict.fromkeys(e.field for e in self.errors))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs or API responses."""
        return {"valid": self.valid, "errors": [e.to_dict() for e in self.errors]}

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class _Check:
    name: str
    predicate: Predicate
    params: Mapping[str, Any]


@dataclass(frozen=True)
class _CompiledRule:
    path: FieldPath
    field: str
    optional: bool
    checks: tuple[_Check, ...]


def _render(
    template: MessageTemplate,
    field_name: str,
    predicate: str,
    value: Any,
    params: Mapping[str, Any],
) -> str:
    if callable(template):
        return str(template(field_name, predicate, value, params))
    return template.format(field=field_name, predicate=predicate, value=value, params=dict(params))


def _check_format(template: str, depth: int = 0) -> None:
    """
    Reject template errors that do not depend on the value being reported.

    Raises:
        ValueError: Malformed braces, unknown placeholders, bad conversions,
            or format specs nested deeper than str.format allows
    """
    if depth > 1:
        raise ValueError("format specs nested too deeply")
    for _, name, format_spec, conversion in string.Formatter().parse(template):
        if name is None:
            continue
        # "{params[min]}" and "{value.real}" address a known root
        root = name.split(".", 1)[0].split("[", 1)[0]
        if root not in _TEMPLATE_FIELDS:
            raise ValueError(f"unknown placeholder {{{name}}}")
        if conversion is not None and conversion not in _TEMPLATE_CONVERSIONS:
            raise ValueError(f"unknown conversion !{conversion} in {{{name}}}")
        if format_spec:
            _check_format(format_spec, depth + 1)


class Validator:
    """
    Validate structured values against a rule set.

    Modes:
    - COLLECT_ALL: every failing predicate of every field is reported
    - FIRST_ERROR_PER_FIELD: stop a field at its first failure
    - FAIL_FAST: stop the whole validation at the first failure
    """

    def __init__(
        self,
        rule_set: RuleSet,
        registry: PredicateRegistry,
        mode: ValidationMode = ValidationMode.COLLECT_ALL,
        message_template: MessageTemplate = DEFAULT_MESSAGE_TEMPLATE,
        required_message: str = DEFAULT_REQUIRED_MESSAGE,
    ) -> None:
        """
        Build a validator. Resolution and param binding happen here.

        Args:
            rule_set: Rules to enforce
            registry: Predicates the rules may reference; frozen by this call
            mode: Failure handling mode
            message_template: Template for predicate failures
            required_message: Template for absent required fields

        Raises:
            UnknownPredicateError: Listing every unresolved predicate name
            InvalidRuleError: If params fail a predicate's params model
            ConfigurationError: If a message template is unusable
        """
        missing = registry.missing(rule_set.predicate_names())
        if missing:
            raise UnknownPredicateError(missing)

        try:
            self._mode = ValidationMode(mode)
        except ValueError as e:
            raise ConfigurationError(f"Unknown validation mode: {mode!r}") from e
        self._message_template = self._check_template(message_template)
        self._required_message = self._check_template(required_message)

        compiled: list[_CompiledRule] = []
        for rule in rule_set:
            checks = []
            for spec in rule.predicates:
                predicate = registry.lookup(spec.name)
                try:
                    params = predicate.bind(spec.params)
                except InvalidRuleError as e:
                    raise InvalidRuleError(str(e), path=rule.field) from e
                checks.append(_Check(spec.name, predicate, params))
            compiled.append(_CompiledRule(rule.path, rule.field, rule.optional, tuple(checks)))

        self._rules: tuple[_CompiledRule, ...] = tuple(compiled)
        self._rule_set = rule_set.copy()
        self._registry = registry.freeze()

        logger.info(
            f"Built validator: {len(self._rules)} rules, "
            f"{len(rule_set.predicate_names())} predicates, mode {self._mode.value}"
        )

    @staticmethod
    def _check_template(template: MessageTemplate) -> MessageTemplate:
        if callable(template):
            return template
        if not isinstance(template, str):
            raise ConfigurationError(f"Message template must be str or callable: {template!r}")
        try:
            _check_format(template)
        except ValueError as e:
            raise ConfigurationError(f"Invalid message template {template!r}: {e}") from e
        return template

    @classmethod
    def build(
        cls,
        rule_set: RuleSet,
        registry: PredicateRegistry,
        mode: ValidationMode = ValidationMode.COLLECT_ALL,
        message_template: MessageTemplate = DEFAULT_MESSAGE_TEMPLATE,
        required_message: str = DEFAULT_REQUIRED_MESSAGE,
    ) -> "Validator":
        """Alias for the constructor."""
        return cls(rule_set, registry, mode, message_template, required_message)

    @property
    def mode(self) -> ValidationMode:
        return self._mode

    @property
    def rule_set(self) -> RuleSet:
        """A copy of the rules this validator enforces."""
        return self._rule_set.copy()

    @property
    def registry(self) -> PredicateRegistry:
        """The (frozen) registry this validator was built from."""
        return self._registry

    def validate(self, value: Any) -> ValidationResult:
        """
        Validate a structured value.

        Never raises for any input value.

        Args:
            value: Mapping or other structured value

        Returns:
            ValidationResult with errors in rule, then predicate order
        """
        errors: list[FieldError] = []
        fail_fast = self._mode is ValidationMode.FAIL_FAST
        collect_all = self._mode is ValidationMode.COLLECT_ALL

        for rule in self._rules:
            resolved = rule.path.resolve(value)

            if resolved is ABSENT:
                if rule.optional:
                    continue
                errors.append(
                    FieldError(
                        field=rule.field,
                        predicate=REQUIRED_PREDICATE,
                        message=self._message(
                            self._required_message,
                            rule.field,
                            REQUIRED_PREDICATE,
                            ABSENT,
                            {},
                            fallback=DEFAULT_REQUIRED_MESSAGE,
                        ),
                    )
                )
                if fail_fast:
                    break
                continue

            failed = False
            for check in rule.checks:
                if check.predicate(resolved, check.params):
                    continue
                failed = True
                errors.append(
                    FieldError(
                        field=rule.field,
                        predicate=check.name,
                        message=self._message(
                            self._message_template, rule.field, check.name, resolved, check.params
                        ),
                    )
                )
                if not collect_all:
                    break

            if failed and fail_fast:
                break

        return ValidationResult(valid=not errors, errors=tuple(errors))

    def validate_many(self, values: Iterable[Any]) -> list[ValidationResult]:
        """Validate each value independently."""
        return [self.validate(value) for value in values]

    def _message(
        self,
        template: MessageTemplate,
        field_name: str,
        predicate: str,
        value: Any,
        params: Mapping[str, Any],
        fallback: str = DEFAULT_MESSAGE_TEMPLATE,
    ) -> str:
        try:
            return _render(template, field_name, predicate, value, params)
        except Exception:
            # A template that only breaks on some values must not break validate()
            logger.warning(f"Message template failed for {field_name}/{predicate}", exc_info=True)
            return fallback.format(field=field_name, predicate=predicate)

    def __repr__(self) -> str:
        return f"Validator({len(self._rules)} rules, mode={self._mode.value})"


def build(
    rule_set: RuleSet,
    registry: PredicateRegistry,
    mode: ValidationMode = ValidationMode.COLLECT_ALL,
    message_template: MessageTemplate = DEFAULT_MESSAGE_TEMPLATE,
    required_message: str = DEFAULT_REQUIRED_MESSAGE,
) -> Validator:
    """Build a validator from a rule set and registry."""
    return Validator(rule_set, registry, mode, message_template, required_message)
