"""Configuration error taxonomy.

Only configuration misuse raises. Per-value validation failures are
reported as data in a ValidationResult and never appear here.
"""

from collections.abc import Iterable


class RulekitError(Exception):
    """Base exception for rulekit."""


class ConfigurationError(RulekitError):
    """Raised at configuration time. Never retried."""


class DuplicateNameError(ConfigurationError):
    """A predicate name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Predicate already registered: {name}")
        self.name = name


class UnknownPredicateError(ConfigurationError):
    """One or more predicate names could not be resolved."""

    def __init__(self, names: Iterable[str]):
        # Sorted and de-duplicated so the report is stable
        self.names: tuple[str, ...] = tuple(sorted(set(names)))
        super().__init__(f"Unknown predicate(s): {', '.join(self.names)}")


class InvalidRuleError(ConfigurationError):
    """A rule, path or predicate parameter set is malformed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class RegistryFrozenError(ConfigurationError):
    """The registry is bound to a validator and no longer accepts changes."""

    def __init__(self, name: str):
        super().__init__(f"Registry is frozen, cannot register: {name}")
        self.name = name
