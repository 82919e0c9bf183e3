"""
Predicate Registry - Name to predicate mapping.

The registry is an explicit configuration object. It is populated at
configuration time, then frozen when a validator is built from it so
validation behavior stays reproducible. Independent registries may
coexist; there is no process-wide instance.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, KeysView
from types import MappingProxyType
from typing import Any

from rulekit.core.errors import (
    DuplicateNameError,
    InvalidRuleError,
    RegistryFrozenError,
    UnknownPredicateError,
)
from rulekit.predicates.base import Predicate

logger = logging.getLogger(__name__)


class PredicateRegistry:
    """
    Registry of named predicates.

    Append-only while configuring; immutable once frozen.
    """

    def __init__(self) -> None:
        self._predicates: dict[str, Predicate] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Whether the registry still accepts registrations."""
        return self._frozen

    def register(
        self,
        name: str,
        predicate: Predicate | Callable[..., Any],
        override: bool = False,
    ) -> Predicate:
        """
        Register a predicate.

        Args:
            name: Unique predicate name
            predicate: A Predicate, or a callable normalized to one
            override: Replace an existing entry instead of failing

        Returns:
            The registered Predicate

        Raises:
            DuplicateNameError: If name exists and override is False
            RegistryFrozenError: If the registry is frozen
        """
        if self._frozen:
            raise RegistryFrozenError(name)
        if not isinstance(name, str) or not name:
            raise InvalidRuleError(f"Predicate name must be a non-empty string: {name!r}")
        if not callable(predicate):
            raise InvalidRuleError(f"Predicate {name} is not callable")

        if name in self._predicates:
            if not override:
                raise DuplicateNameError(name)
            logger.debug(f"Overriding predicate: {name}")

        if isinstance(predicate, Predicate):
            if predicate.name != name:
                predicate = Predicate(
                    name=name,
                    func=predicate.func,
                    params_model=predicate.params_model,
                    description=predicate.description,
                )
        else:
            predicate = Predicate.from_callable(name, predicate)

        self._predicates[name] = predicate
        return predicate

    def lookup(self, name: str) -> Predicate:
        """
        Get a predicate by name.

        Raises:
            UnknownPredicateError: If name is not registered
        """
        try:
            return self._predicates[name]
        except KeyError:
            raise UnknownPredicateError([name]) from None

    def get(self, name: str) -> Predicate | None:
        """Get a predicate by name, or None."""
        return self._predicates.get(name)

    def keys(self) -> KeysView[str]:
        """Lazy, restartable view of registered names."""
        return MappingProxyType(self._predicates).keys()

    def list_predicates(self) -> list[str]:
        """Get list of registered predicate names."""
        return list(self._predicates.keys())

    def get_predicate_info(self) -> list[dict[str, Any]]:
        """Get info about all registered predicates."""
        return [
            {
                "name": pred.name,
                "description": pred.description,
                "params": (
                    pred.params_model.model_json_schema() if pred.params_model else None
                ),
            }
            for pred in self._predicates.values()
        ]

    def missing(self, names: Iterable[str]) -> list[str]:
        """Return the names that are not registered, in first-seen order."""
        seen: dict[str, None] = {}
        for name in names:
            if name not in self._predicates:
                seen.setdefault(name, None)
        return list(seen)

    def subset(self, names: Iterable[str]) -> "PredicateRegistry":
        """
        Create a new registry with only the named predicates.

        Raises:
            UnknownPredicateError: Listing every name that is not registered
        """
        names = list(names)
        missing = self.missing(names)
        if missing:
            raise UnknownPredicateError(missing)

        registry = PredicateRegistry()
        for name in names:
            if name not in registry:
                registry._predicates[name] = self._predicates[name]
        return registry

    def copy(self) -> "PredicateRegistry":
        """Create an unfrozen copy."""
        registry = PredicateRegistry()
        registry._predicates = dict(self._predicates)
        return registry

    def freeze(self) -> "PredicateRegistry":
        """Stop accepting registrations. Idempotent."""
        if not self._frozen:
            logger.debug(f"Freezing registry with {len(self._predicates)} predicates")
            self._frozen = True
        return self

    def __contains__(self, name: object) -> bool:
        return name in self._predicates

    def __len__(self) -> int:
        return len(self._predicates)

    def __iter__(self) -> Iterator[str]:
        return iter(self._predicates)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"PredicateRegistry({len(self._predicates)} predicates, {state})"
