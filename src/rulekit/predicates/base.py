"""
Base Predicate Interface - Predicates are pure boolean tests.

Predicates are stateless functions that:
1. Take one value and a (validated) params mapping
2. Test a single property of that value
3. Return True or False, never raise
4. Never perform I/O

Every predicate is normalized to the canonical signature
``(value, params) -> bool`` before it reaches a registry.
"""

import copy
import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ValidationError

from rulekit.core.errors import InvalidRuleError

logger = logging.getLogger(__name__)

PredicateFunc = Callable[[Any, Mapping[str, Any]], bool]

_EMPTY_PARAMS: Mapping[str, Any] = MappingProxyType({})


def _is_unary(func: Callable[..., Any]) -> bool:
    """Check whether a callable takes exactly one positional argument."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Some C builtins expose no signature; treat them as plain type tests
        return True

    positional = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return False
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional == 1


@dataclass(frozen=True)
class Predicate:
    """A named predicate in canonical form."""

    name: str
    func: PredicateFunc
    params_model: type[BaseModel] | None = None
    description: str = ""

    @classmethod
    def from_callable(
        cls,
        name: str,
        func: Callable[..., Any],
        params_model: type[BaseModel] | None = None,
        description: str = "",
        unary: bool | None = None,
    ) -> "Predicate":
        """
        Normalize a callable to a Predicate.

        Args:
            name: Registry name (e.g., 'isString')
            func: Either ``(value) -> bool`` or ``(value, params) -> bool``
            params_model: Optional pydantic model validating params
            description: Human-readable description
            unary: Force the arity instead of inspecting the signature

        Returns:
            Predicate with the canonical signature
        """
        if isinstance(func, Predicate):
            return func

        if unary is None:
            unary = _is_unary(func)

        if unary:
            target = func

            def canonical(value: Any, params: Mapping[str, Any]) -> bool:
                return target(value)

            canonical.__name__ = getattr(func, "__name__", name)
            canonical.__doc__ = getattr(func, "__doc__", None)
            func = canonical

        return cls(
            name=name,
            func=func,
            params_model=params_model,
            description=description or (inspect.getdoc(func) or "").split("\n")[0],
        )

    def bind(self, params: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
        """
        Validate params for this predicate.

        Args:
            params: Raw params from a rule

        Returns:
            Read-only, normalized params

        Raises:
            InvalidRuleError: If params do not satisfy params_model
        """
        params = params or {}
        if not isinstance(params, Mapping):
            raise InvalidRuleError(
                f"Params for {self.name} must be a mapping, got: {type(params).__name__}"
            )

        # Nested containers must not stay shared with the caller
        try:
            params = copy.deepcopy(dict(params))
        except (TypeError, copy.Error) as e:
            raise InvalidRuleError(f"Params for {self.name} cannot be copied: {e}") from e

        if self.params_model is None:
            return MappingProxyType(params) if params else _EMPTY_PARAMS

        try:
            validated = self.params_model.model_validate(params)
        except ValidationError as e:
            raise InvalidRuleError(f"Invalid params for {self.name}: {e}") from e
        # dict(model) keeps converted values (e.g. compiled patterns)
        return MappingProxyType(dict(validated))

    def __call__(self, value: Any, params: Mapping[str, Any] = _EMPTY_PARAMS) -> bool:
        """Run the predicate. A predicate that raises counts as a failure."""
        try:
            return bool(self.func(value, params))
        except Exception:
            logger.warning(f"Predicate {self.name} raised; treating as failure", exc_info=True)
            return False


def predicate(
    name: str,
    params_model: type[BaseModel] | None = None,
    description: str = "",
) -> Callable[[Callable[..., Any]], Predicate]:
    """
    Decorator turning a function into a Predicate.

        @predicate("isEven")
        def is_even(value):
            return isinstance(value, int) and value % 2 == 0
    """

    def decorator(func: Callable[..., Any]) -> Predicate:
        return Predicate.from_callable(
            name, func, params_model=params_model, description=description
        )

    return decorator
