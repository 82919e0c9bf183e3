"""rulekit predicates - Canonical predicates, registry and builtins."""

from rulekit.predicates.base import Predicate, predicate
from rulekit.predicates.registry import PredicateRegistry
from rulekit.predicates.builtin import BUILTIN_PREDICATES, default_registry

__all__ = [
    "BUILTIN_PREDICATES",
    "Predicate",
    "PredicateRegistry",
    "default_registry",
    "predicate",
]
