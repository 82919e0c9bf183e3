"""
Rules - Declarative field to predicate bindings.

A Rule says "this field must satisfy these predicates, in this order".
A RuleSet holds one Rule per path, in declaration order.
"""

import copy
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from pydantic import ValidationError

from rulekit.core.errors import InvalidRuleError
from rulekit.core.models import RuleModel
from rulekit.core.paths import FieldPath, Segment

logger = logging.getLogger(__name__)

PathLike = Union[FieldPath, str, Sequence[Segment]]
SpecLike = Union["PredicateSpec", str, tuple[str, Mapping[str, Any]], Mapping[str, Any]]


@dataclass(frozen=True)
class PredicateSpec:
    """A predicate reference: name plus raw params."""

    name: str
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(cls, spec: SpecLike) -> "PredicateSpec":
        """Coerce a name, (name, params) tuple, mapping or PredicateSpec."""
        if isinstance(spec, PredicateSpec):
            return spec
        if isinstance(spec, str):
            name, params = spec, {}
        elif isinstance(spec, tuple) and len(spec) == 2:
            name, params = spec
        elif isinstance(spec, Mapping):
            unknown = set(spec) - {"name", "params"}
            if unknown:
                raise InvalidRuleError(f"Unknown predicate spec keys: {sorted(unknown)}")
            name, params = spec.get("name"), spec.get("params") or {}
        else:
            raise InvalidRuleError(f"Not a predicate spec: {spec!r}")

        if not isinstance(name, str) or not name:
            raise InvalidRuleError(f"Predicate name must be a non-empty string: {name!r}")
        if not isinstance(params, Mapping):
            raise InvalidRuleError(f"Params for {name} must be a mapping")
        try:
            params = copy.deepcopy(dict(params))
        except (TypeError, copy.Error) as e:
            raise InvalidRuleError(f"Params for {name} cannot be copied: {e}") from e
        return cls(name=name, params=MappingProxyType(params))

    def to_config(self) -> dict[str, Any]:
        """Wire-format representation."""
        out: dict[str, Any] = {"name": self.name}
        if self.params:
            out["params"] = copy.deepcopy(dict(self.params))
        return out


@dataclass(frozen=True)
class Rule:
    """A field path bound to an ordered, non-empty predicate sequence."""

    path: FieldPath
    predicates: tuple[PredicateSpec, ...]
    optional: bool = False

    @property
    def field(self) -> str:
        """Canonical field name used in error reports."""
        return str(self.path)

    @property
    def predicate_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.predicates)

    def to_config(self) -> dict[str, Any]:
        """Wire-format representation."""
        return {
            "field": self.path.to_config(),
            "predicates": [spec.to_config() for spec in self.predicates],
            "optional": self.optional,
        }


class RuleSet:
    """
    Ordered collection of Rules, one per path.

    Re-adding a path requires override=True; the new rule takes the
    original path's position.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[FieldPath, Rule] = {}
        self._overridden: list[FieldPath] = []
        for rule in rules:
            self._put(rule, override=False)

    def add_rule(
        self,
        path: PathLike,
        predicate_specs: Sequence[SpecLike],
        optional: bool = False,
        override: bool = False,
    ) -> Rule:
        """
        Add a rule.

        Args:
            path: Field selector ("a.b[0]", FieldPath, or segments)
            predicate_specs: Non-empty ordered predicate references
            optional: Absent field passes instead of failing
            override: Replace an existing rule for the same path

        Returns:
            The added Rule

        Raises:
            InvalidRuleError: Malformed path, empty specs, or duplicate path
        """
        field_path = FieldPath.of(path)

        if isinstance(predicate_specs, (str, Mapping)) or not isinstance(
            predicate_specs, Sequence
        ):
            raise InvalidRuleError(
                "Predicates must be a sequence of predicate specs", path=str(field_path)
            )
        if not predicate_specs:
            raise InvalidRuleError("Rule must have at least one predicate", path=str(field_path))

        rule = Rule(
            path=field_path,
            predicates=tuple(PredicateSpec.of(spec) for spec in predicate_specs),
            optional=bool(optional),
        )
        self._put(rule, override=override)
        return rule

    def _put(self, rule: Rule, override: bool) -> None:
        if rule.path in self._rules:
            if not override:
                raise InvalidRuleError("Duplicate rule for path", path=rule.field)
            logger.debug(f"Overriding rule for {rule.field}")
            if rule.path not in self._overridden:
                self._overridden.append(rule.path)
        self._rules[rule.path] = rule

    def update(self, other: "RuleSet") -> None:
        """Right-biased in-place merge: other's rules replace ours on conflict."""
        for rule in other:
            self._put(rule, override=True)

    @property
    def overridden_paths(self) -> tuple[FieldPath, ...]:
        """Paths replaced by a later rule, in the order they were replaced."""
        return tuple(self._overridden)

    @property
    def paths(self) -> tuple[FieldPath, ...]:
        return tuple(self._rules)

    def predicate_names(self) -> list[str]:
        """All referenced predicate names, de-duplicated in first-use order."""
        names: dict[str, None] = {}
        for rule in self._rules.values():
            for name in rule.predicate_names:
                names.setdefault(name, None)
        return list(names)

    def get(self, path: PathLike) -> Rule | None:
        """Get the rule for a path, or None."""
        return self._rules.get(FieldPath.of(path))

    def copy(self) -> "RuleSet":
        rule_set = RuleSet()
        rule_set._rules = dict(self._rules)
        rule_set._overridden = list(self._overridden)
        return rule_set

    @classmethod
    def from_config(cls, data: Iterable[Mapping[str, Any] | RuleModel]) -> "RuleSet":
        """
        Build a RuleSet from wire-format data.

        Args:
            data: Sequence of {field, predicates: [{name, params}], optional}

        Raises:
            InvalidRuleError: If the data does not match the wire format
        """
        if isinstance(data, (str, bytes, Mapping)):
            raise InvalidRuleError("Rule configuration must be a sequence of rules")

        rule_set = cls()
        for i, item in enumerate(data):
            try:
                model = item if isinstance(item, RuleModel) else RuleModel.model_validate(item)
            except ValidationError as e:
                raise InvalidRuleError(f"Invalid rule at index {i}: {e}") from e
            rule_set.add_rule(
                model.field,
                [(spec.name, spec.params) for spec in model.predicates],
                optional=model.optional,
            )
        return rule_set

    def to_config(self) -> list[dict[str, Any]]:
        """Wire-format representation."""
        return [rule.to_config() for rule in self._rules.values()]

    def __getitem__(self, path: PathLike) -> Rule:
        rule = self.get(path)
        if rule is None:
            raise KeyError(str(path))
        return rule

    def __contains__(self, path: object) -> bool:
        try:
            return FieldPath.of(path) in self._rules  # type: ignore[arg-type]
        except InvalidRuleError:
            return False

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({[str(p) for p in self._rules]})"


def merge(base: RuleSet, other: RuleSet) -> RuleSet:
    """
    Merge two rule sets. Right-biased.

    Paths in both take other's rule, keeping base's position. Paths only
    in other are appended in other's order. The result's overridden_paths
    records every path other replaced.

    Args:
        base: Left rule set
        other: Right rule set (wins on conflict)

    Returns:
        A new RuleSet; neither input is modified
    """
    merged = RuleSet(base)
    merged.update(other)

    if merged.overridden_paths:
        logger.info(
            f"Merged rule sets, overridden paths: {[str(p) for p in merged.overridden_paths]}"
        )
    return merged
