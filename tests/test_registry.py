"""Tests for the Predicate Registry."""

import pytest

from rulekit.core.errors import (
    DuplicateNameError,
    InvalidRuleError,
    RegistryFrozenError,
    UnknownPredicateError,
)
from rulekit.predicates import Predicate, PredicateRegistry


def is_positive(value) -> bool:
    return isinstance(value, (int, float)) and value > 0


class TestPredicateRegistry:
    """Test registration, lookup and freezing."""

    @pytest.fixture
    def empty(self) -> PredicateRegistry:
        return PredicateRegistry()

    def test_register_and_lookup(self, empty: PredicateRegistry) -> None:
        """Registered predicates are found by name."""
        empty.register("isPositive", is_positive)

        pred = empty.lookup("isPositive")
        assert isinstance(pred, Predicate)
        assert pred.name == "isPositive"
        assert pred(3, {})

    def test_duplicate_name_fails(self, empty: PredicateRegistry) -> None:
        """Registering a name twice fails without override."""
        empty.register("isPositive", is_positive)

        with pytest.raises(DuplicateNameError) as exc:
            empty.register("isPositive", lambda v: True)
        assert exc.value.name == "isPositive"

    def test_override_replaces(self, empty: PredicateRegistry) -> None:
        """override=True replaces the existing entry."""
        empty.register("check", lambda v: False)
        empty.register("check", lambda v: True, override=True)

        assert empty.lookup("check")(None, {}) is True
        assert len(empty) == 1

    def test_lookup_unknown_fails(self, empty: PredicateRegistry) -> None:
        """Unknown names raise UnknownPredicateError."""
        with pytest.raises(UnknownPredicateError) as exc:
            empty.lookup("nope")
        assert exc.value.names == ("nope",)

    def test_get_returns_none_for_unknown(self, empty: PredicateRegistry) -> None:
        """get() is the non-raising lookup."""
        assert empty.get("nope") is None

    def test_invalid_names_rejected(self, empty: PredicateRegistry) -> None:
        """Names must be non-empty strings and predicates callable."""
        with pytest.raises(InvalidRuleError):
            empty.register("", is_positive)
        with pytest.raises(InvalidRuleError):
            empty.register("x", "not callable")  # type: ignore[arg-type]

    def test_registering_predicate_under_new_name(self, empty: PredicateRegistry) -> None:
        """A Predicate registered under another name is renamed."""
        pred = Predicate.from_callable("original", is_positive)
        empty.register("alias", pred)

        assert empty.lookup("alias").name == "alias"

    def test_keys_is_lazy_and_restartable(self, empty: PredicateRegistry) -> None:
        """keys() can be iterated more than once and reflects the registry."""
        empty.register("a", is_positive)
        empty.register("b", is_positive)
        keys = empty.keys()

        assert list(keys) == ["a", "b"]
        assert list(keys) == ["a", "b"]
        empty.register("c", is_positive)
        assert list(keys) == ["a", "b", "c"]

    def test_freeze_blocks_registration(self, empty: PredicateRegistry) -> None:
        """A frozen registry is immutable."""
        empty.register("a", is_positive)
        empty.freeze()

        assert empty.frozen
        with pytest.raises(RegistryFrozenError):
            empty.register("b", is_positive)
        with pytest.raises(RegistryFrozenError):
            empty.register("a", is_positive, override=True)

    def test_missing_preserves_order(self, empty: PredicateRegistry) -> None:
        """missing() reports each absent name once, in first-seen order."""
        empty.register("a", is_positive)

        assert empty.missing(["z", "a", "y", "z"]) == ["z", "y"]

    def test_subset(self, empty: PredicateRegistry) -> None:
        """subset() copies only the named predicates into a new registry."""
        empty.register("a", is_positive)
        empty.register("b", is_positive)
        empty.freeze()

        sub = empty.subset(["b"])
        assert sub.list_predicates() == ["b"]
        assert not sub.frozen
        assert sub.lookup("b") is empty.lookup("b")

    def test_subset_reports_all_missing(self, empty: PredicateRegistry) -> None:
        """subset() lists every missing name at once."""
        empty.register("a", is_positive)

        with pytest.raises(UnknownPredicateError) as exc:
            empty.subset(["a", "x", "y"])
        assert exc.value.names == ("x", "y")

    def test_copy_is_unfrozen_and_independent(self, empty: PredicateRegistry) -> None:
        """copy() can be extended without touching the original."""
        empty.register("a", is_positive)
        empty.freeze()

        clone = empty.copy()
        clone.register("b", is_positive)
        assert "b" in clone
        assert "b" not in empty

    def test_independent_registries(self) -> None:
        """Registries share no state."""
        first, second = PredicateRegistry(), PredicateRegistry()
        first.register("a", is_positive)

        assert "a" not in second

    def test_predicate_info(self, registry: PredicateRegistry) -> None:
        """Info lists descriptions and params schemas."""
        info = {item["name"]: item for item in registry.get_predicate_info()}

        assert info["isString"]["params"] is None
        assert "value" in info["minLength"]["params"]["properties"]
