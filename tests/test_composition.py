"""Tests for the composition layer and settings."""

import json
from pathlib import Path

import pytest

from rulekit.config import Settings, configure_logging, get_settings
from rulekit.core.composition import (
    build_validator,
    merge_registries,
    merge_rule_sets,
    validator_from_settings,
)
from rulekit.core.errors import ConfigurationError, UnknownPredicateError
from rulekit.core.models import ValidationMode
from rulekit.core.paths import FieldPath
from rulekit.core.rules import RuleSet
from rulekit.predicates import PredicateRegistry, default_registry


AGE_RULES = [{"field": "age", "predicates": [{"name": "isNumber"}]}]


class TestMergeRuleSets:
    """Test folding many rule sets."""

    def test_later_sets_win(self) -> None:
        base, team, local = RuleSet(), RuleSet(), RuleSet()
        base.add_rule("x", ["isString"])
        base.add_rule("y", ["isString"])
        team.add_rule("x", ["isNumber"])
        local.add_rule("y", ["isNumber"])
        local.add_rule("z", ["isBoolean"])

        merged = merge_rule_sets(base, team, local)

        assert [rule.field for rule in merged] == ["x", "y", "z"]
        assert merged["x"].predicate_names == ("isNumber",)
        assert merged["y"].predicate_names == ("isNumber",)
        assert merged.overridden_paths == (FieldPath.parse("x"), FieldPath.parse("y"))

    def test_no_sets(self) -> None:
        assert len(merge_rule_sets()) == 0


class TestMergeRegistries:
    """Test registry unions."""

    def test_union_right_biased(self) -> None:
        first, second = PredicateRegistry(), PredicateRegistry()
        first.register("a", lambda v: False)
        first.register("b", lambda v: False)
        second.register("b", lambda v: True)

        merged = merge_registries(first, second)

        assert merged.list_predicates() == ["a", "b"]
        assert merged.lookup("b")(None, {}) is True
        assert not merged.frozen

    def test_merge_with_builtins(self) -> None:
        """Custom predicates compose with the builtin library."""
        custom = PredicateRegistry()
        custom.register("isEven", lambda v: isinstance(v, int) and v % 2 == 0)

        merged = merge_registries(default_registry(["isInteger"]), custom)

        assert set(merged.keys()) == {"isInteger", "isEven"}


class TestBuildValidator:
    """Test the one-call builder."""

    def test_accepts_wire_data(self, registry: PredicateRegistry) -> None:
        validator = build_validator(AGE_RULES, registry)

        assert not validator.validate({"age": {}}).valid
        assert validator.validate({"age": 5}).valid

    def test_only_used_leaves_source_registry_open(self, registry: PredicateRegistry) -> None:
        """The validator binds a subset; the caller's registry stays mutable."""
        validator = build_validator(AGE_RULES, registry, only_used=True)

        assert validator.registry.list_predicates() == ["isNumber"]
        assert validator.registry.frozen
        assert not registry.frozen

    def test_full_registry_is_frozen(self, registry: PredicateRegistry) -> None:
        validator = build_validator(AGE_RULES, registry, only_used=False)

        assert validator.registry is registry
        assert registry.frozen

    def test_reports_all_unknown_names(self, registry: PredicateRegistry) -> None:
        rules = [
            {"field": "a", "predicates": [{"name": "isFoo"}]},
            {"field": "b", "predicates": [{"name": "isBar"}, {"name": "isString"}]},
        ]

        for only_used in (True, False):
            with pytest.raises(UnknownPredicateError) as exc:
                build_validator(rules, registry.copy(), only_used=only_used)
            assert exc.value.names == ("isBar", "isFoo")

    def test_explicit_options_win(self, registry: PredicateRegistry) -> None:
        settings = Settings(mode=ValidationMode.FAIL_FAST, message_template="x {field}")

        validator = build_validator(
            AGE_RULES,
            registry,
            mode=ValidationMode.COLLECT_ALL,
            message_template="y {field}",
            settings=settings,
        )

        assert validator.mode is ValidationMode.COLLECT_ALL
        assert validator.validate({"age": "a"}).errors[0].message == "y age"

    def test_defaults_from_settings(self, registry: PredicateRegistry) -> None:
        settings = Settings(
            mode=ValidationMode.FAIL_FAST,
            message_template="{predicate} rejected {field}",
            required_message="need {field}",
        )

        validator = build_validator(AGE_RULES, registry, settings=settings)

        assert validator.mode is ValidationMode.FAIL_FAST
        assert validator.validate({"age": "a"}).errors[0].message == "isNumber rejected age"
        assert validator.validate({}).errors[0].message == "need age"


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RULEKIT_MODE", raising=False)
        settings = Settings(_env_file=None)

        assert settings.mode is ValidationMode.COLLECT_ALL
        assert settings.message_template == "{field} failed {predicate}"
        assert settings.rules_file is None

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RULEKIT_MODE", "FIRST_ERROR_PER_FIELD")
        monkeypatch.setenv("RULEKIT_ONLY_USED_PREDICATES", "false")

        settings = get_settings()

        assert settings.mode is ValidationMode.FIRST_ERROR_PER_FIELD
        assert settings.only_used_predicates is False

    def test_cached(self) -> None:
        assert get_settings() is get_settings()


class TestValidatorFromSettings:
    """Test building from a configured rule file."""

    def test_loads_rules_file(self, tmp_path: Path, registry: PredicateRegistry) -> None:
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(AGE_RULES))
        settings = Settings(rules_file=path)

        validator = validator_from_settings(registry, settings=settings)

        assert validator.validate({"age": 5}).valid

    def test_rules_file_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, registry: PredicateRegistry
    ) -> None:
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(AGE_RULES))
        monkeypatch.setenv("RULEKIT_RULES_FILE", str(path))

        validator = validator_from_settings(registry)

        assert not validator.validate({"age": "five"}).valid

    def test_no_rules_file(self, registry: PredicateRegistry) -> None:
        with pytest.raises(ConfigurationError):
            validator_from_settings(registry, settings=Settings(rules_file=None))


class TestConfigureLogging:
    """Test application logging setup."""

    def test_sets_level_and_handler(self) -> None:
        import logging

        logger = logging.getLogger("rulekit")
        saved_handlers, saved_level = list(logger.handlers), logger.level
        logger.handlers = []
        try:
            configure_logging(Settings(log_level="debug"))
            configure_logging(Settings(log_level="info"))

            assert logger.level == logging.INFO
            assert len(logger.handlers) == 1
        finally:
            logger.handlers = saved_handlers
            logger.setLevel(saved_level)
