"""
Composition - Assemble validators from independent pieces.

Predicates and rules are written independently and combined here
without touching their implementations:
- merge rule sets (right-biased)
- merge registries (right-biased)
- build a validator against only the predicates its rules use
"""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from rulekit.config import Settings, get_settings
from rulekit.core.errors import ConfigurationError
from rulekit.core.models import RuleModel, ValidationMode
from rulekit.core.rules import RuleSet, load_rule_set
from rulekit.core.validator import MessageTemplate, Validator
from rulekit.predicates.registry import PredicateRegistry

logger = logging.getLogger(__name__)


def merge_rule_sets(*rule_sets: RuleSet) -> RuleSet:
    """
    Merge any number of rule sets, left to right.

    Later sets win on conflicting paths. The result's overridden_paths
    covers every override across the whole fold.
    """
    merged = RuleSet()
    for rule_set in rule_sets:
        merged.update(rule_set)

    if merged.overridden_paths:
        logger.info(
            f"Merged {len(rule_sets)} rule sets, overridden paths: "
            f"{[str(p) for p in merged.overridden_paths]}"
        )
    return merged


def merge_registries(*registries: PredicateRegistry) -> PredicateRegistry:
    """Union of registries. Later registries win on conflicting names."""
    merged = PredicateRegistry()
    for registry in registries:
        for name in registry.keys():
            if name in merged:
                logger.debug(f"Registry merge overrides predicate: {name}")
            merged.register(name, registry.lookup(name), override=True)
    return merged


def _as_rule_set(rules: RuleSet | Iterable[Mapping[str, Any] | RuleModel]) -> RuleSet:
    if isinstance(rules, RuleSet):
        return rules
    return RuleSet.from_config(rules)


def build_validator(
    rules: RuleSet | Iterable[Mapping[str, Any] | RuleModel],
    registry: PredicateRegistry,
    mode: ValidationMode | None = None,
    message_template: MessageTemplate | None = None,
    required_message: str | None = None,
    only_used: bool | None = None,
    settings: Settings | None = None,
) -> Validator:
    """
    Build a validator, filling unset options from Settings.

    Args:
        rules: RuleSet or wire-format rule data
        registry: Source of predicates
        mode: Failure handling mode
        message_template: Failure message template
        required_message: Missing-field message template
        only_used: Bind a subset registry holding only referenced predicates,
            leaving the caller's registry open for further registration
        settings: Settings to read defaults from

    Returns:
        Validator

    Raises:
        UnknownPredicateError: Listing every unresolved name
        InvalidRuleError: On malformed rule data or params
    """
    settings = settings or get_settings()
    rule_set = _as_rule_set(rules)

    if only_used is None:
        only_used = settings.only_used_predicates
    if only_used:
        # subset() reports every missing name at once, same as Validator
        registry = registry.subset(rule_set.predicate_names())

    return Validator(
        rule_set,
        registry,
        mode=mode if mode is not None else settings.mode,
        message_template=(
            message_template if message_template is not None else settings.message_template
        ),
        required_message=(
            required_message if required_message is not None else settings.required_message
        ),
    )


def validator_from_settings(
    registry: PredicateRegistry,
    settings: Settings | None = None,
    rules_file: Path | str | None = None,
) -> Validator:
    """
    Build a validator from the configured JSON rule file.

    Raises:
        ConfigurationError: If no rule file is configured
    """
    settings = settings or get_settings()
    path = rules_file or settings.rules_file
    if path is None:
        raise ConfigurationError("No rules file configured (set RULEKIT_RULES_FILE)")

    rule_set = load_rule_set(path)
    logger.info(f"Loaded {len(rule_set)} rules from {path}")
    return build_validator(rule_set, registry, settings=settings)
