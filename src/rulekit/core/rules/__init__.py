"""Rules - Field to predicate bindings and rule set composition."""

from rulekit.core.rules.loader import load_rule_set
from rulekit.core.rules.rules import PredicateSpec, Rule, RuleSet, merge

__all__ = ["PredicateSpec", "Rule", "RuleSet", "load_rule_set", "merge"]
