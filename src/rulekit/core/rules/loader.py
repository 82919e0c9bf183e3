"""Load rule sets from JSON configuration files."""

import json
import logging
from pathlib import Path

from rulekit.core.errors import InvalidRuleError
from rulekit.core.rules.rules import RuleSet

logger = logging.getLogger(__name__)


def load_rule_set(path: Path | str) -> RuleSet:
    """
    Load a RuleSet from a JSON file.

    The file holds a list of rules, or an object with a "rules" list:

        [{"field": "age", "predicates": [{"name": "isNumber"}]}]

    Args:
        path: JSON file path

    Returns:
        RuleSet in file order

    Raises:
        InvalidRuleError: If the file is not valid JSON or not a rule list
        OSError: If the file cannot be read
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidRuleError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        if "rules" not in data:
            raise InvalidRuleError(f"{path} has no 'rules' key")
        data = data["rules"]

    if not isinstance(data, list):
        raise InvalidRuleError(
            f"{path} must contain a list of rules, got: {type(data).__name__}"
        )

    rule_set = RuleSet.from_config(data)
    logger.debug(f"Loaded {len(rule_set)} rules from {path}")
    return rule_set
