"""
Filter Rules

Keys matching a filter rule are never sent for translation. Rules are plain
values passed to the pipeline; the default rule set excludes nothing.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from res_translator.logger import get_logger

logger = get_logger(__name__)


class FilterRuleType(Enum):
    EQUALS = "equals"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX = "regex"


@dataclass(frozen=True)
class FilterRule:
    """Predicate over a resource key."""
    rule_type: FilterRuleType
    value: str

    def matches(self, key: str) -> bool:
        if self.rule_type == FilterRuleType.EQUALS:
            return key == self.value
        if self.rule_type == FilterRuleType.STARTS_WITH:
            return key.startswith(self.value)
        if self.rule_type == FilterRuleType.ENDS_WITH:
            return key.endswith(self.value)
        return re.search(self.value, key) is not None

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.rule_type.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterRule":
        """
        Build a rule from its config form, e.g. {"type": "starts_with", "value": "app_"}.

        Raises:
            ValueError: If the type is unknown or the regex does not compile
        """
        rule_type = FilterRuleType(str(data.get("type", "")).lower())
        value = str(data.get("value", ""))
        if rule_type == FilterRuleType.REGEX:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid filter pattern {value!r}: {e}") from e
        return cls(rule_type, value)


DEFAULT_FILTER_RULES: List[FilterRule] = []


def in_filter_rules(key: str, rules: Iterable[FilterRule]) -> bool:
    """Check whether any rule matches key."""
    return any(rule.matches(key) for rule in rules)


def rules_from_config(raw_rules: Optional[List[Dict[str, Any]]]) -> List[FilterRule]:
    """
    Convert configured rules, skipping invalid ones.

    None means nothing is configured and yields the default rules.
    """
    if raw_rules is None:
        return list(DEFAULT_FILTER_RULES)

    rules = []
    for raw in raw_rules:
        try:
            rules.append(FilterRule.from_dict(raw))
        except (ValueError, AttributeError) as e:
            logger.warning(f"Skipping invalid filter rule {raw!r}: {e}")
    return rules
