"""Rule management and the regex rule engine."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

import yaml
from budge_schemas import ClassifiedRecord, RuleDefinition

from .logging_setup import get_logger
from .workspace import rules_path

logger = get_logger("budge.rules")


def load_rules(path: Optional[Path] = None) -> list[RuleDefinition]:
    path = path or rules_path()
    if not path.exists():
        return []
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw:
        return []
    return [RuleDefinition.model_validate(item) for item in raw]


def save_rules(rules: Iterable[RuleDefinition], path: Optional[Path] = None) -> None:
    path = path or rules_path()
    serialisable = [rule.model_dump(mode="json") for rule in rules]
    path.write_text(yaml.safe_dump(serialisable, sort_keys=False), encoding="utf-8")


def _rule_exists(existing: Iterable[RuleDefinition], candidate: RuleDefinition) -> bool:
    for rule in existing:
        if rule.pattern == candidate.pattern and rule.category == candidate.category:
            return True
    return False


def add_rule(rule: RuleDefinition, path: Optional[Path] = None) -> bool:
    rules = load_rules(path)
    if _rule_exists(rules, rule):
        return False
    rules.append(rule)
    save_rules(rules, path)
    return True


def append_rule(rule: RuleDefinition, path: Optional[Path] = None) -> list[RuleDefinition]:
    add_rule(rule, path)
    return load_rules(path)


def match_rule(
    rules: Iterable[RuleDefinition], record: ClassifiedRecord
) -> RuleDefinition | None:
    description = record.record.description
    for rule in rules:
        if re.search(rule.pattern, description, flags=re.IGNORECASE):
            return rule
    return None


class RuleEngine:
    """Classify records with the first matching rule."""

    def __init__(self, rules: Sequence[RuleDefinition]) -> None:
        self._rules: tuple[RuleDefinition, ...] = tuple(rules)

    @classmethod
    def from_workspace(cls, path: Optional[Path] = None) -> RuleEngine:
        return cls(load_rules(path))

    @property
    def rules(self) -> tuple[RuleDefinition, ...]:
        return self._rules

    def classify(self, record: ClassifiedRecord) -> bool:
        """Apply the first matching rule to ``record`` in place.

        Returns ``False`` and leaves the record untouched when no rule
        matches.
        """
        rule = match_rule(self._rules, record)
        if rule is None:
            return False
        amount = record.record.amount
        record.category = rule.category
        record.description = rule.description or record.record.description
        record.amount = -amount if rule.negate_amount else amount
        record.is_classified = True
        logger.debug(
            "Rule %r classified record %s as %s",
            rule.name,
            record.key,
            rule.category.value,
        )
        return True


__all__ = [
    "RuleEngine",
    "add_rule",
    "append_rule",
    "load_rules",
    "match_rule",
    "save_rules",
]
