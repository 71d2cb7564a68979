"""Rule-based redaction of outbound language-model requests."""

from tag_blocker.models import (
    BodyOutcome,
    BodyStatus,
    ExclusionEntry,
    Placement,
    Rule,
    RuleMode,
    SubstitutionStyle,
    TagBlockerSettings,
)
from tag_blocker.rules import RuleEngine, rewrite, rule_applies

__all__ = [
    "BodyOutcome",
    "BodyStatus",
    "ExclusionEntry",
    "Placement",
    "Rule",
    "RuleEngine",
    "RuleMode",
    "SubstitutionStyle",
    "TagBlockerSettings",
    "rewrite",
    "rule_applies",
]

__version__ = "0.1.0"
