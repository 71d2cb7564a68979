from tag_blocker.rules.engine import RuleEngine
from tag_blocker.rules.matcher import rule_applies
from tag_blocker.rules.rewriter import rewrite
from tag_blocker.rules.validation import validate_rule

__all__ = [
    "RuleEngine",
    "rewrite",
    "rule_applies",
    "validate_rule",
]
