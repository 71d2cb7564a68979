from tag_blocker.errors import InvalidRuleError
from tag_blocker.models import Rule, RuleMode


def validate_rule(rule: Rule) -> Rule:
    if rule.mode == RuleMode.TAG_PAIR:
        if not rule.start_tag or not rule.end_tag:
            raise InvalidRuleError("Start tag and end tag cannot be empty")
        if rule.regex_pattern:
            raise InvalidRuleError("A tag rule cannot also carry a regex pattern")
    elif rule.mode == RuleMode.REGEX:
        if not rule.regex_pattern:
            raise InvalidRuleError("Regex pattern cannot be empty")
        if rule.start_tag or rule.end_tag:
            raise InvalidRuleError("A regex rule cannot also carry start/end tags")
    else:
        raise InvalidRuleError(f"Unknown rule mode: {rule.mode}")

    if not rule.placement:
        raise InvalidRuleError("Rule must apply to at least one placement")
    for bound in (rule.min_depth, rule.max_depth):
        if bound is not None and bound < 0:
            raise InvalidRuleError("Depth bounds cannot be negative")
    return rule
