from collections.abc import Iterable
from typing import Optional

from tag_blocker.models import ExclusionEntry, Placement, Rule


def within_depth(rule: Rule, depth: Optional[int]) -> bool:
    if depth is None:
        return True
    lower, upper = rule.depth_range
    if lower is not None and depth < lower:
        return False
    if upper is not None and depth > upper:
        return False
    return True


def is_excluded(text: str, exclusions: Iterable[ExclusionEntry]) -> bool:
    return any(entry.excluded and entry.text in text for entry in exclusions)


def rule_applies(
    rule: Rule,
    text: str,
    depth: Optional[int],
    placement: Placement,
    exclusions: Iterable[ExclusionEntry] = (),
) -> bool:
    """Decide whether ``rule`` should run on ``text``.

    An unknown depth (``None``) skips the depth bounds. Exclusions match by
    literal, case-sensitive containment.
    """
    if not rule.enabled:
        return False
    if placement not in rule.placement:
        return False
    if not within_depth(rule, depth):
        return False
    if is_excluded(text, exclusions):
        return False
    return True
