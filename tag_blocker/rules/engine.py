import logging
from typing import Optional

from tag_blocker.models import Placement, TagBlockerSettings
from tag_blocker.rules.matcher import rule_applies
from tag_blocker.rules.rewriter import rewrite

logger = logging.getLogger(__name__)


class RuleEngine:
    """Applies the ordered rule list of a settings handle to text fields.

    The settings object is read on every call, so edits made by its owner
    take effect on the next field without rebuilding the engine.
    """

    def __init__(self, settings: TagBlockerSettings) -> None:
        self.settings = settings

    def apply_all(
        self,
        text: str,
        depth: Optional[int] = None,
        placement: Placement = Placement.SYSTEM_PROMPT,
    ) -> str:
        rules = self.settings.rules
        if not rules:
            return text

        logger.debug("Processing text [depth=%s, placement=%s]", depth, placement.label)

        result = text
        for rule in rules:
            if not rule_applies(rule, result, depth, placement, self.settings.exclusions):
                continue
            processed = rewrite(rule, result)
            if processed != result:
                logger.debug("Rule %r applied", rule.script_name or rule.id)
                result = processed

        if result != text:
            logger.debug("Text was modified")
            return result
        return text
