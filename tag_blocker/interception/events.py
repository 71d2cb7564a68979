from typing import Any, Optional

from tag_blocker.constants import ORIGINAL_PROMPT_KEY
from tag_blocker.conversation import Conversation
from tag_blocker.models import Placement
from tag_blocker.rules.engine import RuleEngine


def intercept_generation_queued(
    payload: dict[str, Any],
    engine: RuleEngine,
    conversation: Optional[Conversation] = None,
) -> dict[str, Any]:
    """Rewrite the prompt of a "generation queued" host event in place.

    The untouched prompt is kept under ``_originalPrompt`` for debugging.
    """
    prompt = payload.get("prompt")
    if not isinstance(prompt, str) or not prompt:
        return payload

    depth = conversation.depth_of(prompt) if conversation is not None else None
    payload[ORIGINAL_PROMPT_KEY] = prompt
    payload["prompt"] = engine.apply_all(prompt, depth, Placement.SYSTEM_PROMPT)
    return payload
