"""Request-body rewriting for outbound generation calls.

Fail-open: whatever goes wrong while parsing, adapting or rewriting, the
caller gets a ``BodyOutcome`` carrying the original body.
"""

import json
import logging
from typing import Any

from tag_blocker.interception.endpoints import is_generation_endpoint
from tag_blocker.models import BodyOutcome, BodyStatus
from tag_blocker.payloads import extract_fields
from tag_blocker.rules.engine import RuleEngine

logger = logging.getLogger(__name__)


def serialize_body(body: Any) -> str:
    """Compact JSON, falling back to ASCII escapes when the text holds lone surrogates."""
    text = json.dumps(body, ensure_ascii=False, separators=(",", ":"))
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return json.dumps(body, ensure_ascii=True, separators=(",", ":"))
    return text


class RequestInterceptor:
    def __init__(self, engine: RuleEngine) -> None:
        self.engine = engine

    def rewrite_body(self, url: Any, body: Any) -> BodyOutcome:
        if not is_generation_endpoint(url):
            return BodyOutcome.passthrough(body, BodyStatus.SKIPPED, "destination not intercepted")
        if body is None:
            return BodyOutcome.passthrough(body, BodyStatus.SKIPPED, "no body")
        if not isinstance(body, str):
            logger.debug("Skipping %s body for %s", type(body).__name__, url)
            return BodyOutcome.passthrough(
                body, BodyStatus.SKIPPED, f"unsupported body type {type(body).__name__}"
            )

        try:
            return self._rewrite_text_body(body)
        except Exception as exc:
            logger.warning("Request rewrite failed for %s, sending original body", url, exc_info=True)
            return BodyOutcome.passthrough(body, BodyStatus.FAILED, str(exc))

    def _rewrite_text_body(self, body: str) -> BodyOutcome:
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return BodyOutcome.passthrough(body, BodyStatus.SKIPPED, "body is not JSON")
        if not isinstance(parsed, dict):
            return BodyOutcome.passthrough(body, BodyStatus.SKIPPED, "body is not a JSON object")

        fields = extract_fields(parsed)
        if not fields:
            return BodyOutcome.passthrough(body, BodyStatus.UNCHANGED, "no recognized text fields")

        changed = 0
        for field in fields:
            rewritten = self.engine.apply_all(field.text, field.depth, field.placement)
            if field.commit(rewritten):
                logger.debug("Rewrote %s", field.path)
                changed += 1

        if not changed:
            return BodyOutcome.passthrough(
                body, BodyStatus.UNCHANGED, "no rule matched", fields=len(fields)
            )
        return BodyOutcome(
            status=BodyStatus.REWRITTEN,
            body=serialize_body(parsed),
            detail=f"{changed} of {len(fields)} field(s) rewritten",
            fields=len(fields),
            changed=changed,
        )
