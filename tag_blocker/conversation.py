import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from tag_blocker.errors import InvalidConversationError
from tag_blocker.models import ExclusionEntry, ExclusionFilter, new_id


@dataclass(frozen=True)
class ChatMessage:
    text: str
    is_user: bool
    name: str = ""


@dataclass
class Conversation:
    messages: list[ChatMessage] = field(default_factory=list)

    def depth_of(self, text: str) -> Optional[int]:
        for index, message in enumerate(self.messages):
            if message.text == text:
                return index
        return None

    def __len__(self) -> int:
        return len(self.messages)


def message_from_payload(payload: dict[str, Any]) -> ChatMessage:
    text = payload.get("mes")
    if not isinstance(text, str):
        text = ""
    return ChatMessage(
        text=text,
        is_user=bool(payload.get("is_user", False)),
        name=str(payload.get("name") or ""),
    )


def _is_message(payload: Any) -> bool:
    return isinstance(payload, dict) and "mes" in payload


def load_conversation(path: Path) -> Conversation:
    """Read a chat log: JSON Lines (one message per line) or a JSON array.

    Lines without a ``mes`` key, such as the chat header, are skipped.
    """
    text = path.read_text(encoding="utf-8")
    stripped = text.lstrip()
    try:
        if stripped.startswith("["):
            items = json.loads(stripped)
        else:
            items = [json.loads(line) for line in text.splitlines() if line.strip()]
    except json.JSONDecodeError as exc:
        raise InvalidConversationError(path, str(exc)) from exc

    if not isinstance(items, list):
        raise InvalidConversationError(path, "expected a list of messages")
    return Conversation(
        messages=[message_from_payload(item) for item in items if _is_message(item)]
    )


def describe_source(message: ChatMessage, depth: int) -> str:
    kind = "User message" if message.is_user else "Character reply"
    return f"{kind} (depth {depth})"


def scan_exclusions(conversation: Conversation) -> list[ExclusionEntry]:
    """Build a fresh exclusion list with one entry per non-empty message."""
    return [
        ExclusionEntry(
            id=new_id(),
            text=message.text,
            excluded=False,
            source=describe_source(message, depth),
        )
        for depth, message in enumerate(conversation.messages)
        if message.text
    ]


def filter_exclusions(
    entries: Iterable[ExclusionEntry],
    search: str = "",
    state: ExclusionFilter = ExclusionFilter.ALL,
) -> list[ExclusionEntry]:
    needle = search.lower()
    result: list[ExclusionEntry] = []
    for entry in entries:
        if needle and needle not in entry.text.lower() and needle not in entry.source.lower():
            continue
        if state == ExclusionFilter.EXCLUDED and not entry.excluded:
            continue
        if state == ExclusionFilter.INCLUDED and entry.excluded:
            continue
        result.append(entry)
    return result
