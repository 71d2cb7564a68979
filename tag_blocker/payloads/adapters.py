from abc import ABC, abstractmethod
from typing import Any, Optional

from tag_blocker.models import Placement
from tag_blocker.payloads.models import TextField


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _text_parts(
    parts: list[Any], depth: Optional[int], placement: Placement, path: str
) -> list[TextField]:
    fields: list[TextField] = []
    for index, part in enumerate(parts):
        if not isinstance(part, dict) or part.get("type") != "text":
            continue
        if not _is_text(part.get("text")):
            continue
        fields.append(
            TextField(
                container=part,
                key="text",
                depth=depth,
                placement=placement,
                path=f"{path}[{index}].text",
            )
        )
    return fields


class IPayloadAdapter(ABC):
    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def extract(self, body: dict[str, Any]) -> list[TextField]:
        raise NotImplementedError


class TopLevelStringAdapter(IPayloadAdapter):
    def __init__(self, key: str, placement: Placement) -> None:
        self._key = key
        self._placement = placement

    @property
    def name(self) -> str:
        return self._key

    def extract(self, body: dict[str, Any]) -> list[TextField]:
        if not _is_text(body.get(self._key)):
            return []
        return [
            TextField(
                container=body,
                key=self._key,
                depth=None,
                placement=self._placement,
                path=self._key,
            )
        ]


class MessagesAdapter(IPayloadAdapter):
    """Chat-style ``messages`` arrays; depth is the message index."""

    @property
    def name(self) -> str:
        return "messages"

    def extract(self, body: dict[str, Any]) -> list[TextField]:
        messages = body.get("messages")
        if not isinstance(messages, list):
            return []

        fields: list[TextField] = []
        for index, message in enumerate(messages):
            if not isinstance(message, dict):
                continue
            content = message.get("content")
            placement = Placement.from_role(message.get("role"))
            path = f"messages[{index}].content"
            if _is_text(content):
                fields.append(
                    TextField(
                        container=message,
                        key="content",
                        depth=index,
                        placement=placement,
                        path=path,
                    )
                )
            elif isinstance(content, list):
                fields.extend(_text_parts(content, index, placement, path))
        return fields


class ContentAdapter(IPayloadAdapter):
    """Top-level ``content`` as a string or a list of typed parts."""

    @property
    def name(self) -> str:
        return "content"

    def extract(self, body: dict[str, Any]) -> list[TextField]:
        content = body.get("content")
        if _is_text(content):
            return [
                TextField(
                    container=body,
                    key="content",
                    depth=None,
                    placement=Placement.USER_INPUT,
                    path="content",
                )
            ]
        if isinstance(content, list):
            return _text_parts(content, None, Placement.USER_INPUT, "content")
        return []


DEFAULT_ADAPTERS: tuple[IPayloadAdapter, ...] = (
    # OpenAI completions
    TopLevelStringAdapter("prompt", Placement.SYSTEM_PROMPT),
    MessagesAdapter(),
    # KoboldAI / text-generation-webui
    TopLevelStringAdapter("text", Placement.SYSTEM_PROMPT),
    # NovelAI
    TopLevelStringAdapter("input", Placement.SYSTEM_PROMPT),
    ContentAdapter(),
)


def extract_fields(
    body: Any, adapters: tuple[IPayloadAdapter, ...] = DEFAULT_ADAPTERS
) -> list[TextField]:
    """Collect every recognized text field of ``body``.

    Adapters run independently; a body may match several of them. Anything
    that is not a JSON object yields no fields.
    """
    if not isinstance(body, dict):
        return []
    fields: list[TextField] = []
    for adapter in adapters:
        fields.extend(adapter.extract(body))
    return fields
