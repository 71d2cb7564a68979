import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

from tag_blocker.constants import REGEX_NAME_PREVIEW_LENGTH


class Placement(IntEnum):
    USER_INPUT = 0
    ASSISTANT_OUTPUT = 1
    SYSTEM_PROMPT = 2

    @property
    def label(self) -> str:
        return PLACEMENT_LABELS[self]

    @classmethod
    def from_role(cls, role: Any) -> "Placement":
        if role == "user":
            return cls.USER_INPUT
        if role == "assistant":
            return cls.ASSISTANT_OUTPUT
        return cls.SYSTEM_PROMPT

    @classmethod
    def from_label(cls, value: str) -> "Placement":
        normalized = value.strip().lower()
        for placement, label in PLACEMENT_LABELS.items():
            if label == normalized:
                return placement
        raise ValueError(f"Unknown placement: {value}")


PLACEMENT_LABELS: dict[Placement, str] = {
    Placement.USER_INPUT: "user",
    Placement.ASSISTANT_OUTPUT: "assistant",
    Placement.SYSTEM_PROMPT: "system",
}

DEFAULT_PLACEMENT: frozenset[Placement] = frozenset({Placement.SYSTEM_PROMPT})


class RuleMode(str, Enum):
    TAG_PAIR = "tag_pair"
    REGEX = "regex"


class SubstitutionStyle(IntEnum):
    REPLACE_MATCH = 0
    KEEP_MATCH = 1


class ExclusionFilter(str, Enum):
    ALL = "all"
    EXCLUDED = "excluded"
    INCLUDED = "included"


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Rule:
    """One redaction/substitution directive.

    Exactly one of the tag pair (``start_tag``/``end_tag``) or
    ``regex_pattern`` is meaningful, selected by ``mode``.
    ``markdown_only``, ``prompt_only``, ``run_on_edit`` and
    ``substitution_style`` are carried for round-trips only.
    """

    id: str
    mode: RuleMode
    start_tag: str = ""
    end_tag: str = ""
    regex_pattern: Optional[str] = None
    replacement: str = ""
    enabled: bool = True
    min_depth: Optional[int] = None
    max_depth: Optional[int] = None
    placement: set[Placement] = field(default_factory=lambda: set(DEFAULT_PLACEMENT))
    script_name: str = ""
    markdown_only: bool = False
    prompt_only: bool = True
    run_on_edit: bool = True
    substitution_style: SubstitutionStyle = SubstitutionStyle.REPLACE_MATCH

    @classmethod
    def tag_pair(
        cls, start_tag: str, end_tag: str, replacement: str = "", **kwargs: Any
    ) -> "Rule":
        kwargs.setdefault("id", new_id())
        kwargs.setdefault("script_name", f"Tag {start_tag}...{end_tag}")
        return cls(
            mode=RuleMode.TAG_PAIR,
            start_tag=start_tag,
            end_tag=end_tag,
            replacement=replacement,
            **kwargs,
        )

    @classmethod
    def regex(cls, pattern: str, replacement: str = "", **kwargs: Any) -> "Rule":
        suffix = "..." if len(pattern) > REGEX_NAME_PREVIEW_LENGTH else ""
        kwargs.setdefault("id", new_id())
        kwargs.setdefault(
            "script_name", f"Regex {pattern[:REGEX_NAME_PREVIEW_LENGTH]}{suffix}"
        )
        return cls(
            mode=RuleMode.REGEX,
            regex_pattern=pattern,
            replacement=replacement,
            **kwargs,
        )

    @property
    def is_regex(self) -> bool:
        return self.mode == RuleMode.REGEX

    @property
    def depth_range(self) -> tuple[Optional[int], Optional[int]]:
        return self.min_depth, self.max_depth


@dataclass
class ExclusionEntry:
    id: str
    text: str
    excluded: bool = False
    source: str = ""


@dataclass
class TagBlockerSettings:
    """Process-wide configuration handle shared by the engine and its owner."""

    rules: list[Rule] = field(default_factory=list)
    exclusions: list[ExclusionEntry] = field(default_factory=list)
    auto_refresh: bool = True
    debug_mode: bool = False
    # Stored tags that could not be turned into rules; written back untouched.
    unusable_tags: list[dict[str, Any]] = field(default_factory=list)


class BodyStatus(str, Enum):
    REWRITTEN = "rewritten"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class BodyOutcome:
    """Result of running the interception pipeline over one request body.

    ``body`` is always what should be sent: the rewritten body when
    ``status`` is ``REWRITTEN``, the caller's original body otherwise.
    """

    status: BodyStatus
    body: Any
    detail: str = ""
    fields: int = 0
    changed: int = 0

    @property
    def modified(self) -> bool:
        return self.status == BodyStatus.REWRITTEN

    @classmethod
    def passthrough(
        cls, body: Any, status: BodyStatus, detail: str, fields: int = 0
    ) -> "BodyOutcome":
        return cls(status=status, body=body, detail=detail, fields=fields)
