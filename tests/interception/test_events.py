from tag_blocker.conversation import ChatMessage, Conversation
from tag_blocker.interception import intercept_generation_queued
from tag_blocker.models import Rule, TagBlockerSettings
from tag_blocker.rules.engine import RuleEngine


def _engine(**kwargs) -> RuleEngine:
    return RuleEngine(TagBlockerSettings(rules=[Rule.tag_pair("<a>", "</a>", **kwargs)]))


def test_prompt_is_rewritten_and_original_kept() -> None:
    payload = {"prompt": "x<a>y</a>z", "type": "normal"}

    result = intercept_generation_queued(payload, _engine())

    assert result is payload
    assert payload["prompt"] == "xz"
    assert payload["_originalPrompt"] == "x<a>y</a>z"
    assert payload["type"] == "normal"


def test_missing_or_empty_prompt_is_untouched() -> None:
    for payload in ({}, {"prompt": ""}, {"prompt": ["list"]}):
        before = dict(payload)
        assert intercept_generation_queued(payload, _engine()) == before


def test_depth_comes_from_conversation() -> None:
    conversation = Conversation(
        messages=[
            ChatMessage(text="first", is_user=True),
            ChatMessage(text="<a>deep</a>", is_user=False),
        ]
    )
    payload = {"prompt": "<a>deep</a>"}

    intercept_generation_queued(payload, _engine(max_depth=0), conversation)

    assert payload["prompt"] == "<a>deep</a>"
