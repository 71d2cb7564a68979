import json

import pytest

from tag_blocker.interception import RequestInterceptor, is_generation_endpoint, serialize_body
from tag_blocker.models import BodyStatus, Placement, Rule, TagBlockerSettings
from tag_blocker.rules.engine import RuleEngine

CHAT_URL = "https://api.example.com/v1/chat/completions"


def _interceptor(*rules: Rule) -> RequestInterceptor:
    return RequestInterceptor(RuleEngine(TagBlockerSettings(rules=list(rules))))


@pytest.mark.parametrize(
    "url",
    [
        "https://api.openai.com/v1/chat/completions",
        "https://api.anthropic.com/v1/messages",
        "https://generativelanguage.googleapis.com/v1beta/models/gemini:generate",
        "http://127.0.0.1:5000/api/v1/generate",
        "http://localhost:5001/chat",
        "http://localhost:8080/completion",
    ],
)
def test_generation_endpoints_are_recognized(url: str) -> None:
    assert is_generation_endpoint(url)


@pytest.mark.parametrize(
    "url",
    ["https://example.com/api/settings", "http://localhost:8000/api/characters/all", "/static/app.js"],
)
def test_other_destinations_are_not_intercepted(url: str) -> None:
    assert not is_generation_endpoint(url)


def test_rewrites_prompt_field() -> None:
    interceptor = _interceptor(Rule.tag_pair("<a>", "</a>"))
    body = json.dumps({"prompt": "x<a>secret</a>y", "max_tokens": 5})

    outcome = interceptor.rewrite_body("https://host/v1/completions", body)

    assert outcome.status == BodyStatus.REWRITTEN
    assert outcome.modified
    assert json.loads(outcome.body) == {"prompt": "xy", "max_tokens": 5}
    assert (outcome.fields, outcome.changed) == (1, 1)


def test_rewrites_only_matching_placements() -> None:
    interceptor = _interceptor(
        Rule.tag_pair("<a>", "</a>", placement={Placement.USER_INPUT})
    )
    body = json.dumps(
        {
            "messages": [
                {"role": "system", "content": "<a>sys</a>"},
                {"role": "user", "content": "<a>usr</a>hi"},
            ]
        }
    )

    outcome = interceptor.rewrite_body(CHAT_URL, body)
    messages = json.loads(outcome.body)["messages"]

    assert messages[0]["content"] == "<a>sys</a>"
    assert messages[1]["content"] == "hi"
    assert outcome.detail == "1 of 2 field(s) rewritten"


def test_rewritten_body_is_compact_and_keeps_unicode() -> None:
    assert serialize_body({"a": "é", "b": [1]}) == '{"a":"é","b":[1]}'


def test_non_generation_destination_is_skipped() -> None:
    body = json.dumps({"prompt": "<a>x</a>"})
    outcome = _interceptor(Rule.tag_pair("<a>", "</a>")).rewrite_body(
        "https://example.com/api/settings", body
    )

    assert outcome.status == BodyStatus.SKIPPED
    assert outcome.body is body


@pytest.mark.parametrize("body", [None, b'{"prompt": "x"}', "not json", "[1, 2]"])
def test_unusable_bodies_are_skipped(body) -> None:
    outcome = _interceptor(Rule.tag_pair("<a>", "</a>")).rewrite_body(CHAT_URL, body)

    assert outcome.status == BodyStatus.SKIPPED
    assert outcome.body is body
    assert not outcome.modified


def test_unknown_shape_keeps_original_string() -> None:
    body = '{"unknown":  "field"}'
    outcome = _interceptor(Rule.tag_pair("<a>", "</a>")).rewrite_body(CHAT_URL, body)

    assert outcome.status == BodyStatus.UNCHANGED
    assert outcome.body is body


def test_no_matching_rule_keeps_original_string() -> None:
    body = '{"prompt": "plain text",  "stream": true}'
    outcome = _interceptor(Rule.tag_pair("<a>", "</a>")).rewrite_body(CHAT_URL, body)

    assert outcome.status == BodyStatus.UNCHANGED
    assert outcome.body is body
    assert outcome.fields == 1


def test_failure_returns_original_body(monkeypatch, caplog) -> None:
    interceptor = _interceptor(Rule.tag_pair("<a>", "</a>"))

    def _boom(*args, **kwargs):
        raise RuntimeError("engine exploded")

    monkeypatch.setattr(interceptor.engine, "apply_all", _boom)
    body = json.dumps({"prompt": "<a>x</a>"})

    outcome = interceptor.rewrite_body(CHAT_URL, body)

    assert outcome.status == BodyStatus.FAILED
    assert outcome.body is body
    assert "engine exploded" in outcome.detail
    assert "sending original body" in caplog.text


def test_lone_surrogate_stays_escaped_after_rewrite() -> None:
    body = '{"prompt": "x\\ud83d<a>secret</a>y"}'

    outcome = _interceptor(Rule.tag_pair("<a>", "</a>")).rewrite_body(
        "https://host/v1/completions", body
    )

    assert outcome.status == BodyStatus.REWRITTEN
    assert outcome.body == '{"prompt":"x\\ud83dy"}'
    assert outcome.body.encode("utf-8")
    assert json.loads(outcome.body)["prompt"] == "x\ud83dy"


def test_serialize_body_escapes_only_when_needed() -> None:
    assert serialize_body({"a": "\ud83d"}) == '{"a":"\\ud83d"}'
    assert serialize_body({"a": "😀"}) == '{"a":"😀"}'
