"""Tests for tag-pair and regex rewriting."""

import logging

import pytest

from tag_blocker.models import Rule, RuleMode
from tag_blocker.rules.rewriter import (
    compile_regex_literal,
    parse_flags,
    parse_regex_literal,
    rewrite,
    translate_pattern,
)


def _regex(pattern: str, replacement: str = "") -> Rule:
    return Rule.regex(pattern, replacement, id="regex-rule")


def test_tag_pair_removes_enclosed_content() -> None:
    rule = Rule.tag_pair("<a>", "</a>", id="tag-rule")
    assert rewrite(rule, "x<a>secret</a>y") == "xy"


def test_tag_pair_is_non_greedy_and_global() -> None:
    rule = Rule.tag_pair("<a>", "</a>", id="tag-rule")
    assert rewrite(rule, "<a>1</a>keep<a>2</a>") == "keep"


def test_tag_pair_spans_newlines() -> None:
    rule = Rule.tag_pair("<think>", "</think>", id="tag-rule")
    assert rewrite(rule, "<think>line one\nline two</think>answer") == "answer"


def test_tag_pair_escapes_metacharacters() -> None:
    rule = Rule.tag_pair("[[", "]]", id="tag-rule")
    assert rewrite(rule, "a[[b.*c]]d") == "ad"


def test_tag_pair_replacement_can_reference_content() -> None:
    rule = Rule.tag_pair("<a>", "</a>", "[$1]", id="tag-rule")
    assert rewrite(rule, "<a>hi</a>!") == "[hi]!"


def test_tag_pair_with_empty_tag_is_noop() -> None:
    rule = Rule(id="tag-rule", mode=RuleMode.TAG_PAIR, start_tag="<a>", end_tag="")
    assert rewrite(rule, "<a>text") == "<a>text"


def test_regex_case_insensitive_with_group_reference() -> None:
    assert rewrite(_regex("/foo(bar)/gi", "baz$1"), "FOOBAR end") == "bazBAR end"


def test_regex_without_global_flag_replaces_first_match() -> None:
    assert rewrite(_regex("/a/", "b"), "aaa") == "baa"
    assert rewrite(_regex("/a/g", "b"), "aaa") == "bbb"


def test_regex_multiline_and_dotall_flags() -> None:
    assert rewrite(_regex("/^x/gm", "y"), "x\nx") == "y\ny"
    assert rewrite(_regex("/a.b/s"), "a\nb!") == "!"


def test_regex_ignored_flags_are_accepted() -> None:
    assert rewrite(_regex("/a/gu", "b"), "aa") == "bb"


@pytest.mark.parametrize("pattern", ["/(/", "/a/gx", "/a/gg", "/a/y"])
def test_malformed_regex_leaves_text_unchanged(pattern: str) -> None:
    assert rewrite(_regex(pattern, "z"), "a(a") == "a(a"


def test_malformed_regex_is_reported_once(caplog) -> None:
    rule = _regex("/[unclosed-report-once/g")
    with caplog.at_level(logging.WARNING, logger="tag_blocker"):
        rewrite(rule, "text")
        rewrite(rule, "text")

    records = [r for r in caplog.records if "Ignoring malformed regex pattern" in r.getMessage()]
    assert len(records) == 1


def test_empty_regex_pattern_is_noop() -> None:
    rule = Rule(id="regex-rule", mode=RuleMode.REGEX, regex_pattern="")
    assert rewrite(rule, "abc") == "abc"


def test_parse_regex_literal() -> None:
    assert parse_regex_literal("/a/b/gi") == ("a/b", "gi")
    assert parse_regex_literal("/abc") == ("abc", "")
    assert parse_regex_literal("abc") == ("abc", "")
    assert parse_regex_literal("a/b/g") == ("a/b/g", "")


def test_undelimited_pattern_is_used_whole() -> None:
    assert rewrite(_regex("b+", "-"), "abbba") == "a-a"


def test_parse_flags() -> None:
    bits, replace_all = parse_flags("gi")
    assert replace_all is True
    assert bits != 0
    with pytest.raises(ValueError):
        parse_flags("q")


def test_compiled_patterns_are_cached() -> None:
    assert compile_regex_literal("/cached/g") is compile_regex_literal("/cached/g")


def test_replacement_special_tokens() -> None:
    assert rewrite(_regex(r"/\d+/g", "<$&>"), "a1b22") == "a<1>b<22>"
    assert rewrite(_regex("/x/", "$$"), "x") == "$"
    assert rewrite(_regex("/b/", "[$`|$']"), "abc") == "a[a|c]c"


def test_replacement_numbered_references() -> None:
    assert rewrite(_regex("/(a)/", "$2"), "a") == "$2"
    assert rewrite(_regex("/(a)/", "$10"), "a") == "a0"
    assert rewrite(_regex("/(a)|(b)/g", "[$2]"), "ab") == "[][b]"


def test_named_groups_and_backreferences() -> None:
    assert rewrite(_regex(r"/(?<word>\w+)@/", "$<word>!"), "me@") == "me!"
    assert rewrite(_regex(r"""/(?<q>['"]).*?\k<q>/g"""), 'say "hi" now') == "say  now"


def test_named_reference_without_named_groups_stays_literal() -> None:
    assert rewrite(_regex("/(a)/", "$<x>"), "a") == "$<x>"


def test_translate_pattern_counts_preceding_backslashes() -> None:
    assert translate_pattern(r"(?<n>x)") == r"(?P<n>x)"
    assert translate_pattern(r"\\(?<n>x)") == r"\\(?P<n>x)"
    assert translate_pattern(r"\(?<n>x\)") == r"\(?<n>x\)"
    assert translate_pattern(r"(?<q>a)\k<q>") == r"(?P<q>a)(?P=q)"
    assert translate_pattern(r"\\k<q>") == r"\\k<q>"
    assert translate_pattern(r"look<n>") == r"look<n>"


def test_named_group_after_escaped_backslash() -> None:
    assert rewrite(_regex(r"/\\(?<n>x)/", "[$<n>]"), "a\\xb") == "a[x]b"
