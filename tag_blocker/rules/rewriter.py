"""Tag-pair and regex text rewriting.

Patterns are written in the JavaScript literal style used by rule scripts
(``/body/flags``) and replacements use ``$``-references (``$1``, ``$&``,
``$<name>``). Both are translated onto :mod:`re` here; a pattern that cannot
be compiled turns its rule into a no-op instead of raising.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache

from tag_blocker.models import Rule, RuleMode

logger = logging.getLogger(__name__)

_FLAG_BITS: dict[str, int] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}
_GLOBAL_FLAG = "g"
_IGNORED_FLAGS = frozenset("duv")

_NAMED_SYNTAX_RE = re.compile(r"(\\*)(?:\(\?<([A-Za-z_]\w*)>|k<([A-Za-z_]\w*)>)")
_REPLACEMENT_TOKEN_RE = re.compile(r"\$(?:(\$)|(&)|(`)|(')|(\d{1,2})|<([^>]*)>)")

_reported_patterns: set[str] = set()


@dataclass(frozen=True)
class CompiledPattern:
    pattern: re.Pattern[str]
    replace_all: bool

    @property
    def count(self) -> int:
        return 0 if self.replace_all else 1


def parse_regex_literal(raw: str) -> tuple[str, str]:
    """Split ``/body/flags`` into body and flags.

    Strings without a closing delimiter are taken whole as the body, minus
    one leading ``/``.
    """
    if raw.startswith("/"):
        last_slash = raw.rfind("/")
        if last_slash > 0:
            return raw[1:last_slash], raw[last_slash + 1 :]
        return raw[1:], ""
    return raw, ""


def translate_pattern(body: str) -> str:
    """Rewrite ``(?<name>`` and ``\\k<name>`` into :mod:`re` syntax.

    A construct counts only when preceded by an even run of backslashes
    (odd for ``\\k``, whose own backslash is part of the run).
    """

    def _translate(token: re.Match[str]) -> str:
        backslashes, group_name, backref_name = token.groups()
        escaped = len(backslashes) % 2 == 1
        if group_name is not None:
            if escaped:
                return token.group(0)
            return f"{backslashes}(?P<{group_name}>"
        if not escaped:
            return token.group(0)
        return f"{backslashes[:-1]}(?P={backref_name})"

    return _NAMED_SYNTAX_RE.sub(_translate, body)


def parse_flags(flags: str) -> tuple[int, bool]:
    if len(set(flags)) != len(flags):
        raise ValueError(f"duplicate flag in '{flags}'")
    bits = 0
    replace_all = False
    for flag in flags:
        if flag == _GLOBAL_FLAG:
            replace_all = True
        elif flag in _FLAG_BITS:
            bits |= _FLAG_BITS[flag]
        elif flag not in _IGNORED_FLAGS:
            raise ValueError(f"unsupported flag '{flag}'")
    return bits, replace_all


@lru_cache(maxsize=256)
def compile_regex_literal(raw: str) -> CompiledPattern:
    body, flags = parse_regex_literal(raw)
    bits, replace_all = parse_flags(flags)
    return CompiledPattern(
        pattern=re.compile(translate_pattern(body), bits), replace_all=replace_all
    )


@lru_cache(maxsize=256)
def compile_tag_pair(start_tag: str, end_tag: str) -> CompiledPattern:
    pattern = re.compile(f"{re.escape(start_tag)}(.*?){re.escape(end_tag)}", re.DOTALL)
    return CompiledPattern(pattern=pattern, replace_all=True)


def expand_replacement(template: str, match: re.Match[str]) -> str:
    """Expand ``$``-references in ``template`` against ``match``.

    Unknown numbered references stay literal; references to groups that did
    not participate in the match expand to an empty string.
    """
    if "$" not in template:
        return template

    group_count = match.re.groups
    named_groups = match.re.groupindex

    def _group(index: int) -> str:
        return match.group(index) or ""

    def _expand(token: re.Match[str]) -> str:
        dollar, whole, before, after, digits, name = token.groups()
        if dollar:
            return "$"
        if whole:
            return match.group(0)
        if before:
            return match.string[: match.start()]
        if after:
            return match.string[match.end() :]
        if digits:
            number = int(digits)
            if 1 <= number <= group_count:
                return _group(number)
            if len(digits) == 2:
                first = int(digits[0])
                if 1 <= first <= group_count:
                    return _group(first) + digits[1]
            return token.group(0)
        if not named_groups:
            return token.group(0)
        if name in named_groups:
            return match.group(name) or ""
        return ""

    return _REPLACEMENT_TOKEN_RE.sub(_expand, template)


def _substitute(compiled: CompiledPattern, replacement: str, text: str) -> str:
    return compiled.pattern.sub(
        lambda match: expand_replacement(replacement, match),
        text,
        count=compiled.count,
    )


def _report_malformed(raw: str, exc: Exception) -> None:
    if raw in _reported_patterns:
        return
    _reported_patterns.add(raw)
    logger.warning("Ignoring malformed regex pattern %r: %s", raw, exc)


def rewrite(rule: Rule, text: str) -> str:
    """Return ``text`` with every match of ``rule`` replaced.

    Never raises and never returns a partially rewritten value: a malformed
    pattern leaves the text as it was.
    """
    if rule.mode == RuleMode.TAG_PAIR:
        if not rule.start_tag or not rule.end_tag:
            return text
        return _substitute(
            compile_tag_pair(rule.start_tag, rule.end_tag), rule.replacement, text
        )

    raw = rule.regex_pattern or ""
    if not raw:
        return text
    try:
        compiled = compile_regex_literal(raw)
    except (re.error, ValueError) as exc:
        _report_malformed(raw, exc)
        return text
    return _substitute(compiled, rule.replacement, text)
