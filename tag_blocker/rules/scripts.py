"""Import and export of rules in the shared regex-script JSON format."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tag_blocker.errors import InvalidJsonFormatError, InvalidRuleError, InvalidScriptError
from tag_blocker.models import (
    DEFAULT_PLACEMENT,
    Placement,
    Rule,
    RuleMode,
    SubstitutionStyle,
    new_id,
)
from tag_blocker.rules.validation import validate_rule
from tag_blocker.schema import first_schema_error
from tag_blocker.utils import read_json, write_json

SCRIPT_SCHEMA = "script.schema.json"
IMPORTED_SCRIPT_NAME = "Imported script"


def parse_placement(value: Any) -> set[Placement]:
    if not isinstance(value, list):
        return set(DEFAULT_PLACEMENT)
    placement: set[Placement] = set()
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int):
            continue
        try:
            placement.add(Placement(item))
        except ValueError:
            continue
    return placement or set(DEFAULT_PLACEMENT)


def parse_substitution_style(value: Any) -> SubstitutionStyle:
    try:
        return SubstitutionStyle(int(value))
    except (TypeError, ValueError):
        return SubstitutionStyle.REPLACE_MATCH


def _optional_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def rule_from_script(data: dict[str, Any]) -> Rule:
    """Build a rule from a script object.

    A truthy ``findRegex`` selects regex mode; otherwise both ``startTag`` and
    ``endTag`` must be non-empty.
    """
    find_regex = data.get("findRegex")
    start_tag = data.get("startTag") or ""
    end_tag = data.get("endTag") or ""
    if find_regex:
        mode = RuleMode.REGEX
        start_tag = end_tag = ""
    elif start_tag and end_tag:
        mode = RuleMode.TAG_PAIR
        find_regex = None
    else:
        raise InvalidRuleError("Script needs findRegex or both startTag and endTag")

    rule = Rule(
        id=data.get("id") or new_id(),
        mode=mode,
        start_tag=start_tag,
        end_tag=end_tag,
        regex_pattern=find_regex,
        replacement=data.get("replaceString") or "",
        enabled=not data.get("disabled", False),
        min_depth=_optional_int(data.get("minDepth")),
        max_depth=_optional_int(data.get("maxDepth")),
        placement=parse_placement(data.get("placement")),
        script_name=data.get("scriptName") or IMPORTED_SCRIPT_NAME,
        markdown_only=bool(data.get("markdownOnly", False)),
        prompt_only=bool(data.get("promptOnly", True)),
        run_on_edit=bool(data.get("runOnEdit", True)),
        substitution_style=parse_substitution_style(data.get("substituteRegex", 0)),
    )
    return validate_rule(rule)


def rule_to_script(rule: Rule) -> dict[str, Any]:
    script: dict[str, Any] = {
        "id": rule.id,
        "scriptName": rule.script_name,
        "findRegex": rule.regex_pattern if rule.is_regex else None,
        "replaceString": rule.replacement,
        "trimStrings": [],
        "placement": sorted(int(item) for item in rule.placement),
        "disabled": not rule.enabled,
        "markdownOnly": rule.markdown_only,
        "promptOnly": rule.prompt_only,
        "runOnEdit": rule.run_on_edit,
        "substituteRegex": int(rule.substitution_style),
        "minDepth": rule.min_depth,
        "maxDepth": rule.max_depth,
    }
    if not rule.is_regex:
        script["startTag"] = rule.start_tag
        script["endTag"] = rule.end_tag
    return script


def parse_scripts(payload: Any, path: Path) -> list[Rule]:
    items = payload if isinstance(payload, list) else [payload]
    rules: list[Rule] = []
    for index, item in enumerate(items):
        error = first_schema_error(SCRIPT_SCHEMA, item)
        if error is not None:
            raise InvalidScriptError(path, f"item {index}: {error}")
        try:
            rules.append(rule_from_script(item))
        except InvalidRuleError as exc:
            raise InvalidScriptError(path, f"item {index}: {exc}") from exc
    return rules


def load_scripts(path: Path) -> list[Rule]:
    try:
        payload = read_json(path)
    except json.JSONDecodeError as exc:
        raise InvalidJsonFormatError(path, str(exc)) from exc
    return parse_scripts(payload, path)


def dump_scripts(path: Path, rules: list[Rule]) -> None:
    write_json(path, [rule_to_script(rule) for rule in rules])
