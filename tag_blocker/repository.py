import json
import logging
from pathlib import Path
from typing import Any, Optional

from tag_blocker.constants import APP_DIRNAME, SETTINGS_FILENAME
from tag_blocker.errors import (
    AmbiguousRuleError,
    ExclusionNotFoundError,
    InvalidJsonFormatError,
    InvalidRuleError,
    InvalidSettingsError,
    RuleNotFoundError,
)
from tag_blocker.models import (
    ExclusionEntry,
    Rule,
    RuleMode,
    TagBlockerSettings,
    new_id,
)
from tag_blocker.rules.scripts import parse_placement, parse_substitution_style
from tag_blocker.rules.validation import validate_rule
from tag_blocker.schema import first_schema_error
from tag_blocker.utils import read_json, write_json

logger = logging.getLogger(__name__)

SETTINGS_SCHEMA = "settings.schema.json"


def rule_from_stored(data: dict[str, Any]) -> Rule:
    """Decode a stored tag, filling in defaults for keys older versions lacked."""
    start_tag = data.get("startTag") or ""
    end_tag = data.get("endTag") or ""
    regex_pattern = data.get("regexPattern")
    mode = RuleMode.REGEX if regex_pattern else RuleMode.TAG_PAIR
    rule = Rule(
        id=data.get("id") or new_id(),
        mode=mode,
        start_tag="" if regex_pattern else start_tag,
        end_tag="" if regex_pattern else end_tag,
        regex_pattern=regex_pattern or None,
        replacement=data.get("replaceString") or "",
        enabled=bool(data.get("enabled", True)),
        min_depth=data.get("minDepth"),
        max_depth=data.get("maxDepth"),
        placement=parse_placement(data.get("placement")),
        script_name=data.get("scriptName") or f"Rule {start_tag}...{end_tag}",
        markdown_only=bool(data.get("markdownOnly", False)),
        prompt_only=bool(data.get("promptOnly", True)),
        run_on_edit=bool(data.get("runOnEdit", True)),
        substitution_style=parse_substitution_style(data.get("substituteRegex", 0)),
    )
    return validate_rule(rule)


def rule_to_stored(rule: Rule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "scriptName": rule.script_name,
        "startTag": rule.start_tag,
        "endTag": rule.end_tag,
        "regexPattern": rule.regex_pattern if rule.is_regex else None,
        "replaceString": rule.replacement,
        "enabled": rule.enabled,
        "minDepth": rule.min_depth,
        "maxDepth": rule.max_depth,
        "markdownOnly": rule.markdown_only,
        "promptOnly": rule.prompt_only,
        "runOnEdit": rule.run_on_edit,
        "placement": sorted(int(item) for item in rule.placement),
        "substituteRegex": int(rule.substitution_style),
    }


def exclusion_from_stored(data: dict[str, Any]) -> ExclusionEntry:
    return ExclusionEntry(
        id=data.get("id") or new_id(),
        text=data["text"],
        excluded=bool(data.get("excluded", False)),
        source=data.get("source") or "",
    )


def exclusion_to_stored(entry: ExclusionEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "text": entry.text,
        "excluded": entry.excluded,
        "source": entry.source,
    }


def settings_to_stored(settings: TagBlockerSettings) -> dict[str, Any]:
    return {
        "tags": [rule_to_stored(rule) for rule in settings.rules] + settings.unusable_tags,
        "excludedPrompts": [exclusion_to_stored(entry) for entry in settings.exclusions],
        "autoRefresh": settings.auto_refresh,
        "debugMode": settings.debug_mode,
    }


class SettingsRepository:
    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = root or (Path.home() / ".config" / APP_DIRNAME)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def settings_path(self) -> Path:
        return self.root / SETTINGS_FILENAME

    def load(self) -> TagBlockerSettings:
        if not self.settings_path.exists() or self.settings_path.stat().st_size == 0:
            return TagBlockerSettings()
        try:
            payload = read_json(self.settings_path)
        except json.JSONDecodeError as exc:
            raise InvalidJsonFormatError(self.settings_path, str(exc)) from exc

        if not isinstance(payload, dict):
            raise InvalidSettingsError(self.settings_path, "expected a JSON object")
        error = first_schema_error(SETTINGS_SCHEMA, payload)
        if error is not None:
            raise InvalidSettingsError(self.settings_path, error)

        rules, unusable = self._load_rules(payload.get("tags", []))
        return TagBlockerSettings(
            rules=rules,
            exclusions=[
                exclusion_from_stored(item)
                for item in payload.get("excludedPrompts", [])
            ],
            auto_refresh=payload.get("autoRefresh", True) is not False,
            debug_mode=payload.get("debugMode", False) is True,
            unusable_tags=unusable,
        )

    def _load_rules(
        self, items: list[dict[str, Any]]
    ) -> tuple[list[Rule], list[dict[str, Any]]]:
        rules: list[Rule] = []
        unusable: list[dict[str, Any]] = []
        for index, item in enumerate(items):
            try:
                rules.append(rule_from_stored(item))
            except InvalidRuleError as exc:
                logger.warning("Skipping stored tag %d in %s: %s", index, self.settings_path, exc)
                unusable.append(item)
        return rules, unusable

    def save(self, settings: TagBlockerSettings) -> None:
        write_json(self.settings_path, settings_to_stored(settings))


def find_rule(settings: TagBlockerSettings, ref: str) -> Rule:
    """Resolve ``ref`` as an exact rule id or a unique id prefix."""
    for rule in settings.rules:
        if rule.id == ref:
            return rule
    matches = [rule for rule in settings.rules if ref and rule.id.startswith(ref)]
    if not matches:
        raise RuleNotFoundError(ref)
    if len(matches) > 1:
        raise AmbiguousRuleError(ref, [rule.id for rule in matches])
    return matches[0]


def find_exclusion(settings: TagBlockerSettings, ref: str) -> ExclusionEntry:
    for entry in settings.exclusions:
        if entry.id == ref:
            return entry
    matches = [entry for entry in settings.exclusions if ref and entry.id.startswith(ref)]
    if len(matches) != 1:
        raise ExclusionNotFoundError(ref)
    return matches[0]


def add_rules(settings: TagBlockerSettings, rules: list[Rule]) -> list[Rule]:
    """Append ``rules`` in order, re-keying any whose id is already taken."""
    taken = {rule.id for rule in settings.rules}
    for rule in rules:
        if rule.id in taken:
            rule.id = new_id()
        taken.add(rule.id)
        settings.rules.append(rule)
    return rules


def move_rule(settings: TagBlockerSettings, rule: Rule, position: int) -> None:
    settings.rules.remove(rule)
    index = max(0, min(position, len(settings.rules)))
    settings.rules.insert(index, rule)
