from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Optional

import click
from rich.console import Console

from tag_blocker.constants import EXPORT_FILENAME
from tag_blocker.conversation import filter_exclusions, load_conversation
from tag_blocker.errors import TagBlockerError
from tag_blocker.extension import TagBlockerExtension
from tag_blocker.log import configure_logging
from tag_blocker.models import (
    PLACEMENT_LABELS,
    ExclusionFilter,
    Placement,
    Rule,
    TagBlockerSettings,
)
from tag_blocker.repository import (
    SettingsRepository,
    add_rules,
    find_exclusion,
    find_rule,
    move_rule,
)
from tag_blocker.rules.engine import RuleEngine
from tag_blocker.rules.scripts import dump_scripts, load_scripts
from tag_blocker.rules.validation import validate_rule
from tag_blocker.tui import TagBlockerConsoleUI
from tag_blocker.utils import backup_file

PLACEMENT_VALUES = list(PLACEMENT_LABELS.values())
FILTER_VALUES = [item.value for item in ExclusionFilter]


def _repository(obj: dict[str, Any]) -> SettingsRepository:
    return SettingsRepository(obj.get("root"))


def _load(obj: dict[str, Any]) -> tuple[SettingsRepository, TagBlockerSettings]:
    repository = _repository(obj)
    try:
        settings = repository.load()
    except TagBlockerError as exc:
        raise click.ClickException(str(exc))
    configure_logging(debug=bool(obj.get("debug")) or settings.debug_mode)
    return repository, settings


def _resolve_rule(settings: TagBlockerSettings, ref: str) -> Rule:
    try:
        return find_rule(settings, ref)
    except TagBlockerError as exc:
        raise click.ClickException(str(exc))


def _rule_options(func: Callable) -> Callable:
    options = [
        click.option("--replace", "replacement", default="", help="Replacement text (empty removes the match)."),
        click.option("--name", "script_name", default=None, help="Display name."),
        click.option("--min-depth", type=click.IntRange(min=0), default=None),
        click.option("--max-depth", type=click.IntRange(min=0), default=None),
        click.option(
            "--placement",
            "placements",
            multiple=True,
            type=click.Choice(PLACEMENT_VALUES, case_sensitive=False),
            help="Where the rule applies; repeatable. Defaults to system.",
        ),
        click.option("--markdown-only", is_flag=True, default=False),
        click.option("--prompt-only/--no-prompt-only", default=True),
        click.option("--run-on-edit/--no-run-on-edit", default=True),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _edit_options(func: Callable) -> Callable:
    options = [
        click.option("--start-tag", default=None, help="New start tag (tag rules)."),
        click.option("--end-tag", default=None, help="New end tag (tag rules)."),
        click.option("--pattern", default=None, help="New /pattern/flags (regex rules)."),
        click.option("--replace", "replacement", default=None, help="New replacement text."),
        click.option("--name", "script_name", default=None, help="New display name."),
        click.option("--min-depth", type=click.IntRange(min=0), default=None),
        click.option("--max-depth", type=click.IntRange(min=0), default=None),
        click.option("--clear-depth", is_flag=True, default=False, help="Drop both depth bounds."),
        click.option(
            "--placement",
            "placements",
            multiple=True,
            type=click.Choice(PLACEMENT_VALUES, case_sensitive=False),
            help="Replace the placement set; repeatable.",
        ),
        click.option("--markdown-only/--no-markdown-only", default=None),
        click.option("--prompt-only/--no-prompt-only", default=None),
        click.option("--run-on-edit/--no-run-on-edit", default=None),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _edit_changes(
    rule: Rule,
    start_tag: Optional[str],
    end_tag: Optional[str],
    pattern: Optional[str],
    min_depth: Optional[int],
    max_depth: Optional[int],
    clear_depth: bool,
    placements: tuple[str, ...],
    **fields: Any,
) -> dict[str, Any]:
    if rule.is_regex and (start_tag is not None or end_tag is not None):
        raise click.ClickException("--start-tag/--end-tag only apply to tag rules")
    if not rule.is_regex and pattern is not None:
        raise click.ClickException("--pattern only applies to regex rules")

    changes = {key: value for key, value in fields.items() if value is not None}
    if start_tag is not None:
        changes["start_tag"] = start_tag
    if end_tag is not None:
        changes["end_tag"] = end_tag
    if pattern is not None:
        changes["regex_pattern"] = pattern
    if clear_depth:
        changes["min_depth"] = changes["max_depth"] = None
    if min_depth is not None:
        changes["min_depth"] = min_depth
    if max_depth is not None:
        changes["max_depth"] = max_depth
    if placements:
        changes["placement"] = {Placement.from_label(item) for item in placements}
    return changes


def _rule_kwargs(
    script_name: Optional[str],
    min_depth: Optional[int],
    max_depth: Optional[int],
    placements: tuple[str, ...],
    markdown_only: bool,
    prompt_only: bool,
    run_on_edit: bool,
) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "min_depth": min_depth,
        "max_depth": max_depth,
        "markdown_only": markdown_only,
        "prompt_only": prompt_only,
        "run_on_edit": run_on_edit,
    }
    if placements:
        kwargs["placement"] = {Placement.from_label(item) for item in placements}
    if script_name:
        kwargs["script_name"] = script_name
    return kwargs


def _save_new_rule(obj: dict[str, Any], rule: Rule) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    try:
        validate_rule(rule)
    except TagBlockerError as exc:
        raise click.ClickException(str(exc))
    add_rules(settings, [rule])
    repository.save(settings)
    ui.render_rule_saved(rule, verb="Added")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--debug", is_flag=True, default=False, help="Log rule activity to stderr.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Strip or replace content from prompts before they reach the model."""
    ctx.obj = {"debug": debug}


@cli.group(help="Manage redaction rules.")
def rules() -> None:
    pass


@rules.command("list", help="List rules in application order.")
@click.pass_obj
def rules_list(obj: dict[str, Any]) -> None:
    ui = TagBlockerConsoleUI(Console())
    _, settings = _load(obj)
    ui.render_rules(settings.rules)


@rules.command("add-tag", help="Add a rule removing everything between two tags.")
@click.argument("start_tag")
@click.argument("end_tag")
@_rule_options
@click.pass_obj
def rules_add_tag(
    obj: dict[str, Any], start_tag: str, end_tag: str, replacement: str, **options: Any
) -> None:
    _save_new_rule(obj, Rule.tag_pair(start_tag, end_tag, replacement, **_rule_kwargs(**options)))


@rules.command("add-regex", help="Add a rule replacing matches of a /pattern/flags regex.")
@click.argument("pattern")
@_rule_options
@click.pass_obj
def rules_add_regex(obj: dict[str, Any], pattern: str, replacement: str, **options: Any) -> None:
    _save_new_rule(obj, Rule.regex(pattern, replacement, **_rule_kwargs(**options)))


@rules.command("edit", help="Change a rule in place; omitted options keep their value.")
@click.argument("ref")
@_edit_options
@click.pass_obj
def rules_edit(obj: dict[str, Any], ref: str, **options: Any) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    rule = _resolve_rule(settings, ref)
    edited = replace(rule, **_edit_changes(rule, **options))
    try:
        validate_rule(edited)
    except TagBlockerError as exc:
        raise click.ClickException(str(exc))
    settings.rules[settings.rules.index(rule)] = edited
    repository.save(settings)
    ui.render_rule_saved(edited, verb="Updated")


@rules.command("remove", help="Remove a rule by id or id prefix.")
@click.argument("ref")
@click.pass_obj
def rules_remove(obj: dict[str, Any], ref: str) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    rule = _resolve_rule(settings, ref)
    settings.rules.remove(rule)
    repository.save(settings)
    ui.render_rule_removed(rule)


def _set_enabled(obj: dict[str, Any], ref: str, enabled: bool) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    rule = _resolve_rule(settings, ref)
    rule.enabled = enabled
    repository.save(settings)
    ui.render_rule_saved(rule, verb="Enabled" if enabled else "Disabled")


@rules.command("enable", help="Enable a rule.")
@click.argument("ref")
@click.pass_obj
def rules_enable(obj: dict[str, Any], ref: str) -> None:
    _set_enabled(obj, ref, True)


@rules.command("disable", help="Disable a rule.")
@click.argument("ref")
@click.pass_obj
def rules_disable(obj: dict[str, Any], ref: str) -> None:
    _set_enabled(obj, ref, False)


@rules.command("move", help="Move a rule to a new position (0 runs first).")
@click.argument("ref")
@click.argument("position", type=click.IntRange(min=0))
@click.pass_obj
def rules_move(obj: dict[str, Any], ref: str, position: int) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    move_rule(settings, _resolve_rule(settings, ref), position)
    repository.save(settings)
    ui.render_rules(settings.rules)


@rules.command("import", help="Import rules from a script file (object or array).")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def rules_import(obj: dict[str, Any], path: Path) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    try:
        imported = load_scripts(path)
    except TagBlockerError as exc:
        raise click.ClickException(str(exc))
    add_rules(settings, imported)
    repository.save(settings)
    ui.render_import_result(imported, str(path))


@rules.command("export", help="Export all rules as a script array.")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), default=EXPORT_FILENAME)
@click.pass_obj
def rules_export(obj: dict[str, Any], path: Path) -> None:
    ui = TagBlockerConsoleUI(Console())
    _, settings = _load(obj)
    if not settings.rules:
        raise click.ClickException("No rules to export")
    if path.exists():
        backup_file(path)
    dump_scripts(path, settings.rules)
    ui.render_export_result(len(settings.rules), str(path))


@cli.group(help="Manage messages that suppress rule application.")
def exclusions() -> None:
    pass


@exclusions.command("scan", help="Replace the exclusion list with the messages of a chat file.")
@click.argument("chat_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def exclusions_scan(obj: dict[str, Any], chat_file: Path) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    try:
        conversation = load_conversation(chat_file)
    except TagBlockerError as exc:
        raise click.ClickException(str(exc))
    count = TagBlockerExtension(repository, settings).rescan(conversation)
    ui.render_scan_result(count)


@exclusions.command("list", help="List exclusion entries.")
@click.option("--search", default="", help="Case-insensitive search over text and source.")
@click.option(
    "--filter",
    "state",
    type=click.Choice(FILTER_VALUES, case_sensitive=False),
    default=ExclusionFilter.ALL.value,
)
@click.pass_obj
def exclusions_list(obj: dict[str, Any], search: str, state: str) -> None:
    ui = TagBlockerConsoleUI(Console())
    _, settings = _load(obj)
    entries = filter_exclusions(settings.exclusions, search, ExclusionFilter(state.lower()))
    ui.render_exclusions(entries, total=len(settings.exclusions))


def _set_excluded(obj: dict[str, Any], refs: tuple[str, ...], select_all: bool, excluded: bool) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    if not settings.exclusions:
        raise click.ClickException("No entries, scan a conversation first")
    if not refs and not select_all:
        raise click.ClickException("Pass entry ids or --all")

    try:
        targets = settings.exclusions if select_all else [find_exclusion(settings, ref) for ref in refs]
    except TagBlockerError as exc:
        raise click.ClickException(str(exc))
    for entry in targets:
        entry.excluded = excluded
    repository.save(settings)
    ui.render_exclusions_updated(len(targets), excluded)


@exclusions.command("exclude", help="Mark entries as excluded.")
@click.argument("refs", nargs=-1)
@click.option("--all", "select_all", is_flag=True, default=False)
@click.pass_obj
def exclusions_exclude(obj: dict[str, Any], refs: tuple[str, ...], select_all: bool) -> None:
    _set_excluded(obj, refs, select_all, True)


@exclusions.command("include", help="Clear the excluded mark on entries.")
@click.argument("refs", nargs=-1)
@click.option("--all", "select_all", is_flag=True, default=False)
@click.pass_obj
def exclusions_include(obj: dict[str, Any], refs: tuple[str, ...], select_all: bool) -> None:
    _set_excluded(obj, refs, select_all, False)


@cli.group("settings", help="Show or change global switches.")
def settings_group() -> None:
    pass


@settings_group.command("show", help="Show current settings.")
@click.pass_obj
def settings_show(obj: dict[str, Any]) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    ui.render_settings(settings, str(repository.settings_path))


@settings_group.command("set", help="Change global switches.")
@click.option("--auto-refresh/--no-auto-refresh", default=None)
@click.option("--debug-mode/--no-debug-mode", default=None)
@click.pass_obj
def settings_set(obj: dict[str, Any], auto_refresh: Optional[bool], debug_mode: Optional[bool]) -> None:
    ui = TagBlockerConsoleUI(Console())
    repository, settings = _load(obj)
    if auto_refresh is not None:
        settings.auto_refresh = auto_refresh
    if debug_mode is not None:
        settings.debug_mode = debug_mode
    repository.save(settings)
    ui.render_settings(settings, str(repository.settings_path))


@cli.command(help="Show what the rules do to a piece of text.")
@click.argument("text")
@click.option("--depth", type=click.IntRange(min=0), default=None)
@click.option(
    "--placement",
    type=click.Choice(PLACEMENT_VALUES, case_sensitive=False),
    default=Placement.SYSTEM_PROMPT.label,
)
@click.pass_obj
def preview(obj: dict[str, Any], text: str, depth: Optional[int], placement: str) -> None:
    ui = TagBlockerConsoleUI(Console())
    _, settings = _load(obj)
    result = RuleEngine(settings).apply_all(text, depth, Placement.from_label(placement))
    ui.render_preview(text, result)


@cli.command(help="Rewrite a request body as it would be sent to URL.")
@click.argument("url")
@click.argument("body_file", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def rewrite(obj: dict[str, Any], url: str, body_file: Any) -> None:
    ui = TagBlockerConsoleUI(Console(stderr=True))
    repository, settings = _load(obj)
    body = body_file.read()
    outcome = TagBlockerExtension(repository, settings).interceptor.rewrite_body(url, body)
    ui.render_outcome(url, outcome)
    click.echo(outcome.body, nl=not str(outcome.body).endswith("\n"))


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
