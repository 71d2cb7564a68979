from rich.table import Column, Table
from rich.text import Text

from tag_blocker.constants import EXCLUSION_PREVIEW_LENGTH
from tag_blocker.models import BodyOutcome, ExclusionEntry, Rule, TagBlockerSettings
from tag_blocker.rules.describe import describe_rule
from tag_blocker.tui.enums import BODY_STATUS_STYLE, UIStyle
from tag_blocker.utils import truncate

ID_PREVIEW_LENGTH = 8


class RulesTable:
    @staticmethod
    def rules_table(rules: list[Rule]) -> Table:
        table = Table(
            Column(header="#", width=3, justify="right"),
            Column(header="Id", width=ID_PREVIEW_LENGTH),
            Column(header="Name", overflow="ellipsis", max_width=32),
            Column(header="Kind", width=5),
            Column(header="State", width=8),
            Column(header="Details", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for index, rule in enumerate(rules):
            state = (
                f"[{UIStyle.GREEN.value}]enabled[/{UIStyle.GREEN.value}]"
                if rule.enabled
                else f"[{UIStyle.DIM.value}]disabled[/{UIStyle.DIM.value}]"
            )
            table.add_row(
                str(index),
                rule.id[:ID_PREVIEW_LENGTH],
                Text(rule.script_name),
                "regex" if rule.is_regex else "tag",
                state,
                Text(describe_rule(rule)),
            )
        return table


class ExclusionsTable:
    @staticmethod
    def exclusions_table(entries: list[ExclusionEntry]) -> Table:
        table = Table(
            Column(header="Id", width=ID_PREVIEW_LENGTH),
            Column(header="Excluded", width=8),
            Column(header="Source", width=28),
            Column(header="Text", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for entry in entries:
            flag = (
                f"[{UIStyle.RED.value}]yes[/{UIStyle.RED.value}]"
                if entry.excluded
                else f"[{UIStyle.DIM.value}]no[/{UIStyle.DIM.value}]"
            )
            table.add_row(
                entry.id[:ID_PREVIEW_LENGTH],
                flag,
                Text(entry.source),
                Text(truncate(entry.text, EXCLUSION_PREVIEW_LENGTH)),
            )
        return table


class SettingsTable:
    @staticmethod
    def settings_table(settings: TagBlockerSettings) -> Table:
        excluded = sum(1 for entry in settings.exclusions if entry.excluded)
        table = Table(show_header=False, box=None)
        table.add_row("[bold]rules[/bold]", str(len(settings.rules)))
        table.add_row(
            "[bold]enabled rules[/bold]",
            str(sum(1 for rule in settings.rules if rule.enabled)),
        )
        table.add_row(
            "[bold]exclusions[/bold]", f"{excluded} excluded / {len(settings.exclusions)}"
        )
        table.add_row("[bold]auto refresh[/bold]", str(settings.auto_refresh).lower())
        table.add_row("[bold]debug mode[/bold]", str(settings.debug_mode).lower())
        return table


class RewriteTable:
    @staticmethod
    def outcome_table(url: str, outcome: BodyOutcome) -> Table:
        style = BODY_STATUS_STYLE.get(outcome.status, UIStyle.WHITE.value)
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Destination", Text(url))
        table.add_row("Status", f"[{style}]{outcome.status.value}[/{style}]")
        table.add_row("Fields", f"{outcome.changed} changed / {outcome.fields} found")
        if outcome.detail:
            table.add_row("Detail", Text(outcome.detail))
        return table

    @staticmethod
    def preview_table(before: str, after: str) -> Table:
        table = Table(
            Column(header="Before", overflow="fold", ratio=1),
            Column(header="After", overflow="fold", ratio=1),
            expand=True,
            header_style="bold",
        )
        table.add_row(Text(before), Text(after))
        return table
