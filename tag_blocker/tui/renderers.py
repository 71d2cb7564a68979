from rich.console import Console
from rich.text import Text

from tag_blocker.models import BodyOutcome, ExclusionEntry, Rule, TagBlockerSettings
from tag_blocker.tui.enums import BODY_STATUS_STYLE, UIStyle
from tag_blocker.tui.sections import UISection
from tag_blocker.tui.tables import ExclusionsTable, RewriteTable, RulesTable, SettingsTable
from tag_blocker.utils import compact_home_path


class TagBlockerConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_rules(self, rules: list[Rule]) -> None:
        if not rules:
            self.console.print(
                UISection.note("rules", "No rules configured.", style=UIStyle.DIM.value)
            )
            return
        self.console.print(
            UISection.wrap("rules", RulesTable.rules_table(rules), style=UIStyle.CYAN.value)
        )

    def render_rule_saved(self, rule: Rule, verb: str = "Saved") -> None:
        self.console.print(
            UISection.note(
                "rule",
                Text(f"{verb} {rule.script_name} ({rule.id})"),
                style=UIStyle.GREEN.value,
            )
        )

    def render_rule_removed(self, rule: Rule) -> None:
        self.console.print(
            UISection.note(
                "rule",
                Text(f"Removed {rule.script_name} ({rule.id})"),
                style=UIStyle.MAGENTA.value,
            )
        )

    def render_import_result(self, rules: list[Rule], path: str) -> None:
        names = "\n".join(f"- {rule.script_name}" for rule in rules)
        self.console.print(
            UISection.note(
                "import",
                Text(f"Imported {len(rules)} rule(s) from {compact_home_path(path)}\n{names}"),
                style=UIStyle.GREEN.value,
            )
        )

    def render_export_result(self, count: int, path: str) -> None:
        self.console.print(
            UISection.note(
                "export",
                Text(f"Exported {count} rule(s) to {compact_home_path(path)}"),
                style=UIStyle.GREEN.value,
            )
        )

    def render_exclusions(self, entries: list[ExclusionEntry], total: int) -> None:
        if not entries:
            message = "No matching entries." if total else "No entries. Scan a conversation first."
            self.console.print(UISection.note("exclusions", message, style=UIStyle.DIM.value))
            return
        self.console.print(
            UISection.wrap(
                "exclusions",
                ExclusionsTable.exclusions_table(entries),
                style=UIStyle.MAGENTA.value,
                subtitle=f"{len(entries)} of {total}",
            )
        )

    def render_scan_result(self, count: int) -> None:
        self.console.print(
            UISection.note(
                "scan",
                f"Scanned conversation, found {count} message(s)",
                style=UIStyle.GREEN.value,
            )
        )

    def render_exclusions_updated(self, count: int, excluded: bool) -> None:
        verb = "Excluded" if excluded else "Included"
        self.console.print(
            UISection.note("exclusions", f"{verb} {count} entry(ies)", style=UIStyle.GREEN.value)
        )

    def render_settings(self, settings: TagBlockerSettings, path: str) -> None:
        self.console.print(
            UISection.wrap(
                "settings",
                SettingsTable.settings_table(settings),
                style=UIStyle.BLUE.value,
                subtitle=compact_home_path(path),
            )
        )

    def render_preview(self, before: str, after: str) -> None:
        style = UIStyle.GREEN.value if before != after else UIStyle.DIM.value
        self.console.print(
            UISection.wrap("preview", RewriteTable.preview_table(before, after), style=style)
        )

    def render_outcome(self, url: str, outcome: BodyOutcome) -> None:
        style = BODY_STATUS_STYLE.get(outcome.status, UIStyle.WHITE.value)
        self.console.print(
            UISection.wrap("rewrite", RewriteTable.outcome_table(url, outcome), style=style)
        )
