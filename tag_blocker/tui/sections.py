from typing import Optional

from rich.panel import Panel

from tag_blocker.tui.enums import UIStyle


class UISection:
    @staticmethod
    def wrap(title: str, body, style: str = UIStyle.BLUE.value, subtitle: Optional[str] = None) -> Panel:
        return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))

    @staticmethod
    def note(title: str, body, style: str) -> Panel:
        return Panel(body, title=title, border_style=style, padding=(0, 1))
