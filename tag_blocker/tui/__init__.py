from tag_blocker.tui.renderers import TagBlockerConsoleUI

__all__ = ["TagBlockerConsoleUI"]
