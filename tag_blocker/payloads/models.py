from dataclasses import dataclass
from typing import Any, Optional

from tag_blocker.models import Placement


@dataclass
class TextField:
    """A string slot inside a parsed request body.

    ``container[key]`` is read and written in place, so committing a value
    mutates the same JSON structure it was extracted from.
    """

    container: Any
    key: Any
    depth: Optional[int]
    placement: Placement
    path: str = ""

    @property
    def text(self) -> str:
        return self.container[self.key]

    def commit(self, value: str) -> bool:
        if value == self.container[self.key]:
            return False
        self.container[self.key] = value
        return True
