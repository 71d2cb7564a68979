from enum import Enum

from tag_blocker.models import BodyStatus


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


BODY_STATUS_STYLE = {
    BodyStatus.REWRITTEN: UIStyle.GREEN.value,
    BodyStatus.UNCHANGED: UIStyle.DIM.value,
    BodyStatus.SKIPPED: UIStyle.YELLOW.value,
    BodyStatus.FAILED: UIStyle.RED.value,
}
