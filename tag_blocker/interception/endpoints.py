from typing import Any

from tag_blocker.constants import (
    GENERATION_ENDPOINT_MARKERS,
    LOCAL_ENDPOINT_MARKERS,
    LOCAL_HOST_MARKER,
)


def is_generation_endpoint(url: Any) -> bool:
    """Return True for destinations whose bodies should be rewritten."""
    target = str(url)
    if any(marker in target for marker in GENERATION_ENDPOINT_MARKERS):
        return True
    return LOCAL_HOST_MARKER in target and any(
        marker in target for marker in LOCAL_ENDPOINT_MARKERS
    )
