from tag_blocker.payloads.adapters import (
    DEFAULT_ADAPTERS,
    ContentAdapter,
    IPayloadAdapter,
    MessagesAdapter,
    TopLevelStringAdapter,
    extract_fields,
)
from tag_blocker.payloads.models import TextField

__all__ = [
    "DEFAULT_ADAPTERS",
    "ContentAdapter",
    "IPayloadAdapter",
    "MessagesAdapter",
    "TextField",
    "TopLevelStringAdapter",
    "extract_fields",
]
