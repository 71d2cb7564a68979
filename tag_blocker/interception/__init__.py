from tag_blocker.interception.endpoints import is_generation_endpoint
from tag_blocker.interception.events import intercept_generation_queued
from tag_blocker.interception.pipeline import RequestInterceptor, serialize_body
from tag_blocker.interception.transport import (
    InterceptingTransport,
    RequestOptions,
    Transport,
    intercept_transport,
)

__all__ = [
    "InterceptingTransport",
    "RequestInterceptor",
    "RequestOptions",
    "Transport",
    "intercept_generation_queued",
    "intercept_transport",
    "is_generation_endpoint",
    "serialize_body",
]
