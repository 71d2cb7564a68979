from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Protocol

from tag_blocker.interception.endpoints import is_generation_endpoint
from tag_blocker.interception.pipeline import RequestInterceptor
from tag_blocker.rules.engine import RuleEngine


@dataclass(frozen=True)
class RequestOptions:
    method: str = "POST"
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[Any] = None


class Transport(Protocol):
    def __call__(self, url: str, options: RequestOptions) -> Any: ...


class InterceptingTransport:
    """Wraps a transport so generation requests leave with rewritten bodies."""

    def __init__(self, transport: Transport, interceptor: RequestInterceptor) -> None:
        self._transport = transport
        self.interceptor = interceptor

    @property
    def wrapped(self) -> Transport:
        return self._transport

    def __call__(self, url: str, options: Optional[RequestOptions] = None) -> Any:
        options = options or RequestOptions()
        if not is_generation_endpoint(url) or options.body is None:
            return self._transport(url, options)

        outcome = self.interceptor.rewrite_body(url, options.body)
        if outcome.modified:
            options = replace(options, body=outcome.body)
        return self._transport(url, options)


def intercept_transport(engine: RuleEngine) -> Callable[[Transport], InterceptingTransport]:
    def _decorate(transport: Transport) -> InterceptingTransport:
        return InterceptingTransport(transport, RequestInterceptor(engine))

    return _decorate
