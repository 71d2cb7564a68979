import logging
from enum import Enum
from typing import Any, Optional

from tag_blocker.conversation import Conversation, scan_exclusions
from tag_blocker.interception import (
    InterceptingTransport,
    RequestInterceptor,
    Transport,
    intercept_generation_queued,
)
from tag_blocker.models import TagBlockerSettings
from tag_blocker.repository import SettingsRepository
from tag_blocker.rules.engine import RuleEngine

logger = logging.getLogger(__name__)


class HostEvent(str, Enum):
    GENERATE_QUEUED = "generate_queued"
    CHAT_CHANGED = "chat_changed"
    MESSAGE_RECEIVED = "message_received"
    MESSAGE_SENT = "message_sent"


RESCAN_EVENTS = frozenset(
    {HostEvent.CHAT_CHANGED, HostEvent.MESSAGE_RECEIVED, HostEvent.MESSAGE_SENT}
)


class TagBlockerExtension:
    """Composition root: one settings handle shared by every code path."""

    def __init__(
        self,
        repository: SettingsRepository,
        settings: Optional[TagBlockerSettings] = None,
    ) -> None:
        self.repository = repository
        self.settings = settings if settings is not None else repository.load()
        self.engine = RuleEngine(self.settings)
        self.interceptor = RequestInterceptor(self.engine)

    def wrap(self, transport: Transport) -> InterceptingTransport:
        return InterceptingTransport(transport, self.interceptor)

    def rescan(self, conversation: Conversation) -> int:
        self.settings.exclusions = scan_exclusions(conversation)
        self.repository.save(self.settings)
        logger.debug("Rescanned %d message(s) for exclusions", len(self.settings.exclusions))
        return len(self.settings.exclusions)

    def handle_event(
        self,
        event: HostEvent,
        payload: Optional[dict[str, Any]] = None,
        conversation: Optional[Conversation] = None,
    ) -> Optional[dict[str, Any]]:
        if event == HostEvent.GENERATE_QUEUED:
            if payload is None:
                return None
            return intercept_generation_queued(payload, self.engine, conversation)

        if event in RESCAN_EVENTS and self.settings.auto_refresh and conversation is not None:
            self.rescan(conversation)
        return payload
