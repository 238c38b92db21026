"""Conversation state: request/response models, session and stores."""

from ussdkit.conversation.models import ResponseType, UssdRequest, UssdResponse
from ussdkit.conversation.session import Session
from ussdkit.conversation.store import HashStore

__all__ = [
    "HashStore",
    "ResponseType",
    "Session",
    "UssdRequest",
    "UssdResponse",
]
