"""Conversation domain models.

Contains the Pydantic models exchanged with transport adapters:
- UssdRequest for inbound messages
- UssdResponse for outbound messages
"""

from ussdkit.conversation.models.enums import ResponseType
from ussdkit.conversation.models.request import UssdRequest
from ussdkit.conversation.models.response import UssdResponse

__all__ = [
    "ResponseType",
    "UssdRequest",
    "UssdResponse",
]
