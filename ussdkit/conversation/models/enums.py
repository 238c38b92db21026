"""Enums for the conversation domain."""

from enum import Enum


class ResponseType(str, Enum):
    """How the transport should treat an outbound response.

    - RESPONSE: show the message and keep the dialog open
    - RELEASE: show the message and end the dialog
    - REDIRECT: move to another screen and render it immediately
    """

    RESPONSE = "response"
    RELEASE = "release"
    REDIRECT = "redirect"
