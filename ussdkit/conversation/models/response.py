"""Outbound response model."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ussdkit.conversation.models.enums import ResponseType


class UssdResponse(BaseModel):
    """Response produced by the core for one inbound message.

    Application behaviors build these with the classmethod constructors.
    A response may name the screen that handles the next message.
    """

    model_config = ConfigDict(frozen=True)

    type: ResponseType = Field(default=ResponseType.RESPONSE)
    message: str | None = Field(default=None, description="Text shown to the user")
    next_screen: str | None = Field(
        default=None, description="Screen id the session moves to"
    )

    @model_validator(mode="after")
    def _check_redirect(self) -> "UssdResponse":
        if self.type == ResponseType.REDIRECT and not self.next_screen:
            raise ValueError("A redirect needs a next_screen")
        return self

    @classmethod
    def response(cls, message: str, next_screen: str | None = None) -> "UssdResponse":
        """Show a message and keep the dialog open."""
        return cls(type=ResponseType.RESPONSE, message=message, next_screen=next_screen)

    @classmethod
    def release(cls, message: str) -> "UssdResponse":
        """Show a message and end the dialog."""
        return cls(type=ResponseType.RELEASE, message=message)

    @classmethod
    def redirect(cls, next_screen: str) -> "UssdResponse":
        """Move to another screen and render it in the same request."""
        return cls(type=ResponseType.REDIRECT, next_screen=next_screen)

    @property
    def ends_session(self) -> bool:
        return self.type == ResponseType.RELEASE
