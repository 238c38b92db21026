"""Inbound request model."""

from pydantic import BaseModel, ConfigDict, Field


class UssdRequest(BaseModel):
    """One inbound message as handed over by a transport adapter.

    The adapter owns the wire format; this is only what the core needs.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(..., min_length=1, description="Dialog identity")
    message: str = Field(default="", description="Raw text sent by the user")
    mobile: str | None = Field(default=None, description="Subscriber number")
