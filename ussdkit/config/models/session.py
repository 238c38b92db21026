"""Dialog behavior configuration."""

from pydantic import BaseModel, Field


class SessionConfig(BaseModel):
    """How the orchestrator drives sessions."""

    max_redirects: int = Field(
        default=10,
        ge=1,
        description="Redirect hops allowed while handling one message",
    )
    annotate_invalid_selection: bool = Field(
        default=False,
        description="Prefix re-prompts with the invalid selection message",
    )
