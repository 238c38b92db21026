"""Screen models.

A screen is an immutable template for one step of a USSD dialog. Screens
form a closed set of variants tagged by ScreenKind; each variant carries
its application behavior as a function value captured at construction.
Screens are built once at startup and shared by every session, so they
never hold per-session data.
"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ussdkit.errors import ScreenDefinitionError

# (session) -> UssdResponse
ResponseHandler = Callable[..., Awaitable[Any]]
# (session, collected values) -> UssdResponse
InputProcessor = Callable[..., Awaitable[Any]]


class ScreenKind(str, Enum):
    """Screen variants.

    - MENU: dispatches each message to its response handler
    - INPUT: collects one or more values, then calls its input processor
    - NOTICE: informational screen, usually ends the dialog
    """

    MENU = "menu"
    INPUT = "input"
    NOTICE = "notice"


class InputOption(BaseModel):
    """One selectable option of an input."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Value stored when selected")
    display_value: str = Field(..., description="Label shown to the user")


class UssdInput(BaseModel):
    """Describes one named value to collect from the user."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Stable key, also the store field")
    display_name: str = Field(..., description="Label shown in prompts")
    options: tuple[InputOption, ...] | None = Field(
        default=None, description="Fixed choices, selected by 1-based ordinal"
    )
    encrypt: bool = Field(default=False, description="Never persist in clear text")

    @model_validator(mode="before")
    @classmethod
    def _default_display_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("display_name"):
            data = {**data, "display_name": data.get("name")}
        return data

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> Any:
        if value is None:
            return None
        options = list(value)
        if not options:
            raise ScreenDefinitionError("Input options must not be empty")
        return tuple(
            InputOption(value=opt[0], display_value=opt[1])
            if isinstance(opt, tuple | list)
            else opt
            for opt in options
        )

    @property
    def has_options(self) -> bool:
        """Whether the user selects from options instead of typing."""
        return self.options is not None


class MenuScreen(BaseModel):
    """Screen whose handler receives every message as a menu event."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ScreenKind.MENU] = ScreenKind.MENU
    title: str
    on_respond: ResponseHandler


class NoticeScreen(BaseModel):
    """Screen that shows a notice, typically releasing the session."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ScreenKind.NOTICE] = ScreenKind.NOTICE
    title: str
    on_respond: ResponseHandler


class InputScreen(BaseModel):
    """Screen that collects its inputs one message at a time."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[ScreenKind.INPUT] = ScreenKind.INPUT
    title: str
    inputs: tuple[UssdInput, ...]
    on_inputs_complete: InputProcessor

    @model_validator(mode="after")
    def _check_inputs(self) -> "InputScreen":
        if not self.inputs:
            raise ScreenDefinitionError(
                f"Input screen {self.title!r} must declare at least one input"
            )
        seen: set[str] = set()
        for item in self.inputs:
            if item.name in seen:
                raise ScreenDefinitionError(
                    f"Duplicate input name {item.name!r} on screen {self.title!r}"
                )
            seen.add(item.name)
        return self


Screen = MenuScreen | InputScreen | NoticeScreen


def menu(title: str, on_respond: ResponseHandler) -> MenuScreen:
    """Create a menu screen."""
    return MenuScreen(title=title, on_respond=on_respond)


def input_screen(
    title: str,
    inputs: list[UssdInput],
    on_inputs_complete: InputProcessor,
) -> InputScreen:
    """Create an input screen.

    Raises:
        ScreenDefinitionError: If inputs is empty or has duplicate names
    """
    return InputScreen(
        title=title,
        inputs=tuple(inputs),
        on_inputs_complete=on_inputs_complete,
    )


def notice(title: str, on_respond: ResponseHandler) -> NoticeScreen:
    """Create a notice screen."""
    return NoticeScreen(title=title, on_respond=on_respond)
