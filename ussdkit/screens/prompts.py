"""Prompt rendering for input screens."""

from ussdkit.conversation.models import UssdResponse
from ussdkit.errors import InputPositionError
from ussdkit.screens.models import InputScreen


def render_input_prompt(screen: InputScreen, position: int) -> str:
    """Render the prompt asking for the input at `position`.

    Pure formatting: the screen title, then either a numbered option list
    or a free-text request.

    Raises:
        InputPositionError: If position is outside the screen's inputs
    """
    if not 0 <= position < len(screen.inputs):
        raise InputPositionError(
            f"No input at position {position} on screen {screen.title!r}",
            position=position,
        )
    item = screen.inputs[position]
    lines = [screen.title]
    if item.options is not None:
        lines.append(f"Choose {item.display_name}:")
        lines.extend(
            f"{number}. {option.display_value}"
            for number, option in enumerate(item.options, start=1)
        )
    else:
        lines.append(f"Enter {item.display_name}:")
    return "\n".join(lines)


def input_response(screen: InputScreen, position: int) -> UssdResponse:
    """Return the prompt for `position` as a continuing response."""
    return UssdResponse.response(render_input_prompt(screen, position))
