"""Screens: immutable dialog templates and the input collection protocol.

    from ussdkit.screens import UssdInput, input_screen

    register = input_screen(
        "Register",
        [UssdInput(name="name", display_name="Name"),
         UssdInput(name="pin", display_name="PIN", encrypt=True)],
        on_register,
    )
"""

from ussdkit.screens.collection import (
    prepare_input_data,
    receive_input,
    receive_input_and_respond,
    resolve_selection,
)
from ussdkit.screens.models import (
    InputOption,
    InputProcessor,
    InputScreen,
    MenuScreen,
    NoticeScreen,
    ResponseHandler,
    Screen,
    ScreenKind,
    UssdInput,
    input_screen,
    menu,
    notice,
)
from ussdkit.screens.prompts import input_response, render_input_prompt

__all__ = [
    # Models
    "InputOption",
    "InputProcessor",
    "InputScreen",
    "MenuScreen",
    "NoticeScreen",
    "ResponseHandler",
    "Screen",
    "ScreenKind",
    "UssdInput",
    # Factories
    "input_screen",
    "menu",
    "notice",
    # Protocol
    "input_response",
    "prepare_input_data",
    "receive_input",
    "receive_input_and_respond",
    "render_input_prompt",
    "resolve_selection",
]
