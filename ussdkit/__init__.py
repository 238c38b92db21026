"""ussdkit: screen and session state machine for USSD dialogs."""

from ussdkit.conversation import Session, UssdRequest, UssdResponse
from ussdkit.errors import (
    ContractViolationError,
    InvalidSelectionError,
    ScreenDefinitionError,
    UssdError,
)
from ussdkit.orchestration import Orchestrator
from ussdkit.screens import InputOption, UssdInput, input_screen, menu, notice

__version__ = "0.1.0"

__all__ = [
    "ContractViolationError",
    "InputOption",
    "InvalidSelectionError",
    "Orchestrator",
    "ScreenDefinitionError",
    "Session",
    "UssdError",
    "UssdInput",
    "UssdRequest",
    "UssdResponse",
    "input_screen",
    "menu",
    "notice",
]
