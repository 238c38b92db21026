"""Error hierarchy for the USSD core.

Three kinds of failure reach callers:

- InvalidSelectionError: the user picked an option that does not exist.
  Recoverable; the orchestrator re-prompts without touching session state.
- ContractViolationError and subclasses: programming errors in screen
  definitions or orchestration. Not recoverable at runtime.
- Collaborator failures (store, cipher) are not wrapped here. They propagate
  with their own types, e.g. redis.RedisError or CipherError.
"""


class UssdError(Exception):
    """Base exception for all USSD core errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidSelectionError(UssdError):
    """Raised when an option selection is non-numeric or out of range.

    The message is safe to show to the end user.
    """

    def __init__(
        self,
        message: str = "Sorry, selected option does not exist. Try again.",
        input_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.input_name = input_name


class SessionBusyError(UssdError):
    """Raised when another request holds the session lock."""

    def __init__(self, message: str, session_id: str | None = None) -> None:
        super().__init__(message)
        self.session_id = session_id


class ContractViolationError(UssdError):
    """Base for programmer errors. Never rendered to the end user."""

    pass


class ScreenDefinitionError(ContractViolationError):
    """Raised when a screen or input is constructed with invalid arguments.

    Examples:
        - Input screen without inputs
        - Duplicate input names on one screen
        - Empty options list
    """

    pass


class InputPositionError(ContractViolationError):
    """Raised when an input cursor falls outside a screen's inputs."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class ScreenNotFoundError(ContractViolationError):
    """Raised when a screen id is not registered with the orchestrator."""

    def __init__(self, message: str, screen_id: str | None = None) -> None:
        super().__init__(message)
        self.screen_id = screen_id


class MissingInputError(ContractViolationError):
    """Raised when a collected value is absent while materializing inputs."""

    def __init__(self, message: str, input_name: str | None = None) -> None:
        super().__init__(message)
        self.input_name = input_name


class RedirectLimitError(ContractViolationError):
    """Raised when screens keep redirecting past the configured limit."""

    pass
