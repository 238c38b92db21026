"""Input collection protocol.

An input screen with N inputs is walked by a cursor in [0, N]. Each
accepted message stores one value and advances the cursor; at N every
input is collected and the orchestrator hands the materialized values to
the screen's input processor.
"""

from ussdkit.conversation.models import UssdResponse
from ussdkit.conversation.session import POSITION_FIELD, Session
from ussdkit.errors import InputPositionError, InvalidSelectionError, MissingInputError
from ussdkit.observability.logging import get_logger
from ussdkit.observability.metrics import INPUTS_RECEIVED, INVALID_SELECTIONS
from ussdkit.screens.models import InputScreen, UssdInput
from ussdkit.screens.prompts import input_response

logger = get_logger(__name__)


def resolve_selection(item: UssdInput, message: str) -> str:
    """Map a 1-based ordinal message to the selected option's value.

    Only plain ASCII digits count as a selection. Non-numeric and
    out-of-range selections are reported alike.

    Raises:
        InvalidSelectionError: If the message does not pick an option
    """
    options = item.options or ()
    text = message.strip()
    if not (text.isascii() and text.isdigit()):
        raise InvalidSelectionError(input_name=item.name)
    number = int(text)
    if not 1 <= number <= len(options):
        raise InvalidSelectionError(input_name=item.name)
    return options[number - 1].value


async def receive_input(screen: InputScreen, session: Session, position: int) -> int:
    """Store the session's message as the input at `position`.

    The value (encrypted when the input asks for it) and the advanced cursor
    are written in one atomic store write. Nothing is written when the
    selection is invalid.

    Returns:
        The new cursor, position + 1

    Raises:
        InputPositionError: If position is outside the screen's inputs
        InvalidSelectionError: If an option input gets a bad selection
    """
    if not 0 <= position < len(screen.inputs):
        raise InputPositionError(
            f"No input at position {position} on screen {screen.title!r}",
            position=position,
        )
    item = screen.inputs[position]

    if item.has_options:
        try:
            value = resolve_selection(item, session.message)
        except InvalidSelectionError:
            INVALID_SELECTIONS.labels(screen=session.screen_id).inc()
            logger.info(
                "invalid_selection",
                session_id=session.session_id,
                screen=session.screen_id,
                input_name=item.name,
            )
            raise
    else:
        value = session.message

    stored = await session.encrypt(value) if item.encrypt else value
    new_position = position + 1
    await session.store.hset_many(
        [
            (session.input_data_key, item.name, stored),
            (session.input_meta_key, POSITION_FIELD, new_position),
        ]
    )

    INPUTS_RECEIVED.labels(screen=session.screen_id).inc()
    logger.debug(
        "input_received",
        session_id=session.session_id,
        screen=session.screen_id,
        input_name=item.name,
        position=new_position,
        encrypted=item.encrypt,
    )
    return new_position


async def receive_input_and_respond(
    screen: InputScreen, session: Session, position: int
) -> UssdResponse | None:
    """Receive an input and prompt for the next one.

    Returns:
        The next prompt, or None once every input is collected
    """
    new_position = await receive_input(screen, session, position)
    if new_position < len(screen.inputs):
        return input_response(screen, new_position)
    return None


async def prepare_input_data(screen: InputScreen, session: Session) -> dict[str, str]:
    """Materialize the collected values of a screen.

    Built fresh from the store on every call, in the screen's input order,
    with encrypted values decrypted.

    Raises:
        MissingInputError: If an input has no stored value
    """
    data: dict[str, str] = {}
    for item in screen.inputs:
        value = await session.get_input(item.name)
        if value is None:
            raise MissingInputError(
                f"Input {item.name!r} was not collected on screen {screen.title!r}",
                input_name=item.name,
            )
        data[item.name] = await session.decrypt(value) if item.encrypt else value
    return data
