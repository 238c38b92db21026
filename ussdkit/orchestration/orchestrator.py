"""Session/screen orchestrator.

Handles one inbound message per call. The orchestrator holds only the
read-only screen graph; every call reloads the session from the store, so
any number of requests may run concurrently against one instance.
"""

import time
from collections.abc import Mapping
from types import MappingProxyType

from ussdkit.conversation.models import ResponseType, UssdRequest, UssdResponse
from ussdkit.conversation.mutex import SessionMutex
from ussdkit.conversation.session import Session
from ussdkit.conversation.store import HashStore
from ussdkit.errors import (
    ContractViolationError,
    InputPositionError,
    InvalidSelectionError,
    RedirectLimitError,
    ScreenNotFoundError,
    SessionBusyError,
)
from ussdkit.observability.logging import get_logger
from ussdkit.observability.metrics import (
    REQUEST_COUNT,
    REQUEST_LATENCY,
    SCREEN_TRANSITIONS,
    SESSIONS_STARTED,
)
from ussdkit.screens.collection import prepare_input_data, receive_input_and_respond
from ussdkit.screens.models import InputScreen, Screen
from ussdkit.screens.prompts import input_response, render_input_prompt
from ussdkit.security import StringCipher

logger = get_logger(__name__)


class Orchestrator:
    """Drives sessions through a graph of screens.

    For each inbound message:
    1. Load the session, or start one on the root screen
    2. Resolve the current screen
    3. Input screens consume the message as the next value; once all
       values are in, the input processor gets the materialized values
    4. Menu and notice screens pass the message to their handler
    5. Apply the handler's response: persist any screen change, follow
       redirects, and return the response for the transport

    A release writes nothing, so a released session keeps its last screen
    and cursor. Session ids must not be reused after a release: a later
    message on a completed input screen runs its input processor again
    with the stored values. Gateways issue a fresh id per dialog; expire
    released keys with a TTL if yours does not.
    """

    def __init__(
        self,
        screens: Mapping[str, Screen],
        root: str,
        store: HashStore,
        cipher: StringCipher,
        *,
        mutex: SessionMutex | None = None,
        key_prefix: str = "ussd",
        max_redirects: int = 10,
        annotate_invalid_selection: bool = False,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            screens: Screen id -> screen template, read-only after this call
            root: Screen id every new session starts on
            store: Durable hash store holding session state
            cipher: Encryption primitive for inputs flagged encrypt=True
            mutex: Optional per-session lock held for each message
            key_prefix: Prefix for session keys in the store
            max_redirects: Redirect hops allowed while handling one message
            annotate_invalid_selection: Prefix re-prompts with the error text

        Raises:
            ScreenNotFoundError: If root is not one of the screens
        """
        self._screens: Mapping[str, Screen] = MappingProxyType(dict(screens))
        if root not in self._screens:
            raise ScreenNotFoundError(f"Root screen {root!r} is not registered", screen_id=root)
        self._root = root
        self._store = store
        self._cipher = cipher
        self._mutex = mutex
        self._key_prefix = key_prefix
        self._max_redirects = max_redirects
        self._annotate_invalid_selection = annotate_invalid_selection

    @property
    def root(self) -> str:
        return self._root

    def get_screen(self, screen_id: str) -> Screen:
        """Look up a screen template by id."""
        try:
            return self._screens[screen_id]
        except KeyError:
            raise ScreenNotFoundError(
                f"Screen {screen_id!r} is not registered", screen_id=screen_id
            ) from None

    async def handle(self, request: UssdRequest) -> UssdResponse:
        """Handle one inbound message and return the response to send.

        Raises:
            SessionBusyError: If the session lock could not be acquired
            ContractViolationError: On screen definition or state errors
        """
        started = time.perf_counter()
        outcome = "error"
        try:
            if self._mutex is None:
                response = await self._process(request)
            else:
                async with self._mutex.acquire(request.session_id) as acquired:
                    if not acquired:
                        outcome = "busy"
                        logger.warning("session_busy", session_id=request.session_id)
                        raise SessionBusyError(
                            "Session is handling another message",
                            session_id=request.session_id,
                        )
                    response = await self._process(request)
            outcome = response.type.value
            return response
        except ContractViolationError as e:
            logger.error(
                "contract_violation",
                session_id=request.session_id,
                error_type=type(e).__name__,
                error=e.message,
            )
            raise
        finally:
            REQUEST_COUNT.labels(outcome=outcome).inc()
            REQUEST_LATENCY.observe(time.perf_counter() - started)

    async def _process(self, request: UssdRequest) -> UssdResponse:
        session = await Session.load(
            request, self._store, self._cipher, key_prefix=self._key_prefix
        )
        if session is None:
            session = await Session.start(
                request,
                self._store,
                self._cipher,
                self._root,
                key_prefix=self._key_prefix,
            )
            SESSIONS_STARTED.inc()
            return await self._enter(session, hops=0)

        screen = self.get_screen(session.screen_id)
        if isinstance(screen, InputScreen):
            return await self._collect(screen, session)

        response = await screen.on_respond(session)
        return await self._apply(screen, session, response, hops=0)

    async def _collect(self, screen: InputScreen, session: Session) -> UssdResponse:
        position = await session.get_position()
        total = len(screen.inputs)
        if position > total:
            raise InputPositionError(
                f"Cursor {position} is past the {total} inputs of {session.screen_id!r}",
                position=position,
            )

        # A cursor already at the end means the last completion did not
        # finish; run it again instead of consuming the message.
        if position < total:
            try:
                prompt = await receive_input_and_respond(screen, session, position)
            except InvalidSelectionError as e:
                return self._reprompt(screen, position, e)
            if prompt is not None:
                return prompt

        values = await prepare_input_data(screen, session)
        logger.info(
            "inputs_complete",
            session_id=session.session_id,
            screen=session.screen_id,
            inputs=list(values),
        )
        response = await screen.on_inputs_complete(session, values)
        return await self._apply(screen, session, response, hops=0)

    def _reprompt(
        self, screen: InputScreen, position: int, error: InvalidSelectionError
    ) -> UssdResponse:
        prompt = render_input_prompt(screen, position)
        if self._annotate_invalid_selection:
            prompt = f"{error.message}\n{prompt}"
        return UssdResponse.response(prompt)

    async def _enter(self, session: Session, hops: int) -> UssdResponse:
        """Render the current screen for a session that just arrived on it."""
        screen = self.get_screen(session.screen_id)
        if isinstance(screen, InputScreen):
            return input_response(screen, 0)

        session.is_entry = True
        try:
            response = await screen.on_respond(session)
        finally:
            session.is_entry = False
        return await self._apply(screen, session, response, hops)

    async def _apply(
        self,
        screen: Screen,
        session: Session,
        response: UssdResponse,
        hops: int,
    ) -> UssdResponse:
        """Persist the state change a handler's response asks for."""
        if response.type == ResponseType.REDIRECT:
            if hops >= self._max_redirects:
                raise RedirectLimitError(
                    f"More than {self._max_redirects} redirects from {session.screen_id!r}"
                )
            await self._transition(session, response.next_screen or "")
            return await self._enter(session, hops + 1)

        if response.next_screen is not None:
            await self._transition(session, response.next_screen)
        elif response.type == ResponseType.RESPONSE and isinstance(screen, InputScreen):
            # Staying on a completed input screen collects afresh
            await session.set_position(0)

        return response

    async def _transition(self, session: Session, screen_id: str) -> None:
        self.get_screen(screen_id)
        previous = session.screen_id
        await session.set_screen(screen_id)
        SCREEN_TRANSITIONS.labels(from_screen=previous, to_screen=screen_id).inc()
        logger.info(
            "screen_transition",
            session_id=session.session_id,
            from_screen=previous,
            to_screen=screen_id,
        )
