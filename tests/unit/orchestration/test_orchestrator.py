"""Tests for Orchestrator."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.factories.screens import RecordingHandler, RecordingProcessor, ScreenFactory
from ussdkit.conversation.models import ResponseType, UssdRequest, UssdResponse
from ussdkit.conversation.mutex import SessionMutex
from ussdkit.conversation.session import POSITION_FIELD, SCREEN_FIELD
from ussdkit.errors import (
    InputPositionError,
    RedirectLimitError,
    ScreenNotFoundError,
    SessionBusyError,
)
from ussdkit.orchestration import Orchestrator
from ussdkit.screens import menu

MAIN_MENU = "Main\n1. Register\n2. Fruit\n3. Exit"


async def main_menu(session: Any) -> UssdResponse:
    if session.is_entry:
        return UssdResponse.response(MAIN_MENU)
    choice = session.message.strip()
    if choice == "1":
        return UssdResponse.redirect("register")
    if choice == "2":
        return UssdResponse.redirect("fruit")
    if choice == "3":
        return UssdResponse.redirect("bye")
    return UssdResponse.response(f"Invalid choice\n{MAIN_MENU}")


@pytest.fixture
def register_processor() -> RecordingProcessor:
    return RecordingProcessor(UssdResponse.release("Welcome"))


@pytest.fixture
def fruit_processor() -> RecordingProcessor:
    return RecordingProcessor(UssdResponse.response("Thanks", next_screen="main"))


@pytest.fixture
def screens(register_processor, fruit_processor) -> dict[str, Any]:
    return {
        "main": menu("Main", main_menu),
        "register": ScreenFactory.registration(register_processor),
        "fruit": ScreenFactory.fruit(fruit_processor),
        "bye": ScreenFactory.goodbye("Goodbye"),
    }


@pytest.fixture
def orchestrator(screens, store, cipher) -> Orchestrator:
    return Orchestrator(screens, "main", store, cipher)


async def send(orchestrator: Orchestrator, message: str, session_id: str = "s1") -> UssdResponse:
    return await orchestrator.handle(
        UssdRequest(session_id=session_id, message=message, mobile="233200000000")
    )


class TestOrchestratorInit:
    def test_unknown_root_rejected(self, screens, store, cipher):
        with pytest.raises(ScreenNotFoundError) as exc_info:
            Orchestrator(screens, "missing", store, cipher)
        assert exc_info.value.screen_id == "missing"

    def test_screen_graph_is_read_only(self, orchestrator, screens):
        screens["extra"] = ScreenFactory.goodbye()
        with pytest.raises(ScreenNotFoundError):
            orchestrator.get_screen("extra")
        assert orchestrator.root == "main"


class TestSessionStart:
    @pytest.mark.asyncio
    async def test_first_message_enters_root(self, orchestrator, store):
        """A new session renders the root screen without consuming the message."""
        response = await send(orchestrator, "*123#")

        assert response.type == ResponseType.RESPONSE
        assert response.message == MAIN_MENU
        meta = store.dump("ussd:s1:input_meta")
        assert meta[SCREEN_FIELD] == "main"
        assert meta[POSITION_FIELD] == "0"

    @pytest.mark.asyncio
    async def test_input_root_prompts_first_input(self, screens, store, cipher):
        orchestrator = Orchestrator(screens, "register", store, cipher)

        response = await send(orchestrator, "*123#")

        assert response.message == "Register\nEnter Name:"
        assert store.dump("ussd:s1:input_data") == {}

    @pytest.mark.asyncio
    async def test_handler_sees_entry_flag(self, store, cipher):
        handler = RecordingHandler(UssdResponse.response("Menu"))
        orchestrator = Orchestrator({"main": ScreenFactory.main_menu(handler)}, "main", store, cipher)

        await send(orchestrator, "*123#")
        await send(orchestrator, "1")

        assert handler.entries == [True, False]
        assert handler.messages == ["*123#", "1"]


class TestInputCollection:
    @pytest.mark.asyncio
    async def test_registration_flow(self, orchestrator, store, cipher, register_processor):
        """Name then encrypted PIN, then the processor gets plaintext values."""
        await send(orchestrator, "*123#")

        response = await send(orchestrator, "1")
        assert response.message == "Register\nEnter Name:"

        response = await send(orchestrator, "Alice")
        assert response.message == "Register\nEnter PIN:"
        assert store.dump("ussd:s1:input_data") == {"name": "Alice"}
        assert store.dump("ussd:s1:input_meta")[POSITION_FIELD] == "1"

        response = await send(orchestrator, "1234")
        assert response.type == ResponseType.RELEASE
        assert response.message == "Welcome"
        assert register_processor.calls == [{"name": "Alice", "pin": "1234"}]

        stored_pin = store.dump("ussd:s1:input_data")["pin"]
        salt = store.dump("ussd:s1:input_meta")["Salt"]
        assert stored_pin != "1234"
        assert await cipher.decrypt(stored_pin, salt) == "1234"

    @pytest.mark.asyncio
    async def test_invalid_selection_reprompts(self, orchestrator, store, fruit_processor):
        """A bad option re-renders the same prompt and changes nothing."""
        await send(orchestrator, "*123#")
        prompt = (await send(orchestrator, "2")).message
        before_meta = store.dump("ussd:s1:input_meta")

        for bad in ("5", "x"):
            response = await send(orchestrator, bad)
            assert response.type == ResponseType.RESPONSE
            assert response.message == prompt

        assert store.dump("ussd:s1:input_meta") == before_meta
        assert store.dump("ussd:s1:input_data") == {}
        assert fruit_processor.calls == []

        response = await send(orchestrator, "2")
        assert response.message == "Thanks"
        assert fruit_processor.calls == [{"fruit": "B"}]

    @pytest.mark.asyncio
    async def test_reprompt_with_annotation(self, screens, store, cipher):
        orchestrator = Orchestrator(
            screens, "fruit", store, cipher, annotate_invalid_selection=True
        )
        prompt = (await send(orchestrator, "*123#")).message

        response = await send(orchestrator, "9")

        assert response.message == (
            f"Sorry, selected option does not exist. Try again.\n{prompt}"
        )

    @pytest.mark.asyncio
    async def test_completion_moves_to_next_screen(self, orchestrator, store):
        await send(orchestrator, "*123#")
        await send(orchestrator, "2")

        response = await send(orchestrator, "1")

        assert response.message == "Thanks"
        meta = store.dump("ussd:s1:input_meta")
        assert meta[SCREEN_FIELD] == "main"
        assert meta[POSITION_FIELD] == "0"

        # Back on the menu, the next message is a menu choice
        response = await send(orchestrator, "3")
        assert response.type == ResponseType.RELEASE
        assert response.message == "Goodbye"

    @pytest.mark.asyncio
    async def test_staying_on_input_screen_collects_afresh(self, store, cipher):
        processor = RecordingProcessor(UssdResponse.response("Again?"))
        orchestrator = Orchestrator(
            {"fruit": ScreenFactory.fruit(processor)}, "fruit", store, cipher
        )
        await send(orchestrator, "*123#")

        assert (await send(orchestrator, "1")).message == "Again?"
        assert store.dump("ussd:s1:input_meta")[POSITION_FIELD] == "0"

        await send(orchestrator, "2")
        assert processor.calls == [{"fruit": "A"}, {"fruit": "B"}]

    @pytest.mark.asyncio
    async def test_completion_retried_when_cursor_at_end(self, orchestrator, store):
        """A cursor left at the end re-runs completion without storing the message."""
        await send(orchestrator, "*123#")
        await send(orchestrator, "2")
        await store.hset("ussd:s1:input_data", "fruit", "A")
        await store.hset("ussd:s1:input_meta", POSITION_FIELD, 1)

        response = await send(orchestrator, "ignored")

        assert response.message == "Thanks"
        assert store.dump("ussd:s1:input_data") == {"fruit": "A"}

    @pytest.mark.asyncio
    async def test_release_leaves_session_state_untouched(
        self, orchestrator, store, register_processor
    ):
        """A reused session id after release re-runs completion with stored values."""
        await send(orchestrator, "*123#")
        await send(orchestrator, "1")
        await send(orchestrator, "Alice")
        assert (await send(orchestrator, "1234")).type == ResponseType.RELEASE
        meta_after_release = store.dump("ussd:s1:input_meta")
        data_after_release = store.dump("ussd:s1:input_data")

        assert meta_after_release[SCREEN_FIELD] == "register"
        assert meta_after_release[POSITION_FIELD] == "2"

        response = await send(orchestrator, "again")

        assert response.message == "Welcome"
        assert register_processor.calls == [{"name": "Alice", "pin": "1234"}] * 2
        assert store.dump("ussd:s1:input_meta") == meta_after_release
        assert store.dump("ussd:s1:input_data") == data_after_release

    @pytest.mark.asyncio
    async def test_cursor_past_end_is_contract_violation(self, orchestrator, store):
        await send(orchestrator, "*123#")
        await send(orchestrator, "2")
        await store.hset("ussd:s1:input_meta", POSITION_FIELD, 5)

        with pytest.raises(InputPositionError):
            await send(orchestrator, "1")


class TestTransitions:
    @pytest.mark.asyncio
    async def test_menu_stays_without_next_screen(self, orchestrator, store):
        await send(orchestrator, "*123#")

        response = await send(orchestrator, "9")

        assert response.message.startswith("Invalid choice")
        assert store.dump("ussd:s1:input_meta")[SCREEN_FIELD] == "main"

    @pytest.mark.asyncio
    async def test_unknown_next_screen_fails_before_writing(self, store, cipher):
        handler = RecordingHandler(UssdResponse.response("Menu"), UssdResponse.redirect("nowhere"))
        orchestrator = Orchestrator({"main": ScreenFactory.main_menu(handler)}, "main", store, cipher)
        await send(orchestrator, "*123#")

        with pytest.raises(ScreenNotFoundError):
            await send(orchestrator, "1")
        assert store.dump("ussd:s1:input_meta")[SCREEN_FIELD] == "main"

    @pytest.mark.asyncio
    async def test_stored_screen_no_longer_registered(self, orchestrator, store):
        await send(orchestrator, "*123#")
        await store.hset("ussd:s1:input_meta", SCREEN_FIELD, "retired")

        with pytest.raises(ScreenNotFoundError) as exc_info:
            await send(orchestrator, "1")
        assert exc_info.value.screen_id == "retired"

    @pytest.mark.asyncio
    async def test_redirect_loop_is_bounded(self, store, cipher):
        async def _loop(session: Any) -> UssdResponse:
            return UssdResponse.redirect("b" if session.screen_id == "a" else "a")

        orchestrator = Orchestrator(
            {"a": menu("A", _loop), "b": menu("B", _loop)},
            "a",
            store,
            cipher,
            max_redirects=3,
        )

        with pytest.raises(RedirectLimitError):
            await send(orchestrator, "*123#")

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, orchestrator, register_processor):
        await send(orchestrator, "*123#", session_id="a")
        await send(orchestrator, "*123#", session_id="b")
        await send(orchestrator, "1", session_id="a")
        await send(orchestrator, "1", session_id="b")

        await send(orchestrator, "Alice", session_id="a")
        await send(orchestrator, "Bob", session_id="b")
        await send(orchestrator, "1111", session_id="b")
        await send(orchestrator, "2222", session_id="a")

        assert register_processor.calls == [
            {"name": "Bob", "pin": "1111"},
            {"name": "Alice", "pin": "2222"},
        ]


class TestCollaboratorFailures:
    @pytest.mark.asyncio
    async def test_store_error_propagates(self, screens, cipher):
        failing = MagicMock()
        failing.hget = AsyncMock(side_effect=OSError("store down"))
        orchestrator = Orchestrator(screens, "main", failing, cipher)

        with pytest.raises(OSError, match="store down"):
            await send(orchestrator, "*123#")


class TestSessionLock:
    @pytest.fixture
    def mock_lock(self):
        lock = AsyncMock()
        lock.acquire = AsyncMock(return_value=True)
        lock.release = AsyncMock()
        return lock

    @pytest.fixture
    def mutex(self, mock_lock) -> SessionMutex:
        client = AsyncMock()
        client.lock = MagicMock(return_value=mock_lock)
        return SessionMutex(redis=client)

    @pytest.mark.asyncio
    async def test_lock_held_per_message(self, screens, store, cipher, mutex, mock_lock):
        orchestrator = Orchestrator(screens, "main", store, cipher, mutex=mutex)

        response = await send(orchestrator, "*123#")

        assert response.message == MAIN_MENU
        mock_lock.acquire.assert_awaited_once()
        mock_lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lock_released_on_failure(self, screens, cipher, mutex, mock_lock):
        failing = MagicMock()
        failing.hget = AsyncMock(side_effect=OSError("store down"))
        orchestrator = Orchestrator(screens, "main", failing, cipher, mutex=mutex)

        with pytest.raises(OSError):
            await send(orchestrator, "*123#")
        mock_lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_busy_session(self, screens, store, cipher, mutex, mock_lock):
        mock_lock.acquire = AsyncMock(return_value=False)
        orchestrator = Orchestrator(screens, "main", store, cipher, mutex=mutex)

        with pytest.raises(SessionBusyError) as exc_info:
            await send(orchestrator, "*123#")
        assert exc_info.value.session_id == "s1"
        assert store.dump("ussd:s1:input_meta") == {}
