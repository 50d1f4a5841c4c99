"""Tests for the view router transitions."""

import pytest

from hotel_booking import errors
from hotel_booking.router import (
    CustomerView,
    View,
    back_to_rooms,
    change_view,
    initial_state,
    select_room,
    start_over,
)
from hotel_booking.wizard import WizardStep

pytestmark = pytest.mark.anyio


class TestRouter:
    """Tests for AppState transitions."""

    def test_initial_state_shows_room_list(self):
        state = initial_state()
        assert state.view is View.CUSTOMER
        assert state.customer_view is CustomerView.ROOMS
        assert state.selected_room is None
        assert state.wizard is None

    def test_select_room_opens_fresh_wizard(self, room, ledger):
        state = select_room(initial_state(), room, ledger)
        assert state.customer_view is CustomerView.BOOKING
        assert state.selected_room == room
        assert state.wizard.step is WizardStep.DATES
        assert state.wizard.room == room

    def test_transitions_do_not_mutate_previous_state(self, room, ledger):
        before = initial_state()
        after = select_room(before, room, ledger)
        assert before.wizard is None
        assert after is not before

    def test_state_is_immutable(self):
        with pytest.raises(Exception):
            initial_state().view = View.ADMIN

    def test_unavailable_room_cannot_be_selected(self, room, ledger):
        closed = room.model_copy(update={"available": False})
        with pytest.raises(errors.ValidationError):
            select_room(initial_state(), closed, ledger)

    def test_back_to_rooms_discards_draft(self, room, ledger):
        state = select_room(initial_state(), room, ledger)
        state.wizard.set_dates("2024-06-01", "2024-06-05")
        state.wizard.advance()

        state = back_to_rooms(state)
        assert state.customer_view is CustomerView.ROOMS
        assert state.wizard is None
        assert state.selected_room is None

        reopened = select_room(state, room, ledger)
        assert reopened.wizard.step is WizardStep.DATES

    async def test_start_over_after_confirmation(self, room, ledger, fill_wizard):
        state = select_room(initial_state(), room, ledger)
        await fill_wizard(state.wizard).submit()
        assert state.wizard.step is WizardStep.CONFIRMATION

        state = start_over(state)
        assert state.wizard is None
        assert state.customer_view is CustomerView.ROOMS
        assert len(await ledger.list_all()) == 1

    def test_switching_to_customer_resets_to_room_list(self, room, ledger):
        state = select_room(initial_state(), room, ledger)
        state = change_view(state, View.ADMIN)
        assert state.view is View.ADMIN
        assert state.wizard is not None

        state = change_view(state, "customer")
        assert state.view is View.CUSTOMER
        assert state.customer_view is CustomerView.ROOMS
        assert state.wizard is None

    def test_unknown_view_is_rejected(self):
        with pytest.raises(ValueError):
            change_view(initial_state(), "kitchen")
