"""
Unit tests for RoomRegistry
===========================
Slot assignment, exclusivity, vacating and deletion of rooms.
"""

import pytest

from connections import Connection
from errors import ConflictError, SlotOccupied
from registry import Room
from roles import Role


class TestGetOrCreate:
    """Lazy room creation"""

    def test_creates_unseen_room(self, registry):
        """An unseen id produces an empty room that is tracked"""
        room = registry.get_or_create("ABCD1234")

        assert isinstance(room, Room)
        assert room.room_id == "ABCD1234"
        assert room.is_empty
        assert "ABCD1234" in registry
        assert len(registry) == 1

    def test_returns_existing_room(self, registry):
        """A second lookup returns the same object"""
        first = registry.get_or_create("ABCD1234")
        second = registry.get_or_create("ABCD1234")

        assert first is second
        assert len(registry) == 1

    def test_get_unknown_room(self, registry):
        assert registry.get("missing") is None


class TestAssignSlot:
    """Role exclusivity"""

    def test_assign_empty_slot(self, registry):
        room = registry.get_or_create("R1")
        sender = Connection()

        registry.assign_slot(room, Role.SENDER, sender)

        assert room.sender is sender
        assert room.receiver is None
        assert not registry.is_complete(room)

    def test_occupied_slot_raises_without_mutation(self, registry):
        """Second sender is rejected and the first one keeps the slot"""
        room = registry.get_or_create("R1")
        first = Connection()
        second = Connection()
        registry.assign_slot(room, Role.SENDER, first)

        with pytest.raises(SlotOccupied) as exc_info:
            registry.assign_slot(room, Role.SENDER, second)

        assert isinstance(exc_info.value, ConflictError)
        assert exc_info.value.message == "Room already has an Android sender"
        assert room.sender is first
        assert room.receiver is None

    def test_occupied_receiver_message(self, registry):
        room = registry.get_or_create("R1")
        registry.assign_slot(room, Role.RECEIVER, Connection())

        with pytest.raises(SlotOccupied, match="Windows receiver"):
            registry.assign_slot(room, Role.RECEIVER, Connection())

    def test_complete_when_both_slots_filled(self, registry):
        room = registry.get_or_create("R1")
        registry.assign_slot(room, Role.SENDER, Connection())
        registry.assign_slot(room, Role.RECEIVER, Connection())

        assert registry.is_complete(room)


class TestVacateAndDelete:
    """Room removal once empty"""

    def test_vacate_reports_emptiness(self, registry):
        room = registry.get_or_create("R1")
        sender = Connection()
        receiver = Connection()
        registry.assign_slot(room, Role.SENDER, sender)
        registry.assign_slot(room, Role.RECEIVER, receiver)

        assert registry.vacate_slot(room, Role.SENDER) is False
        assert registry.vacate_slot(room, Role.RECEIVER) is True

    def test_vacate_ignores_other_connection(self, registry):
        """A slot is only cleared by the connection that holds it"""
        room = registry.get_or_create("R1")
        holder = Connection()
        registry.assign_slot(room, Role.SENDER, holder)

        assert registry.vacate_slot(room, Role.SENDER, Connection()) is False
        assert room.sender is holder

    def test_delete_if_empty_keeps_occupied_room(self, registry):
        room = registry.get_or_create("R1")
        registry.assign_slot(room, Role.RECEIVER, Connection())

        assert registry.delete_if_empty(room) is False
        assert "R1" in registry

    def test_delete_if_empty_removes_room(self, registry):
        room = registry.get_or_create("R1")
        registry.assign_slot(room, Role.RECEIVER, Connection())
        registry.vacate_slot(room, Role.RECEIVER)

        assert registry.delete_if_empty(room) is True
        assert "R1" not in registry
        assert len(registry) == 0

    def test_recreated_room_is_fresh(self, registry):
        """No slot data survives deletion"""
        room = registry.get_or_create("R1")
        registry.assign_slot(room, Role.SENDER, Connection())
        registry.vacate_slot(room, Role.SENDER)
        registry.delete_if_empty(room)

        fresh = registry.get_or_create("R1")

        assert fresh is not room
        assert fresh.is_empty


class TestRoleAliases:

    @pytest.mark.parametrize("raw, expected", [
        ("sender", Role.SENDER),
        ("android", Role.SENDER),
        ("receiver", Role.RECEIVER),
        ("windows", Role.RECEIVER),
        (" Android ", Role.SENDER),
        ("WINDOWS", Role.RECEIVER),
    ])
    def test_resolve(self, raw, expected):
        assert Role.resolve(raw) is expected

    @pytest.mark.parametrize("raw", ["viewer", "", None, 3])
    def test_resolve_unknown(self, raw):
        assert Role.resolve(raw) is None

    def test_opposite_and_device(self):
        assert Role.SENDER.opposite is Role.RECEIVER
        assert Role.RECEIVER.opposite is Role.SENDER
        assert Role.SENDER.device == "android"
        assert Role.RECEIVER.device == "windows"
