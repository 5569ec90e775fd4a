from __future__ import annotations

from typing import List, Optional, Protocol

from .models import Participant, PaymentRecord, Room, SettlementSnapshot


class RoomRepository(Protocol):
    """
    Abstraction over room persistence.

    Implementations are responsible for:
    - Mapping between database rows and the `Room` domain model.
    - Hiding any SQL / driver details from the application layer.
    """

    def get_room(self, room_id: str) -> Optional[Room]:
        """Return the room with the given internal ID, or None if not found."""

        ...

    def get_room_by_code(self, code: str) -> Optional[Room]:
        """Return the room with the given (upper-case) code, or None."""

        ...

    def add_room(self, room: Room) -> None:
        """Persist a new room."""

        ...

    def set_current_round(self, room_id: str, round_num: int) -> None:
        ...


class ParticipantRepository(Protocol):
    """
    Player profiles and their current room membership.

    A participant sits in at most one room at a time; joining another room
    simply moves them.
    """

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        ...

    def list_room_participants(self, room_id: str) -> List[Participant]:
        """Return the members of a room in the order they joined."""

        ...

    def save_participant(self, participant: Participant) -> None:
        """Insert or update a participant (keyed by `id`)."""

        ...

    def clear_room(self, participant_id: str) -> None:
        """Remove the participant from whatever room they are in."""

        ...


class PaymentRepository(Protocol):
    """Append/delete-only log of payments, scoped by room."""

    def add_payment(self, payment: PaymentRecord) -> None:
        ...

    def get_payment(self, payment_id: str) -> Optional[PaymentRecord]:
        ...

    def list_room_payments(self, room_id: str) -> List[PaymentRecord]:
        """Return a room's payments, newest first."""

        ...

    def delete_payment(self, payment_id: str) -> None:
        ...


class SettlementHistoryRepository(Protocol):
    def add_snapshot(self, snapshot: SettlementSnapshot) -> None:
        ...

    def list_snapshots(self, participant_id: str) -> List[SettlementSnapshot]:
        """Return a participant's settlement records, newest first."""

        ...


class KeyValueStore(Protocol):
    """
    Minimal string key-value store.

    Stands in for client-local storage (the recent rooms list) so that
    nothing relies on ambient global state.
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
