"""Ledger domain specific exceptions."""


class LedgerError(Exception):
    """Base class for ledger domain errors."""


class UnknownParticipantError(LedgerError):
    """Raised by strict balance calculation when a payment names an absent participant."""

    def __init__(self, participant_id: str) -> None:
        super().__init__(f"Payment references unknown participant {participant_id!r}")
        self.participant_id = participant_id


class RoomCodeExhaustedError(LedgerError):
    """Raised when no unused room code could be generated."""
