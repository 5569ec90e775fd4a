from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_EMOJI = "😀"


@dataclass
class Participant:
    """
    Domain representation of a player sitting in a room.

    The ledger functions only read `id` and `name`; the rest is
    presentation and membership metadata owned by the persistence layer.
    """

    id: str
    name: str
    emoji: str = DEFAULT_EMOJI
    room_id: Optional[str] = None
    joined_at: Optional[str] = None


@dataclass(frozen=True)
class PaymentRecord:
    """
    A committed payment from one player to another within one round.

    Amounts are integer minor units (cents / fen). Records are never
    edited; deleting one simply removes it from later computations.
    """

    payer_id: str
    payee_id: str
    amount: int
    round_num: int = 1
    id: Optional[str] = None
    room_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Balance:
    """Net position of a participant: positive is owed to them, negative is owed by them."""

    participant_id: str
    participant_name: str
    balance: int


@dataclass(frozen=True)
class PartyRef:
    id: str
    name: str


@dataclass(frozen=True)
class Transfer:
    """A recommended settling payment from `source` to `destination`."""

    source: PartyRef
    destination: PartyRef
    amount: int


@dataclass
class Room:
    """A game sitting scoping a set of participants and their payments."""

    id: str
    code: str
    created_by: str
    current_round: int = 1
    created_at: Optional[str] = None


@dataclass(frozen=True)
class PlayerResult:
    participant_id: str
    name: str
    emoji: str
    balance: int


@dataclass
class SettlementSnapshot:
    """
    Per-user record of a settled room.

    The player results are copied at settlement time so the record
    survives members leaving the room or payments being deleted later.
    """

    id: str
    participant_id: str
    room_id: str
    room_code: str
    settled_at: str
    player_results: List[PlayerResult] = field(default_factory=list)


@dataclass
class RecentRoom:
    """An entry of the locally remembered "recent rooms" list."""

    room_id: str
    code: str
    player_name: Optional[str]
    last_visited: str
