from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from application.formatting import describe_payment, render_transfers
from application.room_history import RoomHistory
from domain.exceptions import RoomCodeExhaustedError
from domain.ledger import (
    RoundBalances,
    calculate_balances,
    calculate_round_balances,
    calculate_settlement,
)
from domain.models import (
    Balance,
    Participant,
    PaymentRecord,
    PlayerResult,
    Room,
    SettlementSnapshot,
    Transfer,
)
from domain.money import DEFAULT_LOCALE
from domain.repositories import (
    ParticipantRepository,
    PaymentRepository,
    RoomRepository,
    SettlementHistoryRepository,
)
from domain.room_code import generate_room_code, is_valid_room_code, normalize_room_code

logger = logging.getLogger(__name__)

AVATAR_EMOJIS = [
    "😀", "😎", "🤓", "😊", "🥳", "😇", "🤩", "😋",
    "🐶", "🐱", "🐼", "🐨", "🦊", "🦁", "🐯", "🐰",
    "🍀", "🌸", "🌺", "🌻", "🍎", "🍊", "🍋", "🍇",
    "⭐", "🌙", "🔥", "💎", "🎮", "🎲", "🃏", "🀄",
]

ROOM_CODE_ATTEMPTS = 5
SETTLEMENT_HISTORY_LIMIT = 10


@dataclass
class ExternalContext:
    """
    Information about the caller from a particular channel (Telegram, Discord).

    The application layer never depends on concrete SDK types; it only sees
    this small context object. The provider user ID doubles as the
    participant ID, so broadcasts can be delivered straight back to it.
    """

    provider: str
    provider_user_id: str
    display_name: str

    @property
    def participant_id(self) -> str:
        return self.provider_user_id


@dataclass
class BroadcastMessage:
    """A message that should be delivered to a particular participant."""

    user_id: str
    text: str


@dataclass
class OperationResult:
    """Generic result type for simple operations."""

    success: bool
    error_message: Optional[str] = None
    broadcasts: List[BroadcastMessage] = field(default_factory=list)


@dataclass
class RoomResult:
    """Result of creating or joining a room."""

    success: bool
    error_message: Optional[str] = None
    room: Optional[Room] = None
    participant: Optional[Participant] = None
    broadcasts: List[BroadcastMessage] = field(default_factory=list)


@dataclass
class InitiatePaymentResult:
    """Result of starting a payment: who may receive it."""

    success: bool
    error_message: Optional[str] = None
    payer: Optional[Participant] = None
    candidates: List[Participant] = field(default_factory=list)


@dataclass
class HistoryResult:
    success: bool
    error_message: Optional[str] = None
    snapshots: List[SettlementSnapshot] = field(default_factory=list)


@dataclass
class RoomSummary:
    room: Room
    participants: List[Participant]
    payments: List[PaymentRecord]
    balances: List[Balance]
    rounds: List[RoundBalances]
    transfers: List[Transfer]


@dataclass
class SummaryResult:
    success: bool
    error_message: Optional[str] = None
    summary: Optional[RoomSummary] = None
    broadcasts: List[BroadcastMessage] = field(default_factory=list)


def _validate_positive_amount(amount: int) -> Optional[str]:
    if amount <= 0:
        return "Amount must be greater than zero."
    return None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _broadcast_to(members: List[Participant], text: str) -> List[BroadcastMessage]:
    return [BroadcastMessage(user_id=m.id, text=text) for m in members]


def _resolve_membership(
    ctx: ExternalContext,
    rooms: RoomRepository,
    participants: ParticipantRepository,
) -> Tuple[Optional[Participant], Optional[Room], Optional[str]]:
    """Return (participant, room, error) for the caller's current room."""

    participant = participants.get_participant(ctx.participant_id)
    if participant is None or participant.room_id is None:
        return None, None, "You are not in a room. Use /new or /join first."

    room = rooms.get_room(participant.room_id)
    if room is None:
        return participant, None, "Room not found."

    return participant, room, None


def _enter_room(
    ctx: ExternalContext,
    room: Room,
    nickname: Optional[str],
    participants: ParticipantRepository,
) -> Participant:
    existing = participants.get_participant(ctx.participant_id)
    name = (nickname or "").strip() or (existing.name if existing else "") or ctx.display_name
    emoji = existing.emoji if existing else random.choice(AVATAR_EMOJIS)

    participant = Participant(
        id=ctx.participant_id,
        name=name,
        emoji=emoji,
        room_id=room.id,
        joined_at=_now(),
    )
    participants.save_participant(participant)
    return participant


def create_room(
    ctx: ExternalContext,
    nickname: Optional[str],
    rooms: RoomRepository,
    participants: ParticipantRepository,
    history: Optional[RoomHistory] = None,
    max_attempts: int = ROOM_CODE_ATTEMPTS,
) -> RoomResult:
    """
    Open a new room and seat the caller in it.

    Room codes are random, so a freshly generated code is checked against
    existing rooms and regenerated up to `max_attempts` times.
    """

    if not ((nickname or "").strip() or ctx.display_name.strip()):
        return RoomResult(success=False, error_message="Please enter a nickname.")

    for _ in range(max_attempts):
        code = generate_room_code()
        if rooms.get_room_by_code(code) is None:
            break
        logger.info("Room code %s already taken, regenerating", code)
    else:
        raise RoomCodeExhaustedError(f"No free room code after {max_attempts} attempts")

    room = Room(
        id=_new_id(),
        code=code,
        created_by=ctx.participant_id,
        current_round=1,
        created_at=_now(),
    )
    rooms.add_room(room)
    participant = _enter_room(ctx, room, nickname, participants)

    if history is not None:
        history.remember(participant.id, room, participant.name)

    logger.info("Room %s created by %s", room.code, participant.id)
    return RoomResult(success=True, room=room, participant=participant)


def join_room(
    ctx: ExternalContext,
    code: str,
    nickname: Optional[str],
    rooms: RoomRepository,
    participants: ParticipantRepository,
    history: Optional[RoomHistory] = None,
) -> RoomResult:
    """
    Join an existing room by its code.

    Other members of the room are notified.
    """

    if not is_valid_room_code(code):
        return RoomResult(success=False, error_message="Invalid room code.")

    room = rooms.get_room_by_code(normalize_room_code(code))
    if room is None:
        return RoomResult(success=False, error_message="Room not found.")

    participant = _enter_room(ctx, room, nickname, participants)

    if history is not None:
        history.remember(participant.id, room, participant.name)

    others = [m for m in participants.list_room_participants(room.id) if m.id != participant.id]
    text = f"{participant.emoji} {participant.name} joined room {room.code}"

    logger.info("%s joined room %s", participant.id, room.code)
    return RoomResult(
        success=True,
        room=room,
        participant=participant,
        broadcasts=_broadcast_to(others, text),
    )


def leave_room(
    ctx: ExternalContext,
    participants: ParticipantRepository,
) -> OperationResult:
    """
    Take the caller out of their room.

    Their payments stay in the log; balances are reported for current
    members only.
    """

    participant = participants.get_participant(ctx.participant_id)
    if participant is None or participant.room_id is None:
        return OperationResult(success=False, error_message="You are not in a room.")

    room_id = participant.room_id
    participants.clear_room(participant.id)

    remaining = participants.list_room_participants(room_id)
    text = f"{participant.name} left the room"

    logger.info("%s left room %s", participant.id, room_id)
    return OperationResult(success=True, broadcasts=_broadcast_to(remaining, text))


def initiate_payment(
    ctx: ExternalContext,
    amount: int,
    rooms: RoomRepository,
    participants: ParticipantRepository,
) -> InitiatePaymentResult:
    """
    Start a payment flow:
    - Resolve the payer and their room.
    - Return the other members of the room as possible payees.
    """

    error = _validate_positive_amount(amount)
    if error:
        return InitiatePaymentResult(success=False, error_message=error)

    payer, room, error = _resolve_membership(ctx, rooms, participants)
    if error:
        return InitiatePaymentResult(success=False, error_message=error)

    candidates = [m for m in participants.list_room_participants(room.id) if m.id != payer.id]
    if not candidates:
        return InitiatePaymentResult(
            success=False,
            error_message="No other players in this room to pay.",
            payer=payer,
        )

    return InitiatePaymentResult(success=True, payer=payer, candidates=candidates)


def record_payment(
    ctx: ExternalContext,
    payee_id: str,
    amount: int,
    rooms: RoomRepository,
    participants: ParticipantRepository,
    payments: PaymentRepository,
    locale: str = DEFAULT_LOCALE,
) -> OperationResult:
    """
    Record that the caller paid another member of their room.

    `amount` is in cents (interfaces parse user input with
    `parse_to_cents`). The payment is stamped with the room's current
    round and every member is notified.
    """

    error = _validate_positive_amount(amount)
    if error:
        return OperationResult(success=False, error_message=error)

    payer, room, error = _resolve_membership(ctx, rooms, participants)
    if error:
        return OperationResult(success=False, error_message=error)

    if payee_id == payer.id:
        return OperationResult(success=False, error_message="You cannot pay yourself.")

    payee = participants.get_participant(payee_id)
    if payee is None or payee.room_id != room.id:
        return OperationResult(success=False, error_message="Recipient is not in this room.")

    payment = PaymentRecord(
        payer_id=payer.id,
        payee_id=payee.id,
        amount=amount,
        round_num=room.current_round,
        id=_new_id(),
        room_id=room.id,
        created_by=ctx.participant_id,
        created_at=_now(),
    )
    payments.add_payment(payment)

    members = participants.list_room_participants(room.id)
    text = describe_payment(payment, {payer.id: payer.name, payee.id: payee.name}, locale)

    logger.info("Room %s: %s paid %s %d", room.code, payer.id, payee.id, amount)
    return OperationResult(success=True, broadcasts=_broadcast_to(members, text))


def delete_payment(
    ctx: ExternalContext,
    payment_id: str,
    participants: ParticipantRepository,
    payments: PaymentRepository,
    locale: str = DEFAULT_LOCALE,
) -> OperationResult:
    """Delete a payment. Only its payer or whoever recorded it may do so."""

    payment = payments.get_payment(payment_id)
    if payment is None:
        return OperationResult(success=False, error_message="Payment not found.")

    if ctx.participant_id not in (payment.payer_id, payment.created_by):
        return OperationResult(
            success=False,
            error_message="Only the payer or whoever recorded it can delete this payment.",
        )

    payments.delete_payment(payment_id)

    members = participants.list_room_participants(payment.room_id) if payment.room_id else []
    names = {m.id: m.name for m in members}
    text = "Deleted: " + describe_payment(payment, names, locale)

    logger.info("Payment %s deleted by %s", payment_id, ctx.participant_id)
    return OperationResult(success=True, broadcasts=_broadcast_to(members, text))


def undo_last_payment(
    ctx: ExternalContext,
    rooms: RoomRepository,
    participants: ParticipantRepository,
    payments: PaymentRepository,
    locale: str = DEFAULT_LOCALE,
) -> OperationResult:
    """Delete the most recent payment the caller made in their current room."""

    payer, room, error = _resolve_membership(ctx, rooms, participants)
    if error:
        return OperationResult(success=False, error_message=error)

    own = [p for p in payments.list_room_payments(room.id) if p.payer_id == payer.id]
    if not own:
        return OperationResult(success=False, error_message="You have no payments to undo.")

    return delete_payment(ctx, own[0].id, participants, payments, locale)


def start_new_round(
    ctx: ExternalContext,
    rooms: RoomRepository,
    participants: ParticipantRepository,
) -> OperationResult:
    """Advance the caller's room to the next round."""

    _, room, error = _resolve_membership(ctx, rooms, participants)
    if error:
        return OperationResult(success=False, error_message=error)

    next_round = room.current_round + 1
    rooms.set_current_round(room.id, next_round)

    members = participants.list_room_participants(room.id)
    logger.info("Room %s advanced to round %d", room.code, next_round)
    return OperationResult(
        success=True,
        broadcasts=_broadcast_to(members, f"Round {next_round} started."),
    )


def build_room_summary(
    room: Room,
    members: List[Participant],
    room_payments: List[PaymentRecord],
) -> RoomSummary:
    balances = calculate_balances(members, room_payments)
    return RoomSummary(
        room=room,
        participants=members,
        payments=room_payments,
        balances=balances,
        rounds=calculate_round_balances(members, room_payments, room.current_round),
        transfers=calculate_settlement(balances),
    )


def get_room_summary(
    ctx: ExternalContext,
    rooms: RoomRepository,
    participants: ParticipantRepository,
    payments: PaymentRepository,
) -> SummaryResult:
    """Compute balances, per-round totals and suggested transfers for the caller's room."""

    _, room, error = _resolve_membership(ctx, rooms, participants)
    if error:
        return SummaryResult(success=False, error_message=error)

    summary = build_room_summary(
        room,
        participants.list_room_participants(room.id),
        payments.list_room_payments(room.id),
    )
    return SummaryResult(success=True, summary=summary)


def settle_room(
    ctx: ExternalContext,
    rooms: RoomRepository,
    participants: ParticipantRepository,
    payments: PaymentRepository,
    history: SettlementHistoryRepository,
    locale: str = DEFAULT_LOCALE,
) -> SummaryResult:
    """
    Settle up the caller's room.

    Each member gets a settlement snapshot in their history, and the list
    of transfers is broadcast to everyone.
    """

    result = get_room_summary(ctx, rooms, participants, payments)
    if not result.success:
        return result

    summary = result.summary
    emojis = {m.id: m.emoji for m in summary.participants}
    player_results = [
        PlayerResult(
            participant_id=b.participant_id,
            name=b.participant_name,
            emoji=emojis.get(b.participant_id, ""),
            balance=b.balance,
        )
        for b in summary.balances
    ]

    settled_at = _now()
    for member in summary.participants:
        history.add_snapshot(
            SettlementSnapshot(
                id=_new_id(),
                participant_id=member.id,
                room_id=summary.room.id,
                room_code=summary.room.code,
                settled_at=settled_at,
                player_results=list(player_results),
            )
        )

    text = f"Settlement for room {summary.room.code}:\n" + render_transfers(
        summary.transfers, locale
    )

    logger.info(
        "Room %s settled: %d transfers for %d players",
        summary.room.code,
        len(summary.transfers),
        len(summary.participants),
    )
    result.broadcasts = _broadcast_to(summary.participants, text)
    return result


def get_settlement_history(
    ctx: ExternalContext,
    history: SettlementHistoryRepository,
    limit: Optional[int] = SETTLEMENT_HISTORY_LIMIT,
) -> HistoryResult:
    """
    Return the caller's past settlements, newest first.

    Works whether or not the caller is currently sitting in a room.
    """

    snapshots = history.list_snapshots(ctx.participant_id)
    if limit is not None:
        snapshots = snapshots[:limit]
    return HistoryResult(success=True, snapshots=snapshots)
