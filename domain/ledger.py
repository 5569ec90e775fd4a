from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from .exceptions import UnknownParticipantError
from .models import Balance, Participant, PartyRef, PaymentRecord, Transfer


@dataclass
class RoundBalances:
    """Net amount per participant id for a single round."""

    round_num: int
    amounts: Dict[str, int] = field(default_factory=dict)


@dataclass
class _Position:
    party: PartyRef
    remaining: int


def _apply_payments(totals: Dict[str, int], payments: Iterable[PaymentRecord]) -> None:
    for payment in payments:
        totals[payment.payer_id] = totals.get(payment.payer_id, 0) - payment.amount
        totals[payment.payee_id] = totals.get(payment.payee_id, 0) + payment.amount


def calculate_balances(
    participants: Sequence[Participant],
    payments: Iterable[PaymentRecord],
    strict: bool = False,
) -> List[Balance]:
    """
    Reduce a payment log to one net balance per participant.

    The result has exactly one entry per participant, in roster order.
    Payments naming an id that is not on the roster are still applied to
    the running totals but that id is never reported, so the visible sum
    is no longer zero. Pass `strict=True` to raise
    `UnknownParticipantError` for such payments instead.
    """

    totals: Dict[str, int] = {p.id: 0 for p in participants}

    if strict:
        payments = list(payments)
        for payment in payments:
            for party_id in (payment.payer_id, payment.payee_id):
                if party_id not in totals:
                    raise UnknownParticipantError(party_id)

    _apply_payments(totals, payments)

    return [
        Balance(participant_id=p.id, participant_name=p.name, balance=totals[p.id])
        for p in participants
    ]


def calculate_round_balances(
    participants: Sequence[Participant],
    payments: Sequence[PaymentRecord],
    current_round: int = 1,
) -> List[RoundBalances]:
    """
    Break the payment log down into per-round net amounts.

    Rows are ordered by round number. Without any payments a single row
    for `current_round` is returned with every participant at zero.
    """

    round_nums = sorted({p.round_num for p in payments})
    if not round_nums:
        round_nums = [current_round]

    rows = []
    for round_num in round_nums:
        amounts = {p.id: 0 for p in participants}
        _apply_payments(amounts, (p for p in payments if p.round_num == round_num))
        rows.append(RoundBalances(round_num=round_num, amounts=amounts))
    return rows


def calculate_settlement(balances: Sequence[Balance]) -> List[Transfer]:
    """
    Produce the transfers that bring every balance to zero.

    Greedy matching: the largest remaining debtor pays the largest
    remaining creditor until one of them is square, then the cursor on
    the settled side moves on. Sorting is stable so equal amounts keep
    their input order, which makes the output deterministic.

    This yields at most (non-zero balances - 1) transfers; it is not
    guaranteed to be the global minimum. If the balances do not sum to
    zero the loop stops when either side runs out and the leftover is
    not represented.
    """

    creditors = sorted(
        (
            _Position(PartyRef(b.participant_id, b.participant_name), b.balance)
            for b in balances
            if b.balance > 0
        ),
        key=lambda pos: pos.remaining,
        reverse=True,
    )
    debtors = sorted(
        (
            _Position(PartyRef(b.participant_id, b.participant_name), -b.balance)
            for b in balances
            if b.balance < 0
        ),
        key=lambda pos: pos.remaining,
        reverse=True,
    )

    transfers: List[Transfer] = []
    creditor_idx = 0
    debtor_idx = 0

    while creditor_idx < len(creditors) and debtor_idx < len(debtors):
        creditor = creditors[creditor_idx]
        debtor = debtors[debtor_idx]

        amount = min(creditor.remaining, debtor.remaining)
        if amount > 0:
            transfers.append(
                Transfer(source=debtor.party, destination=creditor.party, amount=amount)
            )

        creditor.remaining -= amount
        debtor.remaining -= amount

        if creditor.remaining == 0:
            creditor_idx += 1
        if debtor.remaining == 0:
            debtor_idx += 1

    return transfers


def apply_transfers(
    balances: Sequence[Balance],
    transfers: Iterable[Transfer],
) -> Dict[str, int]:
    """Return the residual balance per participant id after paying `transfers`."""

    residual = {b.participant_id: b.balance for b in balances}
    for transfer in transfers:
        residual[transfer.source.id] = residual.get(transfer.source.id, 0) + transfer.amount
        residual[transfer.destination.id] = (
            residual.get(transfer.destination.id, 0) - transfer.amount
        )
    return residual
