from __future__ import annotations

from typing import Dict, List, Sequence

from domain.ledger import RoundBalances
from domain.models import Balance, Participant, PaymentRecord, SettlementSnapshot, Transfer
from domain.money import DEFAULT_LOCALE, format_amount, format_balance


def render_balances(balances: Sequence[Balance], locale: str = DEFAULT_LOCALE) -> str:
    """Balances as text lines, winners first."""

    if not balances:
        return "No players in this room yet."

    ordered = sorted(balances, key=lambda b: b.balance, reverse=True)
    return "\n".join(
        f"{b.participant_name}: {format_balance(b.balance, locale)}" for b in ordered
    )


def render_transfers(transfers: Sequence[Transfer], locale: str = DEFAULT_LOCALE) -> str:
    if not transfers:
        return "Everyone is settled."

    return "\n".join(
        f"{t.source.name} -> {t.destination.name}: {format_amount(t.amount, locale)}"
        for t in transfers
    )


def render_rounds(
    rounds: Sequence[RoundBalances],
    participants: Sequence[Participant],
    locale: str = DEFAULT_LOCALE,
) -> str:
    """One line per round: "R1  Alice +10 | Bob -10"."""

    names: Dict[str, str] = {p.id: p.name for p in participants}
    lines: List[str] = []
    for row in rounds:
        cells = [
            f"{names.get(pid, pid)} {format_balance(amount, locale)}"
            for pid, amount in row.amounts.items()
            if pid in names
        ]
        lines.append(f"R{row.round_num}  " + " | ".join(cells))
    return "\n".join(lines)


def describe_payment(
    payment: PaymentRecord,
    names: Dict[str, str],
    locale: str = DEFAULT_LOCALE,
) -> str:
    payer = names.get(payment.payer_id, "Someone")
    payee = names.get(payment.payee_id, "someone")
    return f"{payer} paid {payee} {format_amount(payment.amount, locale)} (round {payment.round_num})"


def render_settlement_history(
    snapshots: Sequence[SettlementSnapshot],
    locale: str = DEFAULT_LOCALE,
) -> str:
    """
    Past settlements, one block per room:

        K7QXPD  2024-01-01 20:15
          🐼 Alice +7
          😀 Bob -7
    """

    if not snapshots:
        return "No settlements yet."

    blocks: List[str] = []
    for snapshot in snapshots:
        settled_at = snapshot.settled_at[:16].replace("T", " ")
        lines = [f"{snapshot.room_code}  {settled_at}"]
        ordered = sorted(snapshot.player_results, key=lambda r: r.balance, reverse=True)
        lines.extend(
            "  " + " ".join(part for part in (r.emoji, r.name, format_balance(r.balance, locale)) if part)
            for r in ordered
        )
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
