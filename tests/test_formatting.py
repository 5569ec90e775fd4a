import unittest

from application.formatting import (
    describe_payment,
    render_balances,
    render_rounds,
    render_settlement_history,
    render_transfers,
)
from domain.ledger import RoundBalances
from domain.models import Balance, Participant, PartyRef, PaymentRecord, PlayerResult, SettlementSnapshot, Transfer


class FormattingTests(unittest.TestCase):
    def test_balances_winners_first(self):
        balances = [
            Balance("1", "Alice", -1500),
            Balance("2", "Bob", 100050),
            Balance("3", "Carol", 0),
        ]
        self.assertEqual(
            render_balances(balances),
            "Bob: +1,000.50\nCarol: 0\nAlice: -15",
        )
        self.assertEqual(render_balances([]), "No players in this room yet.")

    def test_transfers(self):
        transfers = [Transfer(PartyRef("1", "Alice"), PartyRef("2", "Bob"), 150000)]
        self.assertEqual(render_transfers(transfers), "Alice -> Bob: 1,500")
        self.assertEqual(render_transfers([]), "Everyone is settled.")

    def test_rounds_skip_departed_players(self):
        players = [Participant(id="1", name="Alice"), Participant(id="2", name="Bob")]
        rows = [RoundBalances(round_num=1, amounts={"1": -100, "2": 50, "ghost": 50})]
        self.assertEqual(render_rounds(rows, players), "R1  Alice -1 | Bob +0.50")

    def test_describe_payment(self):
        payment = PaymentRecord(payer_id="1", payee_id="2", amount=2000, round_num=3)
        self.assertEqual(
            describe_payment(payment, {"1": "Alice", "2": "Bob"}, "de-DE"),
            "Alice paid Bob 20 (round 3)",
        )

    def test_settlement_history_blocks(self):
        snapshot = SettlementSnapshot(
            id="s1",
            participant_id="1",
            room_id="r1",
            room_code="K7QXPD",
            settled_at="2024-01-01T20:15:42.123456+00:00",
            player_results=[
                PlayerResult("1", "Alice", "\U0001F43C", -700),
                PlayerResult("2", "Bob", "", 700),
            ],
        )
        self.assertEqual(
            render_settlement_history([snapshot, snapshot]),
            "K7QXPD  2024-01-01 20:15\n  Bob +7\n  \U0001F43C Alice -7\n\n"
            "K7QXPD  2024-01-01 20:15\n  Bob +7\n  \U0001F43C Alice -7",
        )
        self.assertEqual(render_settlement_history([]), "No settlements yet.")


if __name__ == "__main__":
    unittest.main()
