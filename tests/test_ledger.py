import unittest

from domain.exceptions import UnknownParticipantError
from domain.ledger import (
    apply_transfers,
    calculate_balances,
    calculate_round_balances,
    calculate_settlement,
)
from domain.models import Balance, Participant, PaymentRecord


def _balances(**amounts):
    return [Balance(participant_id=k, participant_name=k.upper(), balance=v) for k, v in amounts.items()]


def _flows(transfers):
    return [(t.source.id, t.destination.id, t.amount) for t in transfers]


class CalculateBalancesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.players = [
            Participant(id="a", name="Alice"),
            Participant(id="b", name="Bob"),
            Participant(id="c", name="Carol"),
        ]

    def test_empty_inputs(self):
        self.assertEqual(calculate_balances([], []), [])

    def test_payer_loses_and_payee_gains(self):
        payments = [
            PaymentRecord(payer_id="a", payee_id="b", amount=1000),
            PaymentRecord(payer_id="a", payee_id="c", amount=500),
        ]
        balances = calculate_balances(self.players, payments)

        self.assertEqual(
            [(b.participant_id, b.participant_name, b.balance) for b in balances],
            [("a", "Alice", -1500), ("b", "Bob", 1000), ("c", "Carol", 500)],
        )

    def test_balances_sum_to_zero(self):
        payments = [
            PaymentRecord(payer_id="a", payee_id="b", amount=1234, round_num=1),
            PaymentRecord(payer_id="b", payee_id="c", amount=99, round_num=1),
            PaymentRecord(payer_id="c", payee_id="a", amount=4321, round_num=2),
            PaymentRecord(payer_id="b", payee_id="a", amount=1, round_num=3),
        ]
        balances = calculate_balances(self.players, payments)
        self.assertEqual(sum(b.balance for b in balances), 0)

    def test_result_does_not_depend_on_payment_order(self):
        payments = [
            PaymentRecord(payer_id="a", payee_id="b", amount=300),
            PaymentRecord(payer_id="c", payee_id="a", amount=700),
            PaymentRecord(payer_id="b", payee_id="c", amount=50),
        ]
        self.assertEqual(
            calculate_balances(self.players, payments),
            calculate_balances(self.players, list(reversed(payments))),
        )

    def test_players_without_payments_are_reported_at_zero(self):
        balances = calculate_balances(self.players, [])
        self.assertEqual([b.balance for b in balances], [0, 0, 0])

    def test_unknown_participant_is_tolerated_but_not_reported(self):
        payments = [PaymentRecord(payer_id="ghost", payee_id="a", amount=800)]
        balances = calculate_balances(self.players, payments)

        self.assertEqual(len(balances), 3)
        self.assertEqual(balances[0].balance, 800)
        # The ghost's -800 is applied but dropped from the visible list.
        self.assertEqual(sum(b.balance for b in balances), 800)

    def test_strict_mode_raises_for_unknown_participant(self):
        payments = [
            PaymentRecord(payer_id="a", payee_id="b", amount=100),
            PaymentRecord(payer_id="a", payee_id="ghost", amount=100),
        ]
        with self.assertRaises(UnknownParticipantError) as cm:
            calculate_balances(self.players, payments, strict=True)
        self.assertEqual(cm.exception.participant_id, "ghost")

    def test_strict_mode_accepts_generator_input(self):
        payments = (p for p in [PaymentRecord(payer_id="b", payee_id="c", amount=40)])
        balances = calculate_balances(self.players, payments, strict=True)
        self.assertEqual([b.balance for b in balances], [0, -40, 40])

    def test_self_payment_does_not_crash(self):
        payments = [PaymentRecord(payer_id="a", payee_id="a", amount=500)]
        balances = calculate_balances(self.players, payments)
        self.assertEqual([b.balance for b in balances], [0, 0, 0])


class CalculateSettlementTests(unittest.TestCase):
    def test_single_debtor_pays_every_creditor(self):
        transfers = calculate_settlement(_balances(a=-1500, b=1000, c=500))
        self.assertEqual(_flows(transfers), [("a", "b", 1000), ("a", "c", 500)])
        self.assertEqual(transfers[0].source.name, "A")
        self.assertEqual(transfers[0].destination.name, "B")

    def test_largest_creditor_is_paid_first(self):
        transfers = calculate_settlement(_balances(a=-700, b=300, c=400))
        self.assertEqual(_flows(transfers), [("a", "c", 400), ("a", "b", 300)])

    def test_empty_and_all_zero(self):
        self.assertEqual(calculate_settlement([]), [])
        self.assertEqual(calculate_settlement(_balances(a=0, b=0)), [])

    def test_single_nonzero_balance_produces_nothing(self):
        self.assertEqual(calculate_settlement(_balances(a=500, b=0)), [])
        self.assertEqual(calculate_settlement(_balances(a=-500)), [])

    def test_ties_keep_input_order(self):
        transfers = calculate_settlement(_balances(a=500, b=500, c=-500, d=-500))
        self.assertEqual(_flows(transfers), [("c", "a", 500), ("d", "b", 500)])

        transfers = calculate_settlement(_balances(b=500, a=500, d=-500, c=-500))
        self.assertEqual(_flows(transfers), [("d", "b", 500), ("c", "a", 500)])

    def test_partial_matches_carry_over(self):
        transfers = calculate_settlement(_balances(a=-300, b=-200, c=250, d=250))
        self.assertEqual(
            _flows(transfers),
            [("a", "c", 250), ("a", "d", 50), ("b", "d", 200)],
        )

    def test_transfer_count_is_bounded(self):
        balances = _balances(a=-900, b=-50, c=-50, d=400, e=350, f=250)
        transfers = calculate_settlement(balances)
        nonzero = [b for b in balances if b.balance]
        self.assertLessEqual(len(transfers), len(nonzero) - 1)
        self.assertTrue(all(t.amount > 0 for t in transfers))

    def test_transfers_settle_every_balance(self):
        players = [Participant(id=pid, name=pid) for pid in "abcde"]
        payments = [
            PaymentRecord(payer_id="a", payee_id="b", amount=1250),
            PaymentRecord(payer_id="c", payee_id="b", amount=300),
            PaymentRecord(payer_id="d", payee_id="e", amount=725),
            PaymentRecord(payer_id="e", payee_id="a", amount=100),
            PaymentRecord(payer_id="b", payee_id="d", amount=5),
        ]
        balances = calculate_balances(players, payments)
        transfers = calculate_settlement(balances)

        residual = apply_transfers(balances, transfers)
        self.assertEqual(set(residual.values()), {0})

    def test_repeated_calls_are_identical(self):
        balances = _balances(a=-400, b=-400, c=200, d=200, e=400)
        first = calculate_settlement(balances)
        for _ in range(5):
            self.assertEqual(calculate_settlement(balances), first)

    def test_unbalanced_input_stops_when_one_side_runs_out(self):
        transfers = calculate_settlement(_balances(a=1000, b=-300))
        self.assertEqual(_flows(transfers), [("b", "a", 300)])

    def test_input_is_not_mutated(self):
        balances = _balances(a=-700, b=300, c=400)
        calculate_settlement(balances)
        self.assertEqual([b.balance for b in balances], [-700, 300, 400])


class CalculateRoundBalancesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.players = [Participant(id=pid, name=pid) for pid in "abc"]

    def test_no_payments_gives_one_empty_row_for_current_round(self):
        rows = calculate_round_balances(self.players, [], current_round=3)
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].round_num, 3)
        self.assertEqual(rows[0].amounts, {"a": 0, "b": 0, "c": 0})

    def test_rows_per_round_in_ascending_order(self):
        payments = [
            PaymentRecord(payer_id="c", payee_id="a", amount=20, round_num=2),
            PaymentRecord(payer_id="a", payee_id="b", amount=100, round_num=1),
            PaymentRecord(payer_id="b", payee_id="a", amount=30, round_num=2),
        ]
        rows = calculate_round_balances(self.players, payments)

        self.assertEqual([r.round_num for r in rows], [1, 2])
        self.assertEqual(rows[0].amounts, {"a": -100, "b": 100, "c": 0})
        self.assertEqual(rows[1].amounts, {"a": 50, "b": -30, "c": -20})

    def test_skipped_rounds_are_not_invented(self):
        payments = [
            PaymentRecord(payer_id="a", payee_id="b", amount=10, round_num=1),
            PaymentRecord(payer_id="a", payee_id="b", amount=10, round_num=4),
        ]
        rows = calculate_round_balances(self.players, payments)
        self.assertEqual([r.round_num for r in rows], [1, 4])


if __name__ == "__main__":
    unittest.main()
