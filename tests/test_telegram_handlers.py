import unittest
from unittest import mock

from interfaces.telegram.callback_data import encode_cancel, encode_pay_choice
from interfaces.telegram.handlers import create_telegram_bot


def _callback(data: str, user_id: int):
    call = mock.Mock()
    call.id = "cb-1"
    call.data = data
    call.from_user.id = user_id
    call.from_user.first_name = "Mallory"
    call.from_user.last_name = None
    call.message.chat.id = -100
    call.message.id = 42
    return call


class PayChoiceCallbackTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repos = mock.Mock()
        self.bot = create_telegram_bot("123456:TEST-TOKEN", self.repos)
        self.handlers = {
            h["function"].__name__: h["function"] for h in self.bot.callback_query_handlers
        }

    def test_other_player_cannot_choose_payee(self):
        call = _callback(encode_pay_choice("111", "222", 500), user_id=333)
        with mock.patch.object(self.bot, "answer_callback_query") as answer, \
                mock.patch.object(self.bot, "delete_message") as delete, \
                mock.patch("interfaces.telegram.handlers.record_payment") as record:
            self.handlers["handle_pay_choice"](call)

        answer.assert_called_once()
        self.assertEqual(answer.call_args.args[0], "cb-1")
        record.assert_not_called()
        delete.assert_not_called()

    def test_payer_choice_is_recorded(self):
        call = _callback(encode_pay_choice("111", "222", 500), user_id=111)
        record_result = mock.Mock(success=True, broadcasts=[])
        with mock.patch.object(self.bot, "answer_callback_query") as answer, \
                mock.patch.object(self.bot, "delete_message") as delete, \
                mock.patch("interfaces.telegram.handlers.record_payment", return_value=record_result) as record:
            self.handlers["handle_pay_choice"](call)

        answer.assert_not_called()
        record.assert_called_once()
        ctx, payee_id, amount = record.call_args.args[:3]
        self.assertEqual(ctx.participant_id, "111")
        self.assertEqual((payee_id, amount), ("222", 500))
        delete.assert_called_once_with(-100, 42)

    def test_other_player_cannot_cancel(self):
        call = _callback(encode_cancel("111"), user_id=333)
        with mock.patch.object(self.bot, "answer_callback_query") as answer, \
                mock.patch.object(self.bot, "delete_message") as delete:
            self.handlers["handle_cancel"](call)

        answer.assert_called_once()
        delete.assert_not_called()


if __name__ == "__main__":
    unittest.main()
