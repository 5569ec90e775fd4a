import unittest

from interfaces.telegram.callback_data import (
    encode_cancel,
    encode_pay_choice,
    is_cancel,
    parse_cancel,
    parse_pay_choice,
)


class CallbackDataTests(unittest.TestCase):
    def test_pay_choice_carries_payer(self):
        data = encode_pay_choice("12345", "67890", 1050)
        self.assertEqual(data, "pay:12345:67890:1050")
        self.assertEqual(parse_pay_choice(data), ("12345", "67890", 1050))

    def test_pay_choice_fits_telegram_limit(self):
        # Telegram caps callback_data at 64 bytes.
        data = encode_pay_choice("9" * 19, "9" * 19, 10**18)
        self.assertLessEqual(len(data.encode("utf-8")), 64)

    def test_malformed_pay_choice(self):
        for data in ("pay:1", "pay:67890:1050", "from:1:2:3", "pay:1:2:abc", "pay:1:2:0", "pay::2:5"):
            with self.subTest(data=data):
                with self.assertRaises(ValueError):
                    parse_pay_choice(data)

    def test_cancel_carries_payer(self):
        data = encode_cancel("12345")
        self.assertTrue(is_cancel(data))
        self.assertEqual(parse_cancel(data), "12345")
        self.assertFalse(is_cancel("pay:1:2:3"))
        with self.assertRaises(ValueError):
            parse_cancel("cancel:")


if __name__ == "__main__":
    unittest.main()
