import unittest

from domain.money import format_amount, format_balance, parse_to_cents


class ParseToCentsTests(unittest.TestCase):
    def test_plain_and_decimal_amounts(self):
        self.assertEqual(parse_to_cents("10"), 1000)
        self.assertEqual(parse_to_cents("10.5"), 1050)
        self.assertEqual(parse_to_cents("0.01"), 1)
        self.assertEqual(parse_to_cents(".5"), 50)
        self.assertEqual(parse_to_cents("10."), 1000)

    def test_non_numeric_characters_are_ignored(self):
        self.assertEqual(parse_to_cents("¥1,500.50"), 150050)
        self.assertEqual(parse_to_cents(" 12 元 "), 1200)

    def test_only_leading_number_counts(self):
        self.assertEqual(parse_to_cents("1.2.3"), 120)

    def test_very_long_amounts_are_exact(self):
        self.assertEqual(parse_to_cents("1" * 27), int("1" * 27) * 100)
        self.assertEqual(parse_to_cents("1" * 40 + ".015"), int("1" * 40) * 100 + 2)

    def test_rounds_half_up(self):
        self.assertEqual(parse_to_cents("10.005"), 1001)
        self.assertEqual(parse_to_cents("10.004"), 1000)
        self.assertEqual(parse_to_cents("0.005"), 1)

    def test_rejects_empty_and_unparseable(self):
        self.assertIsNone(parse_to_cents(""))
        self.assertIsNone(parse_to_cents("abc"))
        self.assertIsNone(parse_to_cents("."))

    def test_rejects_zero(self):
        self.assertIsNone(parse_to_cents("0"))
        self.assertIsNone(parse_to_cents("0.00"))
        self.assertIsNone(parse_to_cents("0.004"))

    def test_rejects_negative_input(self):
        self.assertIsNone(parse_to_cents("-5"))
        self.assertIsNone(parse_to_cents("¥-5.00"))
        self.assertIsNone(parse_to_cents(" -0.5"))

    def test_trailing_minus_is_just_noise(self):
        self.assertEqual(parse_to_cents("5-"), 500)


class FormatAmountTests(unittest.TestCase):
    def test_whole_amounts_have_no_decimals(self):
        self.assertEqual(format_amount(150000), "1,500")
        self.assertEqual(format_amount(0), "0")
        self.assertEqual(format_amount(100), "1")

    def test_fractional_amounts_have_two_decimals(self):
        self.assertEqual(format_amount(150050), "1,500.50")
        self.assertEqual(format_amount(5), "0.05")
        self.assertEqual(format_amount(150), "1.50")
        self.assertEqual(format_amount(123456789), "1,234,567.89")

    def test_negative_amounts(self):
        self.assertEqual(format_amount(-150000), "-1,500")
        self.assertEqual(format_amount(-150050), "-1,500.50")

    def test_other_locales(self):
        self.assertEqual(format_amount(150050, "de-DE"), "1.500,50")
        self.assertEqual(format_amount(150000, "de-DE"), "1.500")
        self.assertEqual(format_amount(150050, "fr-FR"), "1\u202f500,50")
        self.assertEqual(format_amount(150050, "en-US"), "1,500.50")

    def test_unknown_locale_falls_back(self):
        self.assertEqual(format_amount(150050, "xx-XX"), "1,500.50")

    def test_very_large_amounts_keep_their_cents(self):
        self.assertEqual(
            format_amount(10**30 + 1),
            "10,000,000,000,000,000,000,000,000,000.01",
        )
        self.assertEqual(parse_to_cents(format_amount(10**30 + 1)), 10**30 + 1)

    def test_format_then_parse_is_lossless(self):
        for cents in (1, 5, 99, 100, 150, 1999, 150000, 150050, 123456789):
            with self.subTest(cents=cents):
                self.assertEqual(parse_to_cents(format_amount(cents)), cents)


class FormatBalanceTests(unittest.TestCase):
    def test_signs(self):
        self.assertEqual(format_balance(150050), "+1,500.50")
        self.assertEqual(format_balance(-150000), "-1,500")
        self.assertEqual(format_balance(0), "0")

    def test_signed_value_parses_back_without_sign(self):
        self.assertEqual(parse_to_cents(format_balance(2550).lstrip("+")), 2550)


if __name__ == "__main__":
    unittest.main()
