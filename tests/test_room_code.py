import unittest

from domain.room_code import (
    ROOM_CODE_ALPHABET,
    generate_room_code,
    is_valid_room_code,
    normalize_room_code,
)


class RoomCodeTests(unittest.TestCase):
    def test_generated_codes_use_restricted_alphabet(self):
        for _ in range(200):
            code = generate_room_code()
            self.assertEqual(len(code), 6)
            self.assertTrue(set(code) <= set(ROOM_CODE_ALPHABET))

    def test_alphabet_excludes_ambiguous_characters(self):
        for ch in "0O1Il":
            self.assertNotIn(ch, ROOM_CODE_ALPHABET)

    def test_custom_length(self):
        self.assertEqual(len(generate_room_code(8)), 8)

    def test_normalize_and_validate(self):
        self.assertEqual(normalize_room_code(" k7qxpd "), "K7QXPD")
        self.assertTrue(is_valid_room_code("k7qxpd"))
        self.assertFalse(is_valid_room_code("K7QXP"))
        self.assertFalse(is_valid_room_code("K7QXP0"))
        self.assertFalse(is_valid_room_code(""))


if __name__ == "__main__":
    unittest.main()
