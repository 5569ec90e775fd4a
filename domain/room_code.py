from __future__ import annotations

import secrets

# No 0/O or 1/I/l, which are easy to misread when a code is read aloud.
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    """
    Return a random room code such as "K7QXPD".

    Duplicates are possible; callers check for an existing room and
    retry.
    """

    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def normalize_room_code(text: str) -> str:
    return text.strip().upper()


def is_valid_room_code(text: str, length: int = ROOM_CODE_LENGTH) -> bool:
    code = normalize_room_code(text)
    return len(code) == length and all(ch in ROOM_CODE_ALPHABET for ch in code)
