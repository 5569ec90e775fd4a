from __future__ import annotations


def encode_pay_choice(payer_id: str, payee_id: str, amount: int) -> str:
    """
    Encode a "choose payee" callback.

    Format: pay:{payer_id}:{payee_id}:{amount_in_cents}

    The payer is carried along so that only the player who asked to pay
    can complete the choice; everyone in a group chat sees the keyboard.
    """

    return f"pay:{payer_id}:{payee_id}:{amount}"


def parse_pay_choice(data: str) -> tuple[str, str, int]:
    parts = data.split(":")
    if len(parts) != 4 or parts[0] != "pay" or not parts[1] or not parts[2]:
        raise ValueError(f"Invalid pay choice callback data: {data}")

    payer_id, payee_id = parts[1], parts[2]
    amount = int(parts[3])
    if amount <= 0:
        raise ValueError(f"Invalid pay choice amount: {data}")
    return payer_id, payee_id, amount


def encode_cancel(payer_id: str) -> str:
    return f"cancel:{payer_id}"


def is_cancel(data: str) -> bool:
    return data.startswith("cancel:")


def parse_cancel(data: str) -> str:
    prefix, _, payer_id = data.partition(":")
    if prefix != "cancel" or not payer_id:
        raise ValueError(f"Invalid cancel callback data: {data}")
    return payer_id
