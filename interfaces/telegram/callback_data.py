from __future__ import annotations


def encode_close_confirmation(account_id: int, accepted: bool) -> str:
    """
    Encode a confirm/decline callback for closing an account.

    Format:
      close:yes:{account_id}
      close:no:{account_id}
    """

    answer = "yes" if accepted else "no"
    return f"close:{answer}:{account_id}"


def parse_close_confirmation(data: str) -> tuple[bool, int]:
    parts = data.split(":")
    if len(parts) != 3 or parts[0] != "close" or parts[1] not in ("yes", "no"):
        raise ValueError(f"Invalid close confirmation callback data: {data}")

    accepted = parts[1] == "yes"
    account_id = int(parts[2])
    return accepted, account_id
