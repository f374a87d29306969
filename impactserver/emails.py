"""E-mail address validation."""

import re

_EMAIL = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+\\/=?^_{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)


def is_valid_email(email: str) -> bool:
    """True if the address has a valid structure and length."""
    size = len(email.encode("utf-8"))
    if size < 3 or size > 254:
        return False
    return _EMAIL.fullmatch(email) is not None