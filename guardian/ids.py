"""Identifier and timestamp helpers."""

import secrets
import string
from datetime import datetime

_ALPHABET = string.ascii_lowercase + string.digits


def new_id(length: int = 9) -> str:
    # short random base36 identifier
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")
