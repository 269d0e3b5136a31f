from __future__ import annotations

import re
from typing import Any

# Last run of digits in the string; composite display ids carry the key at the end.
_LAST_DIGITS_RE = re.compile(r"(\d+)(?!.*\d)", re.DOTALL)


def normalize_identifier(value: Any) -> int | None:
    """Return the canonical numeric identifier, or ``None`` when unresolvable.

    >>> normalize_identifier("ORD-2024-00042")
    42
    >>> normalize_identifier(7)
    7
    >>> normalize_identifier("no-digits") is None
    True
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        match = _LAST_DIGITS_RE.search(value)
        return int(match.group(1)) if match else None
    return None
