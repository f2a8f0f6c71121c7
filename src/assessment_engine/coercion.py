"""Numeric coercion for constraint fields and numeric answers.

Form inputs deliver numbers as text.  ``to_number`` turns such input into
an ``int`` (when integral) or ``float``:

    to_number("12")   -> 12
    to_number(" 2.5") -> 2.5
    to_number("")     -> None      (blank means absent)
    to_number("abc")  -> ValueError

Booleans and non-finite values are rejected.
"""

from __future__ import annotations

import math
from typing import Any


def to_number(value: Any) -> int | float | None:
    """Coerce ``value`` to a finite number; None/blank → None, garbage → ValueError."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            num = float(text)
        except ValueError:
            raise ValueError(f"not a number: {value!r}") from None
    else:
        raise ValueError(f"not a number: {value!r}")

    if not math.isfinite(num):
        raise ValueError(f"not a finite number: {value!r}")
    if num.is_integer():
        return int(num)
    return num


def bound_or_none(value: Any) -> int | float | None:
    """Like :func:`to_number` but unparseable input is treated as "no bound".

    Used while evaluating a working copy whose constraints have not been
    coerced yet.
    """
    try:
        return to_number(value)
    except ValueError:
        return None
