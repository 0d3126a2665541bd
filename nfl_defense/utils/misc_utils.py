# nfl_defense/utils/misc_utils.py
import math
from decimal import Context, Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

# Wide enough to quantize any finite float (up to ~309 integer digits) to 0.1
_ROUNDING_CONTEXT = Context(prec=400)


def to_number(value: Any) -> Optional[float]:
    """Parses an upstream stat value into a finite float, or None.

    Accepts ints, floats and numeric strings such as "4,012" or "19.9".
    Integers too large for a float are rejected like any other garbage.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except (ValueError, OverflowError):
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def round_one(value: float) -> float:
    """Rounds half-up to one decimal place (19.95 -> 20.0, not banker's rounding).

    Non-finite input has no decimal form and comes back as 0.0.
    """
    try:
        return float(
            Decimal(repr(value)).quantize(
                Decimal("0.1"), rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT
            )
        )
    except InvalidOperation:
        return 0.0


def per_game(total: float, games_played: float) -> float:
    """Season total divided by games played, rounded to one decimal."""
    if games_played <= 0:
        return 0.0
    return round_one(total / games_played)
