from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, Decimal]

def to_decimal(value: Number) -> Decimal:
    # str() keeps 70.1 as 70.1 instead of its binary expansion
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def round_half_up(value: Number, places: int = 0) -> Decimal:
    """Rounds half away from zero, the way grades have always been rounded."""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)

def percentage(part: int, whole: int) -> float:
    """part / whole * 100 to two decimals, 0 when whole is 0."""
    if whole <= 0:
        return 0
    return float(round_half_up(Decimal(part) * 100 / Decimal(whole), 2))
