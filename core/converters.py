import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

def round_half_away(value: float, decimals: int = 3) -> float:
    """
    Rounds to `decimals` places, ties away from zero (2.0005 -> 2.001, -2.0005 -> -2.001).
    Goes through the shortest repr so binary noise does not decide the tie.
    """
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    # Normalise -0.0
    return float(rounded) + 0.0

def kw_to_amps(power_kw: float, voltage: float, phases: int) -> float:
    """Line current for a real power figure: I = P/V (1Ph) or P/(sqrt(3)*V) (3Ph)."""
    watts = power_kw * 1000.0
    if phases == 3:
        return watts / (math.sqrt(3) * voltage)
    return watts / voltage

def to_number(value: Any) -> Optional[float]:
    """
    Converts a raw load value to float.
    Returns None when the value cannot be read as a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
