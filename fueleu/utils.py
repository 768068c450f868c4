"""Numeric helpers shared by the compliance engine."""

from decimal import Decimal, ROUND_HALF_UP, localcontext


def round_half_away(value: float, decimals: int = 5) -> float:
    """Round half away from zero at a fixed number of decimal places.

    Goes through the shortest float repr so that 0.125 rounds to 0.13
    instead of suffering binary representation drift. Precision grows with
    the magnitude of the value, so very large balances quantize cleanly.
    """
    exact = Decimal(repr(float(value)))
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + decimals + 3)
        rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)
    result = float(rounded)
    # no -0.0 in stored records
    return 0.0 if result == 0 else result
