"""
Cup count to price lookup.

Exact tier first, then the nearest tier above the count, then the largest
tier when the count is beyond every threshold. Cost is capped at the top
tier, never extrapolated.
"""
from collections.abc import Mapping
from decimal import Decimal, ROUND_HALF_UP

from core.exceptions import ValidationError

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def _normalize(tier_table):
    pairs = tier_table.items() if isinstance(tier_table, Mapping) else tier_table
    return sorted((int(threshold), to_money(price)) for threshold, price in pairs)


def price_for(point_count: int, tier_table) -> Decimal:
    if point_count < 0:
        raise ValidationError("Point count cannot be negative")
    if point_count == 0:
        return ZERO

    tiers = _normalize(tier_table)
    if not tiers:
        raise ValidationError("No active cup price tiers are configured")

    for threshold, price in tiers:
        if threshold >= point_count:
            return price

    return tiers[-1][1]
