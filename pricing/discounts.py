from decimal import Decimal

from core.exceptions import ValidationError
from .engine import ZERO, to_money


def coupon_amount(base_price, coupon=None) -> Decimal:
    if coupon is None:
        return ZERO
    value = Decimal(str(coupon.discount_value))
    if coupon.discount_type == 'percentage':
        return to_money(Decimal(str(base_price)) * value / Decimal('100'))
    if coupon.discount_type == 'fixed':
        return to_money(value)
    raise ValidationError(f"Unknown coupon discount type: {coupon.discount_type}")


def apply_discounts(base_price, manual_discount=ZERO, coupon=None) -> Decimal:
    """
    Both discounts are taken from the original base price, so a percentage
    coupon never compounds on an already reduced amount. Floors at zero.
    """
    base = to_money(base_price)
    manual = to_money(manual_discount or ZERO)
    if manual < 0:
        raise ValidationError("Manual discount cannot be negative")

    final = base - coupon_amount(base, coupon) - manual
    return max(ZERO, final)
