"""
Payment settlement.

Completing a payment, consuming the coupon and moving the patient to
``paid_assigned`` form one unit of work: they commit together or not at all.
"""
import logging
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.utils import timezone

from core.exceptions import PersistenceError, ValidationError
from patients import lifecycle
from patients.models import PatientStatus
from patients.partitions import resolver
from pricing.discounts import coupon_amount
from pricing.engine import ZERO, to_money
from .models import Payment

logger = logging.getLogger(__name__)

METHODS = {choice for choice, _ in Payment.METHOD_CHOICES}


def _split_part(value):
    try:
        amount = Decimal(str(value)) if value not in (None, '') else ZERO
    except ArithmeticError:
        raise ValidationError("Split amounts must be numbers")
    if not amount.is_finite() or amount != to_money(amount):
        raise ValidationError("Split amounts must have at most two decimal places")
    return amount


def split_components(method_details, final_price):
    """Validated ``(cash, card)`` for a split payment; the sum must match exactly."""
    details = method_details or {}
    cash = _split_part(details.get('cash_amount'))
    card = _split_part(details.get('card_amount'))
    due = to_money(final_price)

    if cash < 0 or card < 0:
        raise ValidationError("Split amounts cannot be negative")
    if cash <= 0 and card <= 0:
        raise ValidationError("At least one split amount must be greater than zero")
    if cash + card != due:
        raise ValidationError(f"Cash ({cash}) and card ({card}) must add up to the amount due ({due})")
    return to_money(cash), to_money(card)


def method_components(method, method_details, final_price):
    if method not in METHODS:
        raise ValidationError(f"Unsupported payment method: {method!r}")
    if method == Payment.METHOD_SPLIT:
        return split_components(method_details, final_price)
    if method == Payment.METHOD_CASH:
        return final_price, None
    if method == Payment.METHOD_CARD:
        return None, final_price
    return None, None


def settle(payment, method, method_details, final_price, coupon=None, doctor=None, taxable=False,
           manual_discount=ZERO):
    """
    Complete ``payment`` and hand the patient to ``doctor``.

    Input problems raise ``ValidationError``/``NotFoundError`` before any
    write. A database failure rolls everything back and raises
    ``PersistenceError``.
    """
    final_price = to_money(final_price)
    if final_price < 0:
        raise ValidationError("Final price cannot be negative")
    if doctor is None:
        raise ValidationError("A doctor is required to settle a payment")
    cash, card = method_components(method, method_details, final_price)
    if coupon is not None:
        reason = coupon.rejection_reason()
        if reason:
            raise ValidationError(reason)

    try:
        with transaction.atomic():
            locked = Payment.objects.select_for_update().get(pk=payment.pk)
            if locked.status != Payment.STATUS_PENDING:
                raise ValidationError(f"Payment {locked.pk} is already {locked.status}")

            record = resolver.lock(locked.partition, locked.patient_id)
            lifecycle.ensure_transition(record, PatientStatus.PAID_ASSIGNED)

            if coupon is not None and not coupon.redeem():
                raise ValidationError("Coupon usage limit reached")

            locked.amount = final_price
            locked.manual_discount = to_money(manual_discount or ZERO)
            locked.coupon_discount = coupon_amount(locked.base_amount, coupon)
            locked.coupon = coupon
            locked.doctor = doctor
            locked.is_taxable = bool(taxable)
            locked.payment_method = method
            locked.cash_amount = cash
            locked.card_amount = card
            locked.status = Payment.STATUS_COMPLETED
            locked.paid_at = timezone.now()
            locked.save(update_fields=[
                'amount', 'manual_discount', 'coupon_discount', 'coupon', 'doctor', 'is_taxable',
                'payment_method', 'cash_amount', 'card_amount', 'status', 'paid_at', 'updated_at',
            ])

            lifecycle.assign_after_payment(record, doctor)
    except DatabaseError as exc:
        logger.exception("Settlement of payment %s failed; nothing was committed", payment.pk)
        raise PersistenceError(f"Payment {payment.pk} could not be settled; please resubmit") from exc

    logger.info(
        "payment %s settled: %s via %s (coupon=%s, taxable=%s)",
        locked.pk, locked.amount, method, coupon.code if coupon else None, locked.is_taxable,
    )
    return locked
