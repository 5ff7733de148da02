"""
Invoice synthesis for settled payments.

An invoice is derived, never stored: the same completed payment always
yields the same invoice. The scannable payload format is pluggable through
the ``INVOICE_PAYLOAD_FORMAT`` setting.
"""
import base64
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from core.exceptions import ValidationError
from pricing.engine import ZERO, to_money
from .utils import get_seller_name, get_vat_number


@dataclass(frozen=True)
class Invoice:
    invoice_number: str
    payment_id: str
    issued_at: datetime
    issue_date: date
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    is_taxable: bool
    seller_name: str
    vat_number: str
    payload: str


class TextPayload:
    """Plain ``key:value`` lines; a readable stand-in for the tax-authority QR format."""

    name = 'text'

    def encode(self, invoice):
        lines = [
            f"invoice:{invoice.invoice_number}",
            f"date:{invoice.issue_date.isoformat()}",
            f"total:{invoice.total}",
        ]
        if invoice.is_taxable:
            lines.extend([
                f"seller:{invoice.seller_name}",
                f"vat_number:{invoice.vat_number}",
                f"vat:{invoice.tax}",
            ])
        return "\n".join(lines)


class TLVPayload:
    """
    Tag-length-value fields, base64 encoded: 1 seller, 2 VAT number,
    3 timestamp, 4 total including VAT, 5 VAT amount.
    """

    name = 'tlv'

    def encode(self, invoice):
        fields = [
            invoice.seller_name,
            invoice.vat_number,
            invoice.issued_at.isoformat(timespec='seconds'),
            str(invoice.total),
            str(invoice.tax),
        ]
        buffer = bytearray()
        for tag, value in enumerate(fields, start=1):
            raw = value.encode('utf-8')
            if len(raw) > 255:
                raise ValidationError(f"Invoice field {tag} is too long for the QR payload")
            buffer.append(tag)
            buffer.append(len(raw))
            buffer.extend(raw)
        return base64.b64encode(bytes(buffer)).decode('ascii')


PAYLOAD_STRATEGIES = {
    TextPayload.name: TextPayload,
    TLVPayload.name: TLVPayload,
}


def get_payload_strategy(name=None):
    name = (name or getattr(settings, 'INVOICE_PAYLOAD_FORMAT', 'text')).lower()
    try:
        return PAYLOAD_STRATEGIES[name]()
    except KeyError:
        raise ValidationError(f"Unknown invoice payload format: {name!r}")


def invoice_number_for(payment):
    paid_on = timezone.localdate(payment.paid_at)
    return f"INV-{paid_on:%Y%m%d}-{str(payment.pk)[-6:].upper()}"


def synthesize(payment, payload_strategy=None):
    if not payment.is_completed or payment.paid_at is None:
        raise ValidationError(f"Payment {payment.pk} is not completed; no invoice can be issued")

    subtotal = to_money(payment.amount)
    if payment.is_taxable:
        tax = to_money(subtotal * Decimal(str(settings.VAT_RATE)))
    else:
        tax = ZERO
    issued_at = timezone.localtime(payment.paid_at)

    draft = Invoice(
        invoice_number=invoice_number_for(payment),
        payment_id=str(payment.pk),
        issued_at=issued_at,
        issue_date=issued_at.date(),
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
        is_taxable=payment.is_taxable,
        seller_name=get_seller_name(),
        vat_number=get_vat_number(),
        payload='',
    )
    strategy = payload_strategy or get_payload_strategy()
    return replace(draft, payload=strategy.encode(draft))
