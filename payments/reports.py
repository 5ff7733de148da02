from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum

from pricing.engine import ZERO, to_money
from treatments.models import TreatmentReading
from .models import Payment


def _totals(queryset):
    agg = queryset.aggregate(total=Sum('amount'), count=Count('id'))
    total = to_money(agg['total'] or ZERO)
    count = agg['count'] or 0
    average = to_money(total / count) if count else ZERO
    return total, count, average


def payments_report(start, end):
    payments = Payment.objects.paid_between(start, end).select_related('doctor').order_by('-paid_at')
    total, count, average = _totals(payments)
    return {
        'from': start,
        'to': end,
        'count': count,
        'total': total,
        'average': average,
        'payments': list(payments),
    }


def doctor_commission(doctor, start, end, rate=None):
    rate = Decimal(str(rate if rate is not None else settings.DOCTOR_COMMISSION_RATE))
    payments = Payment.objects.paid_between(start, end).filter(doctor=doctor).order_by('-paid_at')
    total, count, _ = _totals(payments)
    return {
        'doctor': doctor,
        'from': start,
        'to': end,
        'count': count,
        'total': total,
        'rate': rate,
        'commission': to_money(total * rate),
        'payments': list(payments),
    }


def referral_commission(coupon, start, end):
    rate = Decimal(str(coupon.referral_percentage)) / Decimal('100')
    payments = Payment.objects.paid_between(start, end).filter(coupon=coupon).order_by('-paid_at')
    rows = [
        {
            'payment_id': payment.pk,
            'patient_id': payment.patient_id,
            'partition': payment.partition,
            'amount': payment.amount,
            'commission': to_money(payment.amount * rate),
            'paid_at': payment.paid_at,
        }
        for payment in payments
    ]
    return {
        'coupon': coupon,
        'from': start,
        'to': end,
        'referral_percentage': coupon.referral_percentage,
        'count': len(rows),
        'total_commission': sum((row['commission'] for row in rows), ZERO),
        'rows': rows,
    }


def patient_history(partition, record):
    payments = Payment.objects.for_patient(partition, record.pk).completed().select_related('doctor').order_by('-paid_at')
    readings = TreatmentReading.objects.for_patient(partition, record.pk).order_by('-created_at')
    total, visits, _ = _totals(payments)
    return {
        'patient': record,
        'partition': partition,
        'total_payments': total,
        'total_visits': visits,
        'payments': list(payments),
        'readings': list(readings),
    }
