from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError
from django.utils import timezone

from core.exceptions import InvalidTransition, PersistenceError, ValidationError
from patients.models import PatientStatus
from payments.models import Payment
from payments.settlement import method_components, settle, split_components
from pricing.discounts import apply_discounts
from treatments.models import TreatmentReading
from treatments.services import record_reading

from .factories import hijama_points


def test_split_must_add_up_exactly():
    assert split_components({'cash_amount': '100', 'card_amount': '105'}, Decimal('205')) == (
        Decimal('100.00'), Decimal('105.00'),
    )
    with pytest.raises(ValidationError):
        split_components({'cash_amount': '100', 'card_amount': '100'}, Decimal('205'))


def test_split_has_no_rounding_window():
    with pytest.raises(ValidationError):
        split_components({'cash_amount': Decimal('100.004'), 'card_amount': Decimal('105')}, Decimal('205'))
    with pytest.raises(ValidationError):
        split_components({'cash_amount': '102.495', 'card_amount': '102.505'}, Decimal('205'))
    assert split_components({'cash_amount': '100.000', 'card_amount': 105}, Decimal('205')) == (
        Decimal('100.00'), Decimal('105.00'),
    )


def test_split_rejects_negative_and_empty_parts():
    with pytest.raises(ValidationError):
        split_components({'cash_amount': '-5', 'card_amount': '210'}, Decimal('205'))
    with pytest.raises(ValidationError):
        split_components({}, Decimal('0'))


def test_single_method_components():
    assert method_components('cash', None, Decimal('50')) == (Decimal('50'), None)
    assert method_components('card', None, Decimal('50')) == (None, Decimal('50'))
    assert method_components('bank_transfer', None, Decimal('50')) == (None, None)
    with pytest.raises(ValidationError):
        method_components('cheque', None, Decimal('50'))


@pytest.fixture
def awaiting(patient_factory, tier_table):
    record = patient_factory('female', status=PatientStatus.IN_TREATMENT)
    reading, payment = record_reading(record.pk, points=hijama_points(front=2, back=1))
    record.refresh_from_db()
    return record, reading, payment


@pytest.mark.django_db
class TestRecordReading:
    def test_opens_pending_payment_at_tier_price(self, awaiting):
        record, reading, payment = awaiting
        assert record.status == PatientStatus.AWAITING_PAYMENT
        assert reading.point_count == 3
        assert payment.status == Payment.STATUS_PENDING
        assert payment.base_amount == Decimal('250.00')
        assert payment.amount == Decimal('250.00')
        assert payment.reading == reading
        assert payment.partition == 'female'

    def test_patient_must_be_in_treatment(self, patient_factory, tier_table):
        record = patient_factory(status=PatientStatus.SCHEDULED)
        with pytest.raises(InvalidTransition):
            record_reading(record.pk, points=hijama_points(front=1))
        assert not TreatmentReading.objects.exists()
        assert not Payment.objects.exists()

    def test_no_tiers_configured(self, patient_factory):
        record = patient_factory(status=PatientStatus.IN_TREATMENT)
        with pytest.raises(ValidationError):
            record_reading(record.pk, points=hijama_points(front=2))
        record.refresh_from_db()
        assert record.status == PatientStatus.IN_TREATMENT


@pytest.mark.django_db
class TestSettle:
    def test_cash_settlement_assigns_doctor(self, awaiting, doctor):
        record, _, payment = awaiting
        settled = settle(payment, 'cash', None, payment.base_amount, doctor=doctor)

        assert settled.status == Payment.STATUS_COMPLETED
        assert settled.paid_at is not None
        assert settled.cash_amount == Decimal('250.00')
        record.refresh_from_db()
        assert record.status == PatientStatus.PAID_ASSIGNED
        assert record.doctor == doctor

    def test_split_with_coupon_and_manual_discount(self, awaiting, doctor, coupon_factory):
        _, _, payment = awaiting
        coupon = coupon_factory(discount_value='10')
        final = apply_discounts(payment.base_amount, Decimal('20'), coupon)
        assert final == Decimal('205.00')

        settled = settle(
            payment, 'split', {'cash_amount': '100', 'card_amount': '105'}, final,
            coupon=coupon, doctor=doctor, manual_discount=Decimal('20'),
        )

        stored = Payment.objects.get(pk=settled.pk)
        assert stored.amount == Decimal('205.00')
        assert stored.coupon_discount == Decimal('25.00')
        assert stored.manual_discount == Decimal('20.00')
        assert (stored.cash_amount, stored.card_amount) == (Decimal('100.00'), Decimal('105.00'))
        coupon.refresh_from_db()
        assert coupon.used_count == 1

    def test_split_mismatch_writes_nothing(self, awaiting, doctor):
        record, _, payment = awaiting
        with pytest.raises(ValidationError):
            settle(payment, 'split', {'cash_amount': '100', 'card_amount': '100'}, Decimal('205'), doctor=doctor)

        payment.refresh_from_db()
        record.refresh_from_db()
        assert payment.status == Payment.STATUS_PENDING
        assert record.status == PatientStatus.AWAITING_PAYMENT

    def test_doctor_is_required(self, awaiting):
        _, _, payment = awaiting
        with pytest.raises(ValidationError):
            settle(payment, 'cash', None, payment.base_amount)

    def test_exhausted_coupon_rejected(self, awaiting, doctor, coupon_factory):
        _, _, payment = awaiting
        coupon = coupon_factory(used_count=1, max_uses=1)
        with pytest.raises(ValidationError, match='usage limit'):
            settle(payment, 'cash', None, Decimal('225'), coupon=coupon, doctor=doctor)
        payment.refresh_from_db()
        assert payment.status == Payment.STATUS_PENDING

    def test_expired_coupon_rejected(self, awaiting, doctor, coupon_factory):
        _, _, payment = awaiting
        coupon = coupon_factory(expiry_date=timezone.localdate() - timedelta(days=1))
        with pytest.raises(ValidationError, match='expired'):
            settle(payment, 'cash', None, Decimal('225'), coupon=coupon, doctor=doctor)

    def test_payment_cannot_be_settled_twice(self, awaiting, doctor):
        _, _, payment = awaiting
        settle(payment, 'card', None, payment.base_amount, doctor=doctor)
        with pytest.raises(ValidationError):
            settle(payment, 'card', None, payment.base_amount, doctor=doctor)

    def test_database_failure_rolls_everything_back(self, awaiting, doctor, coupon_factory):
        record, _, payment = awaiting
        coupon = coupon_factory()

        with mock.patch('patients.lifecycle.assign_after_payment', side_effect=DatabaseError('disk full')):
            with pytest.raises(PersistenceError):
                settle(payment, 'cash', None, Decimal('225'), coupon=coupon, doctor=doctor)

        payment.refresh_from_db()
        record.refresh_from_db()
        coupon.refresh_from_db()
        assert payment.status == Payment.STATUS_PENDING
        assert payment.paid_at is None
        assert record.status == PatientStatus.AWAITING_PAYMENT
        assert coupon.used_count == 0
