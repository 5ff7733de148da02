from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from payments.reports import doctor_commission, patient_history, payments_report, referral_commission
from treatments.models import TreatmentReading

from .factories import completed_payment

pytestmark = pytest.mark.django_db


def test_payments_report_totals_within_range(patient_factory):
    today = timezone.localdate()
    patient = patient_factory()
    completed_payment(patient, amount='100')
    completed_payment(patient, amount='250')
    completed_payment(patient, amount='999', paid_at=timezone.now() - timedelta(days=10))

    report = payments_report(today, today)
    assert report['count'] == 2
    assert report['total'] == Decimal('350.00')
    assert report['average'] == Decimal('175.00')


def test_empty_report():
    today = timezone.localdate()
    report = payments_report(today, today)
    assert (report['count'], report['total'], report['average']) == (0, Decimal('0.00'), Decimal('0.00'))


def test_doctor_commission_at_three_percent(patient_factory, doctor):
    today = timezone.localdate()
    patient = patient_factory()
    completed_payment(patient, amount='250', doctor=doctor)
    completed_payment(patient, amount='150', doctor=doctor)
    completed_payment(patient, amount='500')

    report = doctor_commission(doctor, today, today)
    assert report['total'] == Decimal('400.00')
    assert report['commission'] == Decimal('12.00')
    assert report['count'] == 2


def test_referral_commission(patient_factory, coupon_factory):
    today = timezone.localdate()
    coupon = coupon_factory(referral_percentage=Decimal('5'))
    patient = patient_factory()
    completed_payment(patient, amount='205', coupon=coupon)
    completed_payment(patient, amount='100')

    report = referral_commission(coupon, today, today)
    assert report['count'] == 1
    assert report['rows'][0]['commission'] == Decimal('10.25')
    assert report['total_commission'] == Decimal('10.25')


def test_patient_history(patient_factory):
    patient = patient_factory('female')
    other = patient_factory('female')
    completed_payment(patient, amount='100')
    completed_payment(patient, amount='250')
    completed_payment(other, amount='400')
    TreatmentReading.objects.create(patient_id=patient.pk, partition='female', hijama_points=[])

    history = patient_history('female', patient)
    assert history['total_visits'] == 2
    assert history['total_payments'] == Decimal('350.00')
    assert len(history['readings']) == 1
