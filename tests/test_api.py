from unittest import mock

import pytest
from django.utils import timezone

from patients.models import FemalePatient, PatientStatus
from payments.models import Payment
from treatments.services import record_reading

from .factories import completed_payment, hijama_points

pytestmark = pytest.mark.django_db


def test_requires_authentication(api_client):
    response = api_client.get('/api/patients/')
    assert response.status_code == 401


def test_full_visit_flow(client_for, receptionist, doctor, tier_table, coupon_factory):
    coupon_factory(code='REF10', discount_value='10')

    client = client_for(receptionist)
    response = client.post('/api/patients/', {
        'gender': 'female',
        'patient_name': 'Aisha Noor',
        'patient_phone': '0551234567',
        'chief_complaint': 'Migraine',
    }, format='json')
    assert response.status_code == 201, response.data
    patient_id = response.data['id']
    assert response.data['partition'] == 'female'
    assert response.data['status'] == PatientStatus.INTAKE_PENDING

    response = client.post(f'/api/patients/{patient_id}/confirm/', {'appointment_date': '2026-11-02'}, format='json')
    assert response.data['status'] == PatientStatus.SCHEDULED
    response = client.post(f'/api/patients/{patient_id}/start/')
    assert response.data['status'] == PatientStatus.IN_TREATMENT

    client = client_for(doctor)
    response = client.post('/api/readings/', {
        'patient_id': patient_id,
        'blood_pressure_systolic': 120,
        'blood_pressure_diastolic': 80,
        'weight': '72.5',
        'hijama_points': hijama_points(front=2, back=1),
    }, format='json')
    assert response.status_code == 201, response.data
    assert response.data['point_count'] == 3
    assert response.data['front_points'] == 2
    assert response.data['back_points'] == 1
    assert response.data['blood_pressure'] == '120/80'
    assert response.data['payment']['base_amount'] == '250.00'
    payment_id = response.data['payment']['id']

    client = client_for(receptionist)
    response = client.post(f'/api/payments/{payment_id}/settle/', {
        'payment_method': 'split',
        'cash_amount': '100.00',
        'card_amount': '105.00',
        'manual_discount': '20.00',
        'coupon_code': 'ref10',
        'doctor_id': doctor.pk,
        'is_taxable': True,
    }, format='json')
    assert response.status_code == 200, response.data
    assert response.data['amount'] == '205.00'
    assert response.data['status'] == Payment.STATUS_COMPLETED
    assert response.data['coupon_code'] == 'REF10'

    response = client.get(f'/api/payments/{payment_id}/invoice/')
    assert response.status_code == 200
    assert response.data['subtotal'] == '205.00'
    assert response.data['tax'] == '30.75'
    assert response.data['total'] == '235.75'
    assert response.data['qr_image']

    record = FemalePatient.objects.get(pk=patient_id)
    assert record.status == PatientStatus.PAID_ASSIGNED
    assert record.doctor == doctor

    response = client_for(doctor).post(f'/api/patients/{patient_id}/finish/')
    assert response.status_code == 200
    assert response.data['status'] == PatientStatus.COMPLETED


def test_duplicate_patient_rejected_within_partition(client_for, receptionist, patient_factory):
    patient_factory('male', patient_name='Omar Zaid', patient_phone='0550000000')
    payload = {'patient_name': 'omar zaid', 'patient_phone': '0550000000', 'chief_complaint': 'Fatigue'}

    client = client_for(receptionist)
    assert client.post('/api/patients/', {**payload, 'gender': 'male'}, format='json').status_code == 400
    assert client.post('/api/patients/', {**payload, 'gender': 'female'}, format='json').status_code == 201


def test_gender_is_required_on_intake(client_for, receptionist):
    response = client_for(receptionist).post('/api/patients/', {
        'patient_name': 'No Gender', 'patient_phone': '0559999999', 'chief_complaint': 'Headache',
    }, format='json')
    assert response.status_code == 400
    assert 'gender' in response.data


def test_invalid_transition_is_conflict(client_for, receptionist, patient_factory):
    record = patient_factory(status=PatientStatus.AWAITING_PAYMENT)
    response = client_for(receptionist).post(f'/api/patients/{record.pk}/finish/')
    assert response.status_code == 409
    record.refresh_from_db()
    assert record.status == PatientStatus.AWAITING_PAYMENT


def test_unknown_patient_is_not_found(client_for, receptionist):
    response = client_for(receptionist).get('/api/patients/6f1c2b8e-0000-4000-8000-000000000000/')
    assert response.status_code == 404


def test_doctor_cannot_register_patients(client_for, doctor):
    response = client_for(doctor).post('/api/patients/', {
        'gender': 'male', 'patient_name': 'X', 'patient_phone': '1', 'chief_complaint': 'Y',
    }, format='json')
    assert response.status_code == 403


def test_patient_list_filters(client_for, receptionist, patient_factory):
    patient_factory('male', status=PatientStatus.SCHEDULED)
    patient_factory('female')

    client = client_for(receptionist)
    assert len(client.get('/api/patients/').data) == 2
    assert len(client.get('/api/patients/', {'partition': 'female'}).data) == 1
    assert len(client.get('/api/patients/', {'status': 'scheduled'}).data) == 1
    assert client.get('/api/patients/', {'status': 'unknown'}).status_code == 400


def test_split_mismatch_leaves_payment_pending(client_for, receptionist, doctor, patient_factory, tier_table):
    record = patient_factory(status=PatientStatus.IN_TREATMENT)
    _, payment = record_reading(record.pk, points=hijama_points(front=3))

    response = client_for(receptionist).post(f'/api/payments/{payment.pk}/settle/', {
        'payment_method': 'split',
        'cash_amount': '100.00',
        'card_amount': '100.00',
        'doctor_id': doctor.pk,
    }, format='json')
    assert response.status_code == 400
    payment.refresh_from_db()
    assert payment.status == Payment.STATUS_PENDING


def test_settle_with_unknown_coupon(client_for, receptionist, doctor, patient_factory, tier_table):
    record = patient_factory(status=PatientStatus.IN_TREATMENT)
    _, payment = record_reading(record.pk, points=hijama_points(front=1))

    response = client_for(receptionist).post(f'/api/payments/{payment.pk}/settle/', {
        'payment_method': 'cash',
        'coupon_code': 'NOPE',
        'doctor_id': doctor.pk,
    }, format='json')
    assert response.status_code == 404


def test_invoice_survives_qr_failure(client_for, receptionist, patient_factory):
    payment = completed_payment(patient_factory())
    with mock.patch('payments.qr.encode_payload_image', side_effect=RuntimeError('encoder down')):
        response = client_for(receptionist).get(f'/api/payments/{payment.pk}/invoice/')
    assert response.status_code == 200
    assert response.data['total'] == '205.00'
    assert response.data['qr_image'] is None


def test_invoice_for_pending_payment_is_rejected(client_for, receptionist, patient_factory, tier_table):
    record = patient_factory(status=PatientStatus.IN_TREATMENT)
    _, payment = record_reading(record.pk, points=hijama_points(front=1))
    response = client_for(receptionist).get(f'/api/payments/{payment.pk}/invoice/')
    assert response.status_code == 400


def test_tier_quote(client_for, receptionist, tier_table):
    client = client_for(receptionist)
    response = client.get('/api/tiers/quote/', {'points': 4})
    assert response.data == {'points': 4, 'price': '400.00'}
    assert client.get('/api/tiers/quote/', {'points': -1}).status_code == 400


def test_only_admin_edits_tiers(client_for, receptionist, clinic_admin):
    payload = {'number_of_cups': 7, 'price': '500.00'}
    assert client_for(receptionist).post('/api/tiers/', payload, format='json').status_code == 403
    assert client_for(clinic_admin).post('/api/tiers/', payload, format='json').status_code == 201


def test_coupon_check(client_for, receptionist, coupon_factory):
    coupon_factory(code='USED', used_count=1, max_uses=1)
    client = client_for(receptionist)

    response = client.get('/api/coupons/check/', {'code': 'used'})
    assert response.data['valid'] is False
    assert response.data['reason'] == 'Coupon usage limit reached'
    assert client.get('/api/coupons/check/', {'code': 'missing'}).status_code == 404


def test_payments_report_endpoint(client_for, clinic_admin, receptionist, patient_factory, doctor):
    patient = patient_factory()
    payment = completed_payment(patient, amount='100', doctor=doctor)
    day = timezone.localdate(payment.paid_at).isoformat()

    assert client_for(receptionist).get('/api/payments/report/', {'from': day, 'to': day}).status_code == 403

    client = client_for(clinic_admin)
    response = client.get('/api/payments/report/', {'from': day, 'to': day})
    assert response.status_code == 200
    assert response.data['count'] == 1
    assert response.data['total'] == '100.00'

    response = client.get('/api/payments/doctor-commission/', {'doctor': doctor.pk, 'from': day, 'to': day})
    assert response.data['commission'] == '3.00'
    assert client.get('/api/payments/report/', {'from': day}).status_code == 400


def test_partition_hint_is_honoured_after_caching(client_for, receptionist, patient_factory):
    record = patient_factory('male')
    client = client_for(receptionist)

    assert client.get(f'/api/patients/{record.pk}/').status_code == 200
    assert client.get(f'/api/patients/{record.pk}/', {'partition': 'female'}).status_code == 404
    assert client.get(f'/api/patients/{record.pk}/', {'partition': 'male'}).status_code == 200


def test_coupon_detail_shows_use_after_settlement(client_for, receptionist, doctor, patient_factory, tier_table,
                                                   coupon_factory, django_capture_on_commit_callbacks):
    coupon = coupon_factory(code='REF10')
    record = patient_factory(status=PatientStatus.IN_TREATMENT)
    _, payment = record_reading(record.pk, points=hijama_points(front=3))
    client = client_for(receptionist)

    assert client.get(f'/api/coupons/{coupon.pk}/').data['used_count'] == 0
    with django_capture_on_commit_callbacks(execute=True):
        response = client.post(f'/api/payments/{payment.pk}/settle/', {
            'payment_method': 'cash',
            'coupon_code': 'REF10',
            'doctor_id': doctor.pk,
        }, format='json')
    assert response.status_code == 200, response.data
    assert client.get(f'/api/coupons/{coupon.pk}/').data['used_count'] == 1
