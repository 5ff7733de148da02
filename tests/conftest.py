from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from patients.models import FemalePatient, MalePatient, PatientStatus
from pricing.models import Coupon, CupPriceTier


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clinic_admin(db):
    return User.objects.create_user(username='admin', password='pass', role=User.ROLE_ADMIN)


@pytest.fixture
def receptionist(db):
    return User.objects.create_user(username='reception', password='pass', role=User.ROLE_RECEPTIONIST)


@pytest.fixture
def doctor(db):
    return User.objects.create_user(
        username='dr_khalid', password='pass', role=User.ROLE_DOCTOR,
        first_name='Khalid', last_name='Omar', specialization='Cupping',
    )


@pytest.fixture
def tier_table(db):
    for cups, price in [(1, '100'), (3, '250'), (5, '400')]:
        CupPriceTier.objects.create(number_of_cups=cups, price=Decimal(price))
    return CupPriceTier.objects.price_table()


@pytest.fixture
def coupon_factory(db):
    def make(code='REF10', discount_type=Coupon.PERCENTAGE, discount_value='10', **extra):
        extra.setdefault('referrer_name', 'Samir')
        extra.setdefault('expiry_date', timezone.localdate() + timedelta(days=30))
        return Coupon.objects.create(
            code=code,
            discount_type=discount_type,
            discount_value=Decimal(discount_value),
            **extra,
        )
    return make


@pytest.fixture
def patient_factory(db):
    counter = {'n': 0}

    def make(gender='male', status=PatientStatus.INTAKE_PENDING, **extra):
        counter['n'] += 1
        model = MalePatient if gender == 'male' else FemalePatient
        extra.setdefault('patient_name', f"Patient {counter['n']}")
        extra.setdefault('patient_phone', f"05000000{counter['n']:02d}")
        extra.setdefault('chief_complaint', 'Back pain')
        return model.objects.create(status=status, **extra)
    return make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def authenticate(user):
        api_client.force_authenticate(user=user)
        return api_client
    return authenticate

