import logging

from django.db import DatabaseError, transaction

from core.exceptions import PersistenceError
from patients import lifecycle
from patients.models import PatientStatus
from patients.partitions import resolver
from payments.models import Payment
from pricing.engine import price_for
from pricing.models import CupPriceTier
from .models import TreatmentReading

logger = logging.getLogger(__name__)


def record_reading(patient_id, partition=None, points=None, recorded_by=None, **vitals):
    """
    Save the session's reading, open a pending payment priced from the point
    count and move the patient to ``awaiting_payment``, all in one commit.
    """
    points = list(points or [])
    partition, record = resolver.resolve(patient_id, partition)
    lifecycle.ensure_transition(record, PatientStatus.AWAITING_PAYMENT)
    base_price = price_for(len(points), CupPriceTier.objects.price_table())

    try:
        with transaction.atomic():
            record = resolver.lock(partition, record.pk)
            lifecycle.ensure_transition(record, PatientStatus.AWAITING_PAYMENT)

            reading = TreatmentReading.objects.create(
                patient_id=record.pk,
                partition=partition,
                hijama_points=points,
                recorded_by=recorded_by,
                **vitals,
            )
            payment = Payment.objects.create(
                patient_id=record.pk,
                partition=partition,
                reading=reading,
                hijama_points_count=len(points),
                base_amount=base_price,
                amount=base_price,
                status=Payment.STATUS_PENDING,
            )
            lifecycle.await_payment(record)
    except DatabaseError as exc:
        logger.exception("Saving reading for patient %s failed; nothing was committed", patient_id)
        raise PersistenceError("Treatment reading could not be saved; please resubmit") from exc

    logger.info("reading %s saved for patient %s: %d points, payment %s pending at %s",
                reading.pk, record.pk, len(points), payment.pk, base_price)
    return reading, payment
