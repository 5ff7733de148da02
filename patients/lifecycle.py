"""
Patient status state machine.

    intake_pending -> scheduled -> in_treatment -> awaiting_payment
        -> paid_assigned -> completed

Any non-terminal status may also move to ``cancelled``. Every status write
goes through ``transition``; nothing else assigns ``record.status``.
"""
import logging

from core.exceptions import InvalidTransition, ValidationError
from .models import PatientStatus

logger = logging.getLogger(__name__)

TRANSITIONS = {
    PatientStatus.INTAKE_PENDING: {PatientStatus.SCHEDULED},
    PatientStatus.SCHEDULED: {PatientStatus.IN_TREATMENT},
    PatientStatus.IN_TREATMENT: {PatientStatus.AWAITING_PAYMENT},
    PatientStatus.AWAITING_PAYMENT: {PatientStatus.PAID_ASSIGNED},
    PatientStatus.PAID_ASSIGNED: {PatientStatus.COMPLETED},
    PatientStatus.COMPLETED: set(),
    PatientStatus.CANCELLED: set(),
}

TERMINAL = frozenset({PatientStatus.COMPLETED, PatientStatus.CANCELLED})


def is_terminal(status):
    return PatientStatus(status) in TERMINAL


def can_transition(current, target):
    current, target = PatientStatus(current), PatientStatus(target)
    if target == PatientStatus.CANCELLED:
        return not is_terminal(current)
    return target in TRANSITIONS.get(current, set())


def ensure_transition(record, target):
    if not can_transition(record.status, target):
        raise InvalidTransition(
            f"Cannot move patient {record.pk} from '{record.status}' to '{target}'"
        )


def transition(record, target, *, doctor=None, save=True, **changes):
    """
    Move ``record`` to ``target``, applying ``changes`` in the same write.

    Raises ``InvalidTransition`` before touching the record when the move is
    not in the table.
    """
    target = PatientStatus(target)
    ensure_transition(record, target)
    if target == PatientStatus.PAID_ASSIGNED and doctor is None:
        raise ValidationError("A doctor must be assigned when payment is settled")

    previous = record.status
    update_fields = ['status', 'updated_at']
    record.status = target
    if doctor is not None:
        record.doctor = doctor
        update_fields.append('doctor')
    for field, value in changes.items():
        setattr(record, field, value)
        update_fields.append(field)

    if save:
        record.save(update_fields=update_fields)
    logger.info("patient %s (%s): %s -> %s", record.pk, record.partition, previous, target)
    return record


def confirm_appointment(record, appointment_date, appointment_time=None):
    return transition(
        record,
        PatientStatus.SCHEDULED,
        preferred_appointment_date=appointment_date,
        preferred_appointment_time=appointment_time,
    )


def start_session(record):
    return transition(record, PatientStatus.IN_TREATMENT)


def await_payment(record):
    return transition(record, PatientStatus.AWAITING_PAYMENT)


def assign_after_payment(record, doctor):
    return transition(record, PatientStatus.PAID_ASSIGNED, doctor=doctor)


def finish_treatment(record):
    return transition(record, PatientStatus.COMPLETED)


def cancel(record):
    return transition(record, PatientStatus.CANCELLED)
