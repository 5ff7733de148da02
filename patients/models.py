import uuid
from django.db import models
from django.conf import settings


class PatientStatus(models.TextChoices):
    INTAKE_PENDING = 'intake_pending', 'Intake pending'
    SCHEDULED = 'scheduled', 'Scheduled'
    IN_TREATMENT = 'in_treatment', 'In treatment'
    AWAITING_PAYMENT = 'awaiting_payment', 'Awaiting payment'
    PAID_ASSIGNED = 'paid_assigned', 'Paid and assigned'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class Partition(models.TextChoices):
    MALE = 'male', 'Male patients'
    FEMALE = 'female', 'Female patients'

    @classmethod
    def from_gender(cls, gender):
        if isinstance(gender, cls):
            return gender
        value = str(gender or '').strip().lower()
        if value in ('m', 'male', 'male_patients'):
            return cls.MALE
        if value in ('f', 'female', 'female_patients'):
            return cls.FEMALE
        raise ValueError(f"Unknown gender: {gender!r}")


class PatientRecord(models.Model):
    """
    Intake form and lifecycle state for one patient. Concrete subclasses are
    the two gender partitions; a record never moves between them.
    """
    partition = None

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_name = models.CharField(max_length=120)
    patient_phone = models.CharField(max_length=20)
    patient_email = models.EmailField(blank=True, null=True)
    date_of_birth = models.DateField(null=True, blank=True)

    chief_complaint = models.TextField()
    medical_history = models.TextField(blank=True, null=True)
    allergies = models.TextField(blank=True, null=True)
    current_medications = models.TextField(blank=True, null=True)
    additional_notes = models.TextField(blank=True, null=True)

    preferred_appointment_date = models.DateField(null=True, blank=True)
    preferred_appointment_time = models.TimeField(null=True, blank=True)

    status = models.CharField(max_length=20, choices=PatientStatus.choices, default=PatientStatus.INTAKE_PENDING)
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='%(class)s_set',
        limit_choices_to={'role': 'doctor'},
    )

    submitted_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-submitted_at']

    def __str__(self):
        return f"{self.patient_name} ({self.get_status_display()})"


class MalePatient(PatientRecord):
    partition = Partition.MALE

    class Meta(PatientRecord.Meta):
        db_table = 'male_patients'


class FemalePatient(PatientRecord):
    partition = Partition.FEMALE

    class Meta(PatientRecord.Meta):
        db_table = 'female_patients'
