import uuid
from django.conf import settings
from django.db import models

from patients.models import Partition


class TreatmentReadingQuerySet(models.QuerySet):
    def for_patient(self, partition, patient_id):
        return self.filter(partition=partition, patient_id=patient_id)


class TreatmentReading(models.Model):
    VIEW_FRONT = 'front'
    VIEW_BACK = 'back'

    VIEW_CHOICES = [
        (VIEW_FRONT, 'Front'),
        (VIEW_BACK, 'Back'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_id = models.UUIDField(db_index=True)
    partition = models.CharField(max_length=10, choices=Partition.choices)

    blood_pressure_systolic = models.PositiveSmallIntegerField(null=True, blank=True)
    blood_pressure_diastolic = models.PositiveSmallIntegerField(null=True, blank=True)
    weight = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    # ordered [{"id": str, "x": float, "y": float, "view": "front" | "back"}]
    hijama_points = models.JSONField(default=list, blank=True)

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='hijama_readings',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TreatmentReadingQuerySet.as_manager()

    class Meta:
        db_table = 'hijama_readings'
        ordering = ['-created_at']

    def __str__(self):
        return f"Reading for {self.patient_id} ({self.point_count} points)"

    @property
    def point_count(self):
        return len(self.hijama_points or [])

    def points_on(self, view):
        return [point for point in (self.hijama_points or []) if point.get('view') == view]

    @property
    def blood_pressure(self):
        if self.blood_pressure_systolic and self.blood_pressure_diastolic:
            return f"{self.blood_pressure_systolic}/{self.blood_pressure_diastolic}"
        return None
