import uuid
from decimal import Decimal
from django.conf import settings
from django.db import models
from django.db.models import Q

from patients.models import Partition


class PaymentQuerySet(models.QuerySet):
    def completed(self):
        return self.filter(status=Payment.STATUS_COMPLETED)

    def pending(self):
        return self.filter(status=Payment.STATUS_PENDING)

    def paid_between(self, start, end):
        """Completed payments whose settlement falls on ``start``..``end`` inclusive (local dates)."""
        return self.completed().filter(paid_at__date__gte=start, paid_at__date__lte=end)

    def for_patient(self, partition, patient_id):
        return self.filter(partition=partition, patient_id=patient_id)


class Payment(models.Model):
    METHOD_CASH = 'cash'
    METHOD_CARD = 'card'
    METHOD_BANK_TRANSFER = 'bank_transfer'
    METHOD_SPLIT = 'split'

    METHOD_CHOICES = [
        (METHOD_CASH, 'Cash'),
        (METHOD_CARD, 'Card'),
        (METHOD_BANK_TRANSFER, 'Bank transfer'),
        (METHOD_SPLIT, 'Split cash / card'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient_id = models.UUIDField(db_index=True)
    partition = models.CharField(max_length=10, choices=Partition.choices)

    hijama_points_count = models.PositiveIntegerField(default=0)
    base_amount = models.DecimalField(max_digits=10, decimal_places=2)
    manual_discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    coupon_discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    amount = models.DecimalField(max_digits=10, decimal_places=2)

    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments',
        limit_choices_to={'role': 'doctor'},
    )
    coupon = models.ForeignKey('pricing.Coupon', on_delete=models.SET_NULL, null=True, blank=True, related_name='payments')
    reading = models.OneToOneField(
        'treatments.TreatmentReading',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payment',
    )

    is_taxable = models.BooleanField(default=False)
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES, blank=True, null=True)
    cash_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    card_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PaymentQuerySet.as_manager()

    class Meta:
        db_table = 'payments'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=Q(amount__gte=0), name='payment_amount_not_negative'),
            models.CheckConstraint(
                condition=Q(status='pending') | Q(paid_at__isnull=False, payment_method__isnull=False),
                name='completed_payment_has_method_and_date',
            ),
        ]

    def __str__(self):
        return f"{self.patient_id} - {self.amount} ({self.status})"

    @property
    def is_completed(self):
        return self.status == self.STATUS_COMPLETED
