from decimal import Decimal
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F
from django.utils import timezone

from core import events


class CupPriceTierQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def price_table(self):
        return dict(self.active().values_list('number_of_cups', 'price'))


class CupPriceTier(models.Model):
    number_of_cups = models.PositiveIntegerField(unique=True, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    description = models.CharField(max_length=255, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CupPriceTierQuerySet.as_manager()

    class Meta:
        db_table = 'hijama_cup_prices'
        ordering = ['number_of_cups']

    def __str__(self):
        return f"{self.number_of_cups} cups - {self.price}"


class Coupon(models.Model):
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'

    DISCOUNT_TYPE_CHOICES = [
        (PERCENTAGE, 'Percentage'),
        (FIXED, 'Fixed amount'),
    ]

    code = models.CharField(max_length=50, unique=True)
    referrer_name = models.CharField(max_length=120)
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    referral_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        help_text="Commission paid to the referrer; not applied to the patient's bill",
    )
    used_count = models.PositiveIntegerField(default=0)
    max_uses = models.PositiveIntegerField(default=1)
    expiry_date = models.DateField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'coupons'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} ({self.referrer_name})"

    def is_expired(self, today=None):
        today = today or timezone.localdate()
        return self.expiry_date < today

    @property
    def is_exhausted(self):
        return self.used_count >= self.max_uses

    def rejection_reason(self, today=None):
        if not self.is_active:
            return "Coupon is not active"
        if self.is_expired(today):
            return "Coupon has expired"
        if self.is_exhausted:
            return "Coupon usage limit reached"
        return None

    def redeem(self):
        """Atomically consume one use; False when the ceiling was already reached."""
        updated = Coupon.objects.filter(pk=self.pk, used_count__lt=F('max_uses')).update(
            used_count=F('used_count') + 1,
            updated_at=timezone.now(),
        )
        if updated:
            self.refresh_from_db(fields=['used_count', 'updated_at'])
            events.publish(Coupon, self.pk)
        return bool(updated)
