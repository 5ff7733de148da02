from rest_framework import serializers

from accounts.models import User
from accounts.serializers import DoctorSerializer
from core.exceptions import NotFoundError
from pricing.discounts import apply_discounts
from pricing.engine import ZERO
from pricing.models import Coupon
from .models import Payment
from .qr import try_encode_payload_image
from .settlement import settle


class PaymentSerializer(serializers.ModelSerializer):
    doctor = DoctorSerializer(read_only=True)
    coupon_code = serializers.CharField(source='coupon.code', read_only=True, default=None)
    reading_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'patient_id', 'partition', 'reading_id', 'hijama_points_count',
            'base_amount', 'manual_discount', 'coupon_discount', 'amount',
            'coupon_code', 'doctor', 'is_taxable', 'payment_method', 'cash_amount', 'card_amount',
            'status', 'paid_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PaymentSettleSerializer(serializers.Serializer):
    """Reception's settlement form; ``save()`` completes the bound payment."""
    payment_method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES)
    cash_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    card_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    manual_discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=ZERO, default=ZERO)
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    doctor_id = serializers.IntegerField()
    is_taxable = serializers.BooleanField(default=False)

    def validate_coupon_code(self, value):
        code = value.strip().upper()
        if not code:
            return None
        coupon = Coupon.objects.filter(code=code).first()
        if coupon is None:
            raise NotFoundError(f"Coupon {code} not found")
        return coupon

    def validate_doctor_id(self, value):
        doctor = User.objects.active_doctors().filter(pk=value).first()
        if doctor is None:
            raise NotFoundError(f"Doctor {value} not found")
        return doctor

    def validate(self, attrs):
        if attrs['payment_method'] == Payment.METHOD_SPLIT:
            if attrs.get('cash_amount') is None and attrs.get('card_amount') is None:
                raise serializers.ValidationError(
                    {'cash_amount': 'Split payments need cash_amount and/or card_amount.'}
                )
        return attrs

    def update(self, instance, validated_data):
        coupon = validated_data.get('coupon_code')
        manual = validated_data['manual_discount']
        final_price = apply_discounts(instance.base_amount, manual, coupon)
        return settle(
            instance,
            validated_data['payment_method'],
            {
                'cash_amount': validated_data.get('cash_amount'),
                'card_amount': validated_data.get('card_amount'),
            },
            final_price,
            coupon=coupon,
            doctor=validated_data['doctor_id'],
            taxable=validated_data['is_taxable'],
            manual_discount=manual,
        )


class InvoiceSerializer(serializers.Serializer):
    invoice_number = serializers.CharField()
    payment_id = serializers.CharField()
    issued_at = serializers.DateTimeField()
    issue_date = serializers.DateField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    is_taxable = serializers.BooleanField()
    seller_name = serializers.CharField()
    vat_number = serializers.CharField()
    payload = serializers.CharField()
    qr_image = serializers.SerializerMethodField()

    def get_qr_image(self, invoice):
        return try_encode_payload_image(invoice.payload)


class DateRangeSerializer(serializers.Serializer):
    """Inclusive whole-day range, read from ``?from=`` and ``?to=``."""
    date_from = serializers.DateField()
    date_to = serializers.DateField()

    @classmethod
    def from_query(cls, query_params):
        serializer = cls(data={
            'date_from': query_params.get('from'),
            'date_to': query_params.get('to'),
        })
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data['date_from'], serializer.validated_data['date_to']

    def validate(self, attrs):
        if attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError({'date_to': "End date must not be before start date."})
        return attrs


class PaymentsReportSerializer(serializers.Serializer):
    date_from = serializers.DateField(source='from')
    date_to = serializers.DateField(source='to')
    count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    average = serializers.DecimalField(max_digits=12, decimal_places=2)
    payments = PaymentSerializer(many=True)


class DoctorCommissionSerializer(serializers.Serializer):
    doctor = DoctorSerializer()
    date_from = serializers.DateField(source='from')
    date_to = serializers.DateField(source='to')
    count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    rate = serializers.DecimalField(max_digits=5, decimal_places=4)
    commission = serializers.DecimalField(max_digits=12, decimal_places=2)
    payments = PaymentSerializer(many=True)


class ReferralRowSerializer(serializers.Serializer):
    payment_id = serializers.UUIDField()
    patient_id = serializers.UUIDField()
    partition = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    commission = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_at = serializers.DateTimeField()


class ReferralCommissionSerializer(serializers.Serializer):
    code = serializers.CharField(source='coupon.code')
    referrer_name = serializers.CharField(source='coupon.referrer_name')
    date_from = serializers.DateField(source='from')
    date_to = serializers.DateField(source='to')
    referral_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    count = serializers.IntegerField()
    total_commission = serializers.DecimalField(max_digits=12, decimal_places=2)
    rows = ReferralRowSerializer(many=True)
