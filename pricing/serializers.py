from decimal import Decimal
from rest_framework import serializers
from .models import Coupon, CupPriceTier


class CupPriceTierSerializer(serializers.ModelSerializer):
    class Meta:
        model = CupPriceTier
        fields = ['id', 'number_of_cups', 'price', 'description', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            'id', 'code', 'referrer_name', 'discount_type', 'discount_value',
            'referral_percentage', 'used_count', 'max_uses', 'expiry_date',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['used_count', 'created_at', 'updated_at']

    def validate_code(self, value):
        return value.strip().upper()

    def validate(self, attrs):
        discount_type = attrs.get('discount_type') or getattr(self.instance, 'discount_type', None)
        value = attrs.get('discount_value', getattr(self.instance, 'discount_value', None))
        if discount_type == Coupon.PERCENTAGE and value is not None and value > Decimal('100'):
            raise serializers.ValidationError({'discount_value': 'Percentage discount cannot exceed 100.'})
        return attrs


class PriceQuoteSerializer(serializers.Serializer):
    points = serializers.IntegerField(min_value=0)

