import uuid
from rest_framework import serializers

from patients.models import Partition
from .models import TreatmentReading
from .services import record_reading


class HijamaPointSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, max_length=64)
    x = serializers.FloatField(min_value=0, max_value=100)
    y = serializers.FloatField(min_value=0, max_value=100)
    view = serializers.ChoiceField(choices=TreatmentReading.VIEW_CHOICES)

    def to_internal_value(self, data):
        point = super().to_internal_value(data)
        point.setdefault('id', uuid.uuid4().hex)
        return point


class TreatmentReadingSerializer(serializers.ModelSerializer):
    patient_id = serializers.UUIDField()
    partition = serializers.ChoiceField(choices=Partition.choices, required=False)
    hijama_points = HijamaPointSerializer(many=True, allow_empty=True)
    point_count = serializers.IntegerField(read_only=True)
    front_points = serializers.SerializerMethodField()
    back_points = serializers.SerializerMethodField()
    blood_pressure = serializers.CharField(read_only=True)
    recorded_by = serializers.CharField(source='recorded_by.username', read_only=True, default=None)
    payment = serializers.SerializerMethodField()

    class Meta:
        model = TreatmentReading
        fields = [
            'id', 'patient_id', 'partition',
            'blood_pressure_systolic', 'blood_pressure_diastolic', 'blood_pressure', 'weight',
            'hijama_points', 'point_count', 'front_points', 'back_points',
            'recorded_by', 'payment', 'created_at',
        ]
        read_only_fields = ['id', 'created_at']

    def get_front_points(self, obj):
        return len(obj.points_on(TreatmentReading.VIEW_FRONT))

    def get_back_points(self, obj):
        return len(obj.points_on(TreatmentReading.VIEW_BACK))

    def get_payment(self, obj):
        payment = getattr(obj, 'payment', None)
        if payment is None:
            return None
        return {'id': str(payment.pk), 'base_amount': str(payment.base_amount)}

    def validate(self, attrs):
        systolic = attrs.get('blood_pressure_systolic')
        diastolic = attrs.get('blood_pressure_diastolic')
        if (systolic is None) != (diastolic is None):
            raise serializers.ValidationError({'blood_pressure': 'Provide both systolic and diastolic values.'})
        if systolic is not None and diastolic >= systolic:
            raise serializers.ValidationError({'blood_pressure': 'Diastolic must be lower than systolic.'})
        return attrs

    def create(self, validated_data):
        request = self.context.get('request')
        reading, payment = record_reading(
            validated_data.pop('patient_id'),
            partition=validated_data.pop('partition', None),
            points=validated_data.pop('hijama_points'),
            recorded_by=getattr(request, 'user', None),
            **validated_data,
        )
        return reading
