from rest_framework import serializers

from accounts.serializers import DoctorSerializer
from payments.serializers import PaymentSerializer
from treatments.serializers import TreatmentReadingSerializer
from .models import Partition, PatientStatus
from .partitions import resolver

GENDER_CHOICES = (('male', 'male'), ('female', 'female'), ('m', 'm'), ('f', 'f'))


class PatientSerializer(serializers.Serializer):
    """
    Intake record for either partition. ``gender`` is write-only and picks
    the table on create; afterwards a record never changes partition.
    """
    id = serializers.UUIDField(read_only=True)
    partition = serializers.CharField(read_only=True)
    gender = serializers.ChoiceField(choices=GENDER_CHOICES, write_only=True, required=False)

    patient_name = serializers.CharField(max_length=120)
    patient_phone = serializers.CharField(max_length=20)
    patient_email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)

    chief_complaint = serializers.CharField()
    medical_history = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    allergies = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    current_medications = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    additional_notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    preferred_appointment_date = serializers.DateField(required=False, allow_null=True)
    preferred_appointment_time = serializers.TimeField(required=False, allow_null=True)

    status = serializers.ChoiceField(choices=PatientStatus.choices, read_only=True)
    doctor = DoctorSerializer(read_only=True)
    submitted_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def validate_patient_name(self, value):
        return value.strip()

    def validate_patient_phone(self, value):
        return value.strip()

    def validate(self, attrs):
        gender = attrs.pop('gender', None)
        if self.instance is None:
            if not gender:
                raise serializers.ValidationError({'gender': 'This field is required.'})
            partition = Partition.from_gender(gender)
        else:
            partition = self.instance.partition
            if gender and Partition.from_gender(gender) != partition:
                raise serializers.ValidationError({'gender': 'A patient cannot move between partitions.'})
        attrs['partition'] = partition

        name = attrs.get('patient_name') or getattr(self.instance, 'patient_name', None)
        phone = attrs.get('patient_phone') or getattr(self.instance, 'patient_phone', None)
        if name and phone:
            self._validate_unique_patient(partition, name, phone)
        return attrs

    def _validate_unique_patient(self, partition, name, phone):
        qs = resolver.model_for(partition).objects.filter(patient_name__iexact=name, patient_phone=phone)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Patient already exists.")

    def create(self, validated_data):
        partition = validated_data.pop('partition')
        return resolver.model_for(partition).objects.create(**validated_data)

    def update(self, instance, validated_data):
        validated_data.pop('partition', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=[*validated_data, 'updated_at'])
        return instance


class AppointmentConfirmSerializer(serializers.Serializer):
    appointment_date = serializers.DateField()
    appointment_time = serializers.TimeField(required=False, allow_null=True)


class PatientHistorySerializer(serializers.Serializer):
    patient = PatientSerializer()
    partition = serializers.CharField()
    total_payments = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_visits = serializers.IntegerField()
    payments = PaymentSerializer(many=True)
    readings = TreatmentReadingSerializer(many=True)
