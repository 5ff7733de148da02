from rest_framework import serializers
from .models import User


class DoctorSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'name', 'specialization', 'email', 'phone']
