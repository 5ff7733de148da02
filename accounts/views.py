from rest_framework import viewsets
from .models import User
from .permissions import IsClinicStaff
from .serializers import DoctorSerializer


class DoctorViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = DoctorSerializer
    permission_classes = [IsClinicStaff]

    def get_queryset(self):
        return User.objects.active_doctors()
