import uuid

from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from core.exceptions import ValidationError
from core.mixins import CacheResponseMixin
from patients.models import Partition
from .models import TreatmentReading
from .permissions import IsDoctorOrReadOnly
from .serializers import TreatmentReadingSerializer


class TreatmentReadingViewSet(CacheResponseMixin,
                              mixins.CreateModelMixin,
                              mixins.ListModelMixin,
                              mixins.RetrieveModelMixin,
                              viewsets.GenericViewSet):
    queryset = TreatmentReading.objects.select_related('recorded_by', 'payment').all()
    serializer_class = TreatmentReadingSerializer
    permission_classes = [IsDoctorOrReadOnly]
    cache_key_prefix = "reading"

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params

        partition = params.get('partition')
        if partition:
            try:
                qs = qs.filter(partition=Partition.from_gender(partition))
            except ValueError:
                raise ValidationError({'partition': f"Unknown partition: {partition}"})

        patient = params.get('patient')
        if patient:
            try:
                qs = qs.filter(patient_id=uuid.UUID(patient))
            except ValueError:
                raise ValidationError({'patient': 'Not a valid patient id.'})

        day = params.get('date')
        if day:
            try:
                parsed = parse_date(day)
            except ValueError:
                parsed = None
            if parsed is None:
                raise ValidationError({'date': 'Use YYYY-MM-DD.'})
            qs = qs.filter(created_at__date=parsed)
        return qs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reading = serializer.save()
        return Response(self.get_serializer(reading).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def today(self, request):
        queryset = self.get_queryset().filter(created_at__date=timezone.localdate())
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)
