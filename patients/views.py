from django.db import transaction
from django.utils import timezone
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminOrReceptionist, IsClinicStaff, IsDoctor
from core.exceptions import ValidationError
from core.mixins import CacheResponseMixin
from payments.reports import patient_history
from . import lifecycle
from .models import Partition, PatientStatus
from .partitions import resolver
from .serializers import AppointmentConfirmSerializer, PatientHistorySerializer, PatientSerializer


class PatientViewSet(CacheResponseMixin,
                     mixins.CreateModelMixin,
                     mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.UpdateModelMixin,
                     viewsets.GenericViewSet):
    """
    Patients across both partitions. Detail routes take an optional
    ``?partition=`` hint; without it the id is looked up in every partition.
    """
    serializer_class = PatientSerializer
    cache_key_prefix = "patient"
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def get_permissions(self):
        if self.action in ['create', 'partial_update', 'confirm', 'cancel']:
            permission_classes = [IsAdminOrReceptionist]
        elif self.action in ['start', 'finish']:
            permission_classes = [IsAdminOrReceptionist | IsDoctor]
        elif self.action in ['list', 'retrieve', 'history', 'today']:
            permission_classes = [IsClinicStaff]
        else:
            permission_classes = [permissions.IsAuthenticated]
        return [p() for p in permission_classes]

    def _partition_param(self):
        partition = self.request.query_params.get('partition')
        if not partition:
            return None
        try:
            return Partition.from_gender(partition)
        except ValueError:
            raise ValidationError({'partition': f"Unknown partition: {partition}"})

    def get_queryset(self):
        params = self.request.query_params
        status_filter = params.get('status')
        if status_filter and status_filter not in PatientStatus.values:
            raise ValidationError({'status': f"Unknown status: {status_filter}"})

        partition = self._partition_param()
        return resolver.records(
            status=status_filter,
            partitions=[partition] if partition else None,
            search=(params.get('q') or '').strip() or None,
        )

    def get_object(self):
        _, record = resolver.resolve(self.kwargs['pk'], self._partition_param())
        self.check_object_permissions(self.request, record)
        return record

    def _move(self, pk, trigger, *args):
        with transaction.atomic():
            partition, record = resolver.resolve(pk, self._partition_param())
            record = resolver.lock(partition, record.pk)
            self.check_object_permissions(self.request, record)
            trigger(record, *args)
        return Response(PatientSerializer(record).data)

    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        serializer = AppointmentConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._move(
            pk,
            lifecycle.confirm_appointment,
            serializer.validated_data['appointment_date'],
            serializer.validated_data.get('appointment_time'),
        )

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        return self._move(pk, lifecycle.start_session)

    @action(detail=True, methods=['post'])
    def finish(self, request, pk=None):
        return self._move(pk, lifecycle.finish_treatment)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        return self._move(pk, lifecycle.cancel)

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        partition, record = resolver.resolve(pk, self._partition_param())
        return Response(PatientHistorySerializer(patient_history(partition, record)).data)

    @action(detail=False, methods=['get'])
    def today(self, request):
        today = timezone.localdate()
        records = [r for r in resolver.records() if timezone.localdate(r.submitted_at) == today]
        serializer = self.get_serializer(records, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)
