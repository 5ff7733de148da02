from django.utils import timezone
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.models import User
from accounts.permissions import IsAdmin, IsAdminOrReceptionist
from core.exceptions import NotFoundError, ValidationError
from core.mixins import CacheResponseMixin
from . import reports
from .invoices import get_payload_strategy, synthesize
from .models import Payment
from .serializers import (
    DateRangeSerializer,
    DoctorCommissionSerializer,
    InvoiceSerializer,
    PaymentSerializer,
    PaymentSettleSerializer,
    PaymentsReportSerializer,
)


class PaymentViewSet(CacheResponseMixin, viewsets.ReadOnlyModelViewSet):
    queryset = Payment.objects.select_related('doctor', 'coupon').all()
    serializer_class = PaymentSerializer
    cache_key_prefix = "payment"

    def get_permissions(self):
        if self.action in ['report', 'doctor_commission']:
            permission_classes = [IsAdmin]
        else:
            permission_classes = [IsAdminOrReceptionist]
        return [p() for p in permission_classes]

    def get_serializer_class(self):
        if self.action == 'settle':
            return PaymentSettleSerializer
        return PaymentSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params

        status_filter = params.get('status')
        if status_filter:
            if status_filter not in dict(Payment.STATUS_CHOICES):
                raise ValidationError({'status': f"Unknown status: {status_filter}"})
            qs = qs.filter(status=status_filter)

        if params.get('from') or params.get('to'):
            start, end = DateRangeSerializer.from_query(params)
            qs = qs.filter(created_at__date__gte=start, created_at__date__lte=end)
        return qs

    @action(detail=True, methods=['post'])
    def settle(self, request, pk=None):
        serializer = PaymentSettleSerializer(self.get_object(), data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = serializer.save()
        return Response(PaymentSerializer(payment).data)

    @action(detail=True, methods=['get'])
    def invoice(self, request, pk=None):
        payment = self.get_object()
        strategy = get_payload_strategy(request.query_params.get('payload'))
        return Response(InvoiceSerializer(synthesize(payment, strategy)).data)

    @action(detail=False, methods=['get'])
    def today(self, request):
        today = timezone.localdate()
        queryset = Payment.objects.select_related('doctor', 'coupon').filter(created_at__date=today)
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def report(self, request):
        start, end = DateRangeSerializer.from_query(request.query_params)
        return Response(PaymentsReportSerializer(reports.payments_report(start, end)).data)

    @action(detail=False, methods=['get'], url_path='doctor-commission')
    def doctor_commission(self, request):
        doctor_id = request.query_params.get('doctor')
        if not doctor_id or not doctor_id.isdigit():
            raise ValidationError({'doctor': 'A doctor id is required.'})
        doctor = User.objects.doctors().filter(pk=int(doctor_id)).first()
        if doctor is None:
            raise NotFoundError(f"Doctor {doctor_id} not found")

        start, end = DateRangeSerializer.from_query(request.query_params)
        return Response(DoctorCommissionSerializer(reports.doctor_commission(doctor, start, end)).data)
