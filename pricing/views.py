from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsAdminOrReadOnly, IsAdminOrReceptionist
from core.exceptions import NotFoundError
from core.mixins import CacheResponseMixin
from payments.reports import referral_commission
from payments.serializers import DateRangeSerializer, ReferralCommissionSerializer
from .engine import price_for
from .models import Coupon, CupPriceTier
from .serializers import CouponSerializer, CupPriceTierSerializer, PriceQuoteSerializer


class CupPriceTierViewSet(CacheResponseMixin, viewsets.ModelViewSet):
    queryset = CupPriceTier.objects.all()
    serializer_class = CupPriceTierSerializer
    permission_classes = [IsAdminOrReadOnly]
    cache_key_prefix = "tier"

    @action(detail=False, methods=['get'])
    def quote(self, request):
        serializer = PriceQuoteSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        points = serializer.validated_data['points']
        price = price_for(points, CupPriceTier.objects.price_table())
        return Response({'points': points, 'price': str(price)})


class CouponViewSet(CacheResponseMixin, viewsets.ModelViewSet):
    queryset = Coupon.objects.all()
    serializer_class = CouponSerializer
    cache_key_prefix = "coupon"

    def get_permissions(self):
        if self.action in ['list', 'retrieve', 'check']:
            permission_classes = [IsAdminOrReceptionist]
        else:
            permission_classes = [IsAdmin]
        return [p() for p in permission_classes]

    @action(detail=False, methods=['get'])
    def check(self, request):
        code = (request.query_params.get('code') or '').strip().upper()
        coupon = Coupon.objects.filter(code=code).first() if code else None
        if coupon is None:
            raise NotFoundError(f"Coupon {code or '(empty)'} not found")

        reason = coupon.rejection_reason()
        return Response({
            'valid': reason is None,
            'reason': reason,
            'coupon': CouponSerializer(coupon).data,
        })

    @action(detail=True, methods=['get'])
    def commission(self, request, pk=None):
        coupon = self.get_object()
        start, end = DateRangeSerializer.from_query(request.query_params)
        return Response(ReferralCommissionSerializer(referral_commission(coupon, start, end)).data)
