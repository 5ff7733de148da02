import logging
from django.core.cache import cache
from django.conf import settings
from rest_framework.response import Response
from rest_framework import status

logger = logging.getLogger(__name__)
CACHE_TTL = getattr(settings, 'CACHE_TTL', 300)


class CacheResponseMixin:
    """
    Caches unfiltered list and retrieve payloads. Keys are dropped by
    core.events when the underlying table changes.
    """
    cache_key_prefix = None

    def get_cache_key_prefix(self):
        if self.cache_key_prefix is None:
            return self.__class__.__name__.lower().replace('viewset', '')
        return self.cache_key_prefix

    def list(self, request, *args, **kwargs):
        if request.query_params:
            return super().list(request, *args, **kwargs)

        prefix = self.get_cache_key_prefix()
        cache_key = f"all_{prefix}s"
        data = cache.get(cache_key)

        if data is None:
            queryset = self.filter_queryset(self.get_queryset())
            serializer = self.get_serializer(queryset, many=True)
            data = serializer.data
            cache.set(cache_key, data, timeout=CACHE_TTL)
            logger.debug("%s.list cache miss; cached %d records", prefix, len(data))
        else:
            logger.debug("%s.list cache hit", prefix)

        return Response(data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None, *args, **kwargs):
        if request.query_params:
            return super().retrieve(request, *args, pk=pk, **kwargs)

        prefix = self.get_cache_key_prefix()
        cache_key = f"{prefix}_{pk}"
        data = cache.get(cache_key)

        if data is None:
            instance = self.get_object()
            serializer = self.get_serializer(instance)
            data = serializer.data
            cache.set(cache_key, data, timeout=CACHE_TTL)
            logger.debug("%s.retrieve cache miss for id=%s", prefix, pk)
        else:
            logger.debug("%s.retrieve cache hit for id=%s", prefix, pk)

        return Response(data, status=status.HTTP_200_OK)
