"""
Change-notification feed.

Every save or delete of a watched model sends ``table_changed`` with the
table name and the row id. Receivers are expected to re-query in full; the
feed gives no ordering or deduplication guarantee.
"""
import logging
from functools import partial

from django.core.cache import cache
from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal

logger = logging.getLogger(__name__)

# kwargs: table, pk, action ("saved" | "deleted")
table_changed = Signal()

# cache prefixes (see core.mixins.CacheResponseMixin) to drop per table
CACHE_PREFIXES = {
    "male_patients": ["patient"],
    "female_patients": ["patient"],
    "payments": ["payment"],
    "hijama_readings": ["reading"],
    "hijama_cup_prices": ["tier"],
    "coupons": ["coupon"],
}


def publish(sender, pk, action="saved"):
    """Announce a change the ORM did not signal, e.g. a queryset ``update()``."""
    table = sender._meta.db_table
    logger.debug("%s row %s %s", table, pk, action)
    table_changed.send(sender=sender, table=table, pk=pk, action=action)


def _on_save(sender, instance, **kwargs):
    publish(sender, instance.pk, "saved")


def _on_delete(sender, instance, **kwargs):
    publish(sender, instance.pk, "deleted")


def watch(*models):
    for model in models:
        post_save.connect(_on_save, sender=model, dispatch_uid=f"events_save_{model._meta.label}")
        post_delete.connect(_on_delete, sender=model, dispatch_uid=f"events_delete_{model._meta.label}")


def cache_keys_for(table, pk=None):
    keys = []
    for prefix in CACHE_PREFIXES.get(table, []):
        keys.append(f"all_{prefix}s")
        if pk is not None:
            keys.append(f"{prefix}_{pk}")
    return keys


def _drop_keys(keys):
    cache.delete_many(keys)
    logger.debug("Invalidated cache keys: %s", keys)


def invalidate_cached_listings(sender, table, pk, **kwargs):
    keys = cache_keys_for(table, pk)
    if keys:
        transaction.on_commit(partial(_drop_keys, keys))


table_changed.connect(invalidate_cached_listings, dispatch_uid="events_invalidate_cache")
