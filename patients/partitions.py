"""
Partition resolver.

Patients live in two disjoint tables split by gender. Everything above this
module addresses a patient as ``(partition, id)`` or just ``id`` and lets the
resolver find the physical store.
"""
import logging
import uuid

from django.db.models import Q

from core.exceptions import NotFoundError
from .models import FemalePatient, MalePatient, Partition

logger = logging.getLogger(__name__)


class PartitionStore:
    """Lookup strategy for one partition."""

    def __init__(self, partition, model):
        self.partition = partition
        self.model = model

    def queryset(self):
        return self.model.objects.select_related('doctor')

    def find(self, patient_id):
        return self.queryset().filter(pk=patient_id).first()

    def find_for_update(self, patient_id):
        return self.model.objects.select_for_update().filter(pk=patient_id).first()


class PartitionResolver:
    def __init__(self, stores):
        # probe order is the order given here
        self.stores = list(stores)
        self._by_partition = {store.partition: store for store in self.stores}

    def store_for(self, partition):
        try:
            return self._by_partition[Partition.from_gender(partition)]
        except ValueError:
            raise NotFoundError(f"Unknown patient partition: {partition!r}")

    def model_for(self, partition):
        return self.store_for(partition).model

    def partition_for_gender(self, gender):
        return Partition.from_gender(gender)

    def resolve(self, patient_id, gender_hint=None):
        """
        Return ``(partition, record)`` for ``patient_id``.

        With a hint only that partition is searched; without one each
        partition is probed in order and the first hit wins.
        """
        key = self._coerce_id(patient_id)
        stores = [self.store_for(gender_hint)] if gender_hint else self.stores

        for store in stores:
            record = store.find(key)
            if record is not None:
                return store.partition, record

        logger.debug("patient %s not found (hint=%s)", patient_id, gender_hint)
        raise NotFoundError(f"Patient {patient_id} not found")

    def lock(self, partition, patient_id):
        """Row-locked fetch; must run inside ``transaction.atomic()``."""
        store = self.store_for(partition)
        record = store.find_for_update(self._coerce_id(patient_id))
        if record is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return record

    def records(self, status=None, partitions=None, search=None):
        """Records from the requested partitions, newest submission first."""
        stores = [self.store_for(p) for p in partitions] if partitions else self.stores
        merged = []
        for store in stores:
            qs = store.queryset()
            if status:
                qs = qs.filter(status=status)
            if search:
                qs = qs.filter(Q(patient_name__icontains=search) | Q(patient_phone__contains=search))
            merged.extend(qs)
        merged.sort(key=lambda record: record.submitted_at, reverse=True)
        return merged

    @staticmethod
    def _coerce_id(patient_id):
        if isinstance(patient_id, uuid.UUID):
            return patient_id
        try:
            return uuid.UUID(str(patient_id))
        except ValueError:
            raise NotFoundError(f"Patient {patient_id} not found")


resolver = PartitionResolver([
    PartitionStore(Partition.MALE, MalePatient),
    PartitionStore(Partition.FEMALE, FemalePatient),
])


def resolve(patient_id, gender_hint=None):
    return resolver.resolve(patient_id, gender_hint)
