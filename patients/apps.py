from django.apps import AppConfig


class PatientsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'patients'

    def ready(self):
        from core import events
        from .models import FemalePatient, MalePatient
        events.watch(MalePatient, FemalePatient)
