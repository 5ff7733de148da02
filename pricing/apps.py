from django.apps import AppConfig


class PricingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'pricing'

    def ready(self):
        from core import events
        from .models import Coupon, CupPriceTier
        events.watch(CupPriceTier, Coupon)
