import os
from pathlib import Path
from django.conf import settings
from dotenv import load_dotenv


def _from_env(key: str) -> str:
    if not os.getenv(key):
        env_path = Path(settings.BASE_DIR) / ".env"
        if env_path.exists():
            load_dotenv(env_path)
    return os.getenv(key, "")


def get_seller_name() -> str:
    return getattr(settings, "CLINIC_NAME", "") or _from_env("CLINIC_NAME")


def get_vat_number() -> str:
    return getattr(settings, "CLINIC_VAT_NUMBER", "") or _from_env("CLINIC_VAT_NUMBER")
