"""
Configuración de la aplicación de recepción
Todas las opciones salen de variables de entorno (.env soportado)
"""
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Default rate card seeded on the first open of an empty database
DEFAULT_RATES = [
    ("101", "Super Deluxe Room", 3000),
    ("102", "Super Deluxe Room", 3000),
    ("103", "Deluxe Non AC Room", 2000),
    ("104", "Deluxe Non AC Room", 2000),
    ("201", "Family Suite", 5000),
    ("202", "Family Suite", 5000),
]

OTA_PLATFORMS_DEFAULT = "Booking.com,Agoda,MakeMyTrip,Airbnb"


class Settings:
    """Settings resolved from the environment at construction time."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        guest_docs_path: Optional[str] = None,
        admin_password: Optional[str] = None,
        seed_default_rates: Optional[bool] = None,
        ota_feed_url: Optional[str] = None,
    ):
        self.database_url = database_url or os.getenv("DATABASE_URL", "sqlite:///./frontdesk.db")
        self.guest_docs_path = guest_docs_path or os.getenv("GUEST_DOCS_PATH", os.path.join(".", "Guest_Docs"))
        self.admin_password = admin_password or os.getenv("ADMIN_PASSWORD", "admin123")

        self.hotel_name = os.getenv("HOTEL_NAME", "Hotel Front Desk")
        self.hotel_timezone = os.getenv("HOTEL_TIMEZONE", "Asia/Kolkata")

        self.smtp_host = os.getenv("SMTP_HOST", "smtp.gmail.com")
        self.smtp_port = _env_int("SMTP_PORT", 587)
        self.email_user = os.getenv("EMAIL_USER", "")
        self.email_pass = os.getenv("EMAIL_PASS", "")
        self.email_timeout = _env_int("EMAIL_TIMEOUT", 20)

        self.ota_feed_url = ota_feed_url if ota_feed_url is not None else os.getenv("OTA_FEED_URL", "")
        self.ota_api_key = os.getenv("OTA_API_KEY", "")
        self.ota_fetch_timeout = _env_int("OTA_FETCH_TIMEOUT", 15)
        self.ota_platforms: List[str] = [
            p.strip() for p in os.getenv("OTA_PLATFORMS", OTA_PLATFORMS_DEFAULT).split(",") if p.strip()
        ]

        self.log_file = os.getenv("LOG_FILE", "frontdesk_logs.txt")
        self.seed_default_rates = (
            seed_default_rates if seed_default_rates is not None else _env_bool("SEED_DEFAULT_RATES", True)
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Retorna la configuración del proceso (se construye una sola vez)"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
