"""Client for the Espaço Vitória nail salon booking API."""
from nail_booking.client import SalonClient, build_client

__all__ = ["SalonClient", "build_client"]
