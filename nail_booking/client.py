"""Wiring: one object holding the store, transport, API and workflows."""
from dataclasses import dataclass
from typing import Optional

from nail_booking import config
from nail_booking.admin import AppointmentManager, Dashboard
from nail_booking.api import SalonApi
from nail_booking.auth import AuthService
from nail_booking.booking import BookingFlow, GuestCheckout
from nail_booking.http_client import ApiTransport
from nail_booking.models import Service, TimeSlot
from nail_booking.session_store import SessionStore


@dataclass
class SalonClient:
    store: SessionStore
    api: SalonApi
    auth: AuthService

    def booking_flow(self) -> BookingFlow:
        return BookingFlow(self.api, self.auth)

    def guest_checkout(self, service: Service, slot: TimeSlot) -> GuestCheckout:
        return GuestCheckout(self.api, self.auth, service, slot)

    def appointment_manager(self) -> AppointmentManager:
        return AppointmentManager(self.api, self.store)

    def dashboard(self) -> Dashboard:
        return Dashboard(self.api, self.store)


def build_client(
    base_url: str = config.API_BASE_URL,
    store: Optional[SessionStore] = None,
    transport: Optional[ApiTransport] = None,
) -> SalonClient:
    """
    Assemble a client whose requests carry the stored session token.

    Args:
        base_url: API root, e.g. http://localhost:5000
        store: Session storage (defaults to the configured session file)
        transport: Pre-built transport, mainly for tests
    """
    store = store if store is not None else SessionStore()
    transport = transport or ApiTransport(base_url=base_url, token_provider=store.token_provider)
    api = SalonApi(transport)
    return SalonClient(store=store, api=api, auth=AuthService(api, store))
