"""Customer and admin authentication against the booking API.

The API issues the JWT; this module only calls the auth endpoints and
keeps the returned token and profile in the SessionStore.
"""
from typing import Any, Dict, Optional

from nail_booking.access import auth_required
from nail_booking.api import SalonApi
from nail_booking.formatting import digits_only
from nail_booking.logging_config import get_logger
from nail_booking.models import AuthSession, User
from nail_booking.session_store import SessionStore

logger = get_logger(__name__)


class AuthService:
    def __init__(self, api: SalonApi, store: SessionStore):
        self.api = api
        self.store = store

    def _remember(self, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        data = data or {}
        session = AuthSession.model_validate(data)
        if session.token:
            self.store.save(session.token, data.get("user"))
        return data

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self._remember(self.api.register(name, email, password))

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._remember(self.api.login(email, password))
        logger.info("login_succeeded", email=email)
        return data

    def quick_register(
        self,
        name: str,
        phone: str,
        email: str,
        password: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create (or reuse) a customer account with minimal data.

        The phone number is sent as digits only. ``password`` is the
        4-digit PIN from the booking screen; the guest checkout sends none.
        """
        data = self._remember(
            self.api.quick_register(name, digits_only(phone), email, password)
        )
        logger.info("quick_register_succeeded", email=email)
        return data

    @auth_required
    def current_user(self) -> Optional[User]:
        data = self.api.me() or {}
        user = data.get("user")
        return User.model_validate(user) if isinstance(user, dict) else None

    def logout(self):
        self.store.clear()
        logger.info("logged_out")

    def is_authenticated(self) -> bool:
        return self.store.is_authenticated()

    def is_admin(self) -> bool:
        return self.store.is_admin()

    def user_name(self) -> str:
        return self.store.user_name
