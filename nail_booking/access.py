"""Access guards for customer-only and admin-only screens."""
from functools import wraps

from nail_booking.errors import AuthenticationRequired, PermissionDenied
from nail_booking.session_store import SessionStore

LOGIN_REQUIRED_MESSAGE = "Faça login para continuar"
ADMIN_REQUIRED_MESSAGE = "Acesso restrito à administração"


def require_auth(store: SessionStore) -> None:
    if not store.is_authenticated():
        raise AuthenticationRequired(LOGIN_REQUIRED_MESSAGE)


def require_admin(store: SessionStore) -> None:
    """Admin screens need both a valid session and the admin role."""
    if not store.is_authenticated():
        raise AuthenticationRequired(LOGIN_REQUIRED_MESSAGE)
    if not store.is_admin():
        raise PermissionDenied(ADMIN_REQUIRED_MESSAGE)


def auth_required(method):
    """Guard a method of an object exposing ``self.store``."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        require_auth(self.store)
        return method(self, *args, **kwargs)
    return wrapper


def admin_required(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        require_admin(self.store)
        return method(self, *args, **kwargs)
    return wrapper
