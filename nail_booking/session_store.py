"""Local storage for the logged-in user's token and profile.

The session is a small JSON file (``token``, ``user``, ``userName``).
Passing ``path=None`` keeps everything in memory, which is what the
tests and one-shot scripts use.
"""
import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

from jose import jwt
from jose.exceptions import JWTError

from nail_booking import config
from nail_booking.logging_config import get_logger
from nail_booking.models import User

logger = get_logger(__name__)

_DEFAULT = object()


class SessionStore:
    """Token and user persisted between runs."""

    def __init__(self, path: Any = _DEFAULT, clock=time.time):
        if path is _DEFAULT:
            path = config.SESSION_FILE
        self.path: Optional[Path] = Path(path) if path is not None else None
        self._clock = clock
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("session_file_unreadable", path=str(self.path), error=str(exc))
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self):
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)

    @property
    def token(self) -> Optional[str]:
        return self._data.get("token")

    @property
    def user(self) -> Optional[User]:
        raw = self._data.get("user")
        return User.model_validate(raw) if isinstance(raw, dict) else None

    @property
    def user_name(self) -> str:
        return self._data.get("userName") or ""

    def token_provider(self) -> Optional[str]:
        """Callable handed to ApiTransport."""
        return self.token

    def save(self, token: str, user: Optional[Dict[str, Any]] = None):
        """Store a fresh token; user profile and name only when provided."""
        self._data["token"] = token
        if user:
            self._data["user"] = user
            self._data["userName"] = user.get("name", "")
        self._flush()
        logger.info("session_saved", user=self.user_name or None)

    def clear(self):
        self._data = {}
        if self.path is not None and self.path.exists():
            self.path.unlink()

    def is_authenticated(self) -> bool:
        """
        True when a token is stored and not expired.

        The JWT is inspected without verifying its signature (that is the
        API's job); an expired token clears the session. A token that
        cannot be decoded still counts as a session.
        """
        token = self.token
        if not token:
            return False

        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            return True

        exp = claims.get("exp")
        if exp is not None and float(exp) < self._clock():
            logger.info("session_expired")
            self.clear()
            return False
        return True

    def is_admin(self) -> bool:
        user = self.user
        return bool(user and user.is_admin)
