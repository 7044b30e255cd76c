"""Form validation and input clean-up for the booking screens.

Validators raise FormValidationError carrying the message shown to the
customer; they never talk to the API.
"""
import re
from typing import Optional

from nail_booking.errors import FormValidationError
from nail_booking.formatting import digits_only

MIN_PHONE_DIGITS = 10
PIN_LENGTH = 4
PIN_PATTERN = re.compile(r"^\d{4}$")


class InputSanitizer:
    """
    Clean free text typed by customers before it is sent to the API.

    Covers names and the damaged-nail note, which admins later read.
    """

    HTML_TAG_PATTERN = re.compile(r"<[^>]+>")
    SCRIPT_PATTERN = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
    JAVASCRIPT_PATTERN = re.compile(r"javascript:", re.IGNORECASE)

    @staticmethod
    def sanitize_text(text: Optional[str]) -> str:
        """Drop scripts and HTML tags, collapse whitespace."""
        if not text:
            return ""
        text = InputSanitizer.SCRIPT_PATTERN.sub("", text)
        text = InputSanitizer.JAVASCRIPT_PATTERN.sub("", text)
        text = InputSanitizer.HTML_TAG_PATTERN.sub("", text)
        return " ".join(text.split())


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_guest_details(name: str, phone: str, email: str) -> None:
    """
    Check the personal data step of the guest checkout.

    Raises:
        FormValidationError: first failing field
    """
    if _blank(name):
        raise FormValidationError("Por favor, informe seu nome completo", field="name")
    if _blank(phone) or len(digits_only(phone)) < MIN_PHONE_DIGITS:
        raise FormValidationError("Por favor, informe um telefone válido", field="phone")
    if _blank(email) or "@" not in email:
        raise FormValidationError("Por favor, informe um e-mail válido", field="email")


def validate_quick_register(name: str, phone: str, email: str, pin: str) -> None:
    """
    Check the quick registration form (all fields plus a 4-digit PIN).

    Raises:
        FormValidationError: missing field or malformed PIN
    """
    if _blank(name) or _blank(phone) or _blank(email):
        raise FormValidationError("Preencha todos os campos")
    if not pin or not PIN_PATTERN.match(pin):
        raise FormValidationError("Digite uma senha de 4 dígitos", field="pin")


def validate_login(email: str, password: str) -> None:
    if _blank(email) or _blank(password):
        raise FormValidationError("Preencha email e senha")


def sanitize_pin(value: Optional[str]) -> str:
    """Keep digits only, at most four."""
    return digits_only(value)[:PIN_LENGTH]
