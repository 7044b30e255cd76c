"""Customer booking workflow.

BookingFlow holds the state of the services screen: chosen service, the
slots offered for it, chosen slot, damaged-nail survey and payment
method. Booking needs a session; when there is none the flow asks for
quick registration or login and books right after it succeeds.

GuestCheckout is the shorter two-step variant (details, then
confirmation) used when a service and slot were picked elsewhere.
"""
from collections import OrderedDict
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from nail_booking import config
from nail_booking.api import SalonApi
from nail_booking.auth import AuthService
from nail_booking.errors import (
    ApiError,
    AuthenticationRequired,
    BookingError,
    FormValidationError,
    InvalidTransition,
)
from nail_booking.formatting import format_phone
from nail_booking.logging_config import get_logger
from nail_booking.models import Service, TimeSlot
from nail_booking.state import BookingStep, validate_booking_step
from nail_booking.validators import (
    InputSanitizer,
    validate_guest_details,
    validate_login,
    validate_quick_register,
)

logger = get_logger(__name__)

DAMAGED_NAILS_ANSWERS = ("sim", "nao")
DAMAGED_NAILS_DEFAULT_NOTE = "Cliente informou que possui unha(s) danificada(s)"
BOOKING_SUCCESS_MESSAGE = "Agendamento realizado com sucesso!"
GUEST_SUCCESS_MESSAGE = (
    "Agendamento realizado com sucesso! Você receberá uma confirmação em breve."
)


class BookingResult(str, Enum):
    BOOKED = "booked"
    NEEDS_AUTH = "needs_auth"


class AuthMode(str, Enum):
    QUICK = "quick"
    LOGIN = "login"


def group_slots_by_date(slots: Iterable[TimeSlot]) -> "OrderedDict[str, List[TimeSlot]]":
    """Group slots by calendar day, keeping the order the API returned."""
    grouped: "OrderedDict[str, List[TimeSlot]]" = OrderedDict()
    for slot in slots:
        grouped.setdefault(slot.day, []).append(slot)
    return grouped


def build_damaged_nails_note(answer: Optional[str], note: str = "") -> str:
    if answer != "sim":
        return ""
    detail = InputSanitizer.sanitize_text(note) or DAMAGED_NAILS_DEFAULT_NOTE
    return f"⚠️ UNHA DANIFICADA: {detail}"


def _server_message(exc: BookingError, fallback: str) -> str:
    """Server-provided error text, else ``fallback``."""
    payload = getattr(exc, "payload", None)
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return fallback


class BookingFlow:
    """State of the service → slot → confirmation screen."""

    def __init__(self, api: SalonApi, auth: AuthService):
        self.api = api
        self.auth = auth
        self.services: List[Service] = []
        self.available_slots: List[TimeSlot] = []
        self.selected_service: Optional[Service] = None
        self.selected_slot: Optional[TimeSlot] = None
        self.step = BookingStep.SELECT_SERVICE
        self.damaged_nails: Optional[str] = None
        self.damaged_nails_note = ""
        self.payment_method = config.DEFAULT_PAYMENT_METHOD
        self.auth_prompt_open = False
        self.auth_mode = AuthMode.QUICK
        self.error = ""
        self.success = ""
        self.last_appointment: Optional[Dict[str, Any]] = None

    def _move_to(self, step: BookingStep):
        if not validate_booking_step(self.step, step):
            raise InvalidTransition(f"Cannot go from {self.step.value} to {step.value}")
        self.step = step

    def load_services(self) -> List[Service]:
        try:
            self.services = self.api.list_services()
        except BookingError as exc:
            logger.error("load_services_failed", error=exc.message)
            self.services = []
        return self.services

    def select_service(self, service: Service) -> List[TimeSlot]:
        """Pick a service; previous slot and survey answers are dropped."""
        self._move_to(BookingStep.SERVICE_SELECTED)
        self.selected_service = service
        self.selected_slot = None
        self.damaged_nails = None
        self.damaged_nails_note = ""
        self.error = ""
        self.success = ""

        try:
            self.available_slots = self.api.available_slots(service.id)
        except BookingError as exc:
            logger.error("load_slots_failed", service_id=service.id, error=exc.message)
            self.available_slots = []
        return self.available_slots

    def select_slot(self, slot: TimeSlot):
        if self.selected_service is None:
            raise InvalidTransition("Selecione um serviço primeiro")
        if slot.id not in {s.id for s in self.available_slots}:
            raise InvalidTransition("Horário indisponível para este serviço")
        self._move_to(BookingStep.SLOT_SELECTED)
        self.selected_slot = slot
        self.error = ""

    def slots_by_date(self) -> "OrderedDict[str, List[TimeSlot]]":
        return group_slots_by_date(self.available_slots)

    def set_damaged_nails(self, answer: str, note: str = ""):
        if answer not in DAMAGED_NAILS_ANSWERS:
            raise FormValidationError("Responda sim ou não", field="damaged_nails")
        self.damaged_nails = answer
        self.damaged_nails_note = note if answer == "sim" else ""

    def set_payment_method(self, method: str):
        if method not in config.PAYMENT_METHODS:
            raise FormValidationError("Forma de pagamento inválida", field="payment_method")
        self.payment_method = method

    def notes(self) -> str:
        return build_damaged_nails_note(self.damaged_nails, self.damaged_nails_note)

    def request_booking(self) -> BookingResult:
        """
        The "Agendar" button.

        Books straight away for a logged-in customer; otherwise opens the
        quick registration / login prompt and returns NEEDS_AUTH.
        """
        if self.selected_service is None or self.selected_slot is None:
            self.error = "Selecione um serviço e horário"
            raise FormValidationError(self.error)

        if self.auth.is_authenticated():
            self.confirm_booking()
            return BookingResult.BOOKED

        self.auth_prompt_open = True
        return BookingResult.NEEDS_AUTH

    def confirm_booking(self) -> Dict[str, Any]:
        """
        Create the appointment for the current selection.

        Raises:
            AuthenticationRequired: no valid session
            ApiError: rejected by the API (message kept in ``self.error``)
        """
        if self.selected_service is None or self.selected_slot is None:
            self.error = "Selecione um serviço e horário"
            raise FormValidationError(self.error)
        if not self.auth.is_authenticated():
            raise AuthenticationRequired("Faça login para confirmar o agendamento")

        self.error = ""
        try:
            result = self.api.create_appointment(
                service_id=self.selected_service.id,
                time_slot_id=self.selected_slot.id,
                payment_method=self.payment_method,
                notes=self.notes(),
            )
        except ApiError as exc:
            self.error = exc.message
            logger.error("create_appointment_failed", error=exc.message, status=exc.status_code)
            raise

        self._move_to(BookingStep.CONFIRMED)
        logger.info(
            "appointment_created",
            service_id=self.selected_service.id,
            time_slot_id=self.selected_slot.id,
        )
        self.last_appointment = result
        self.success = BOOKING_SUCCESS_MESSAGE
        self._reset_selection()
        return result

    def quick_register_and_book(
        self, name: str, phone: str, email: str, pin: str
    ) -> Dict[str, Any]:
        """Quick registration with a 4-digit PIN, then book."""
        try:
            validate_quick_register(name, phone, email, pin)
        except FormValidationError as exc:
            self.error = exc.message
            raise

        self.error = ""
        try:
            self.auth.quick_register(
                InputSanitizer.sanitize_text(name), phone, email.strip(), password=pin
            )
        except ApiError as exc:
            self.error = _server_message(exc, "Erro ao processar. Tente novamente.")
            raise
        return self.confirm_booking()

    def login_and_book(self, email: str, password: str) -> Dict[str, Any]:
        try:
            validate_login(email, password)
        except FormValidationError as exc:
            self.error = exc.message
            raise

        self.error = ""
        try:
            self.auth.login(email.strip(), password)
        except ApiError as exc:
            self.error = _server_message(exc, "Email ou senha inválidos")
            raise
        return self.confirm_booking()

    def switch_auth_mode(self, mode: AuthMode):
        """Toggle the prompt between quick registration and login."""
        self.auth_mode = AuthMode(mode)
        self.error = ""

    def close_auth_prompt(self):
        self.auth_prompt_open = False
        self.error = ""

    def _reset_selection(self):
        self.selected_service = None
        self.selected_slot = None
        self.available_slots = []
        self.auth_prompt_open = False
        self.damaged_nails = None
        self.damaged_nails_note = ""


class GuestCheckout:
    """
    Two-step checkout for a fixed service and slot.

    Step 1 collects name, phone and e-mail; step 2 shows the summary and
    the payment method. Confirming quick-registers the guest (no PIN) and
    creates the appointment.
    """

    DETAILS = 1
    CONFIRMATION = 2

    def __init__(self, api: SalonApi, auth: AuthService, service: Service, slot: TimeSlot):
        self.api = api
        self.auth = auth
        self.service = service
        self.slot = slot
        self.step = self.DETAILS
        self.name = ""
        self.phone = ""
        self.email = ""
        self.payment_method = config.DEFAULT_PAYMENT_METHOD
        self.error = ""
        self.success = ""
        self.completed = False

    def set_field(self, field: str, value: str):
        if field == "phone":
            value = format_phone(value)
        elif field == "payment_method":
            if value not in config.PAYMENT_METHODS:
                raise FormValidationError("Forma de pagamento inválida", field=field)
        elif field not in ("name", "email"):
            raise FormValidationError(f"Campo desconhecido: {field}", field=field)
        setattr(self, field, value)
        self.error = ""

    def next_step(self):
        try:
            validate_guest_details(self.name, self.phone, self.email)
        except FormValidationError as exc:
            self.error = exc.message
            raise
        self.step = self.CONFIRMATION

    def back(self):
        self.step = self.DETAILS

    def confirm(self) -> Dict[str, Any]:
        if self.step != self.CONFIRMATION:
            raise InvalidTransition("Confirme seus dados antes de agendar")
        if self.completed:
            raise InvalidTransition("Agendamento já realizado")

        self.error = ""
        try:
            self.auth.quick_register(
                InputSanitizer.sanitize_text(self.name), self.phone, self.email.strip()
            )
            result = self.api.create_appointment(
                service_id=self.service.id,
                time_slot_id=self.slot.id,
                payment_method=self.payment_method,
            )
        except ApiError as exc:
            self.error = _server_message(
                exc, "Erro ao realizar agendamento. Tente novamente."
            )
            logger.error("guest_checkout_failed", error=self.error, status=exc.status_code)
            raise

        self.completed = True
        self.success = GUEST_SUCCESS_MESSAGE
        logger.info("guest_checkout_completed", service_id=self.service.id, time_slot_id=self.slot.id)
        return result
