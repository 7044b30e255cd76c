"""State machines for the booking flow and the appointment lifecycle.

Two independent machines:
- BookingStep: what the customer has picked so far on the services screen
- AppointmentStatus: where an appointment is in the admin workflow
"""
from enum import Enum
from typing import Dict, FrozenSet, List


class BookingStep(str, Enum):
    """Customer booking flow."""
    SELECT_SERVICE = "select_service"
    SERVICE_SELECTED = "service_selected"
    SLOT_SELECTED = "slot_selected"
    CONFIRMED = "confirmed"


# Current step → allowed next steps
# Picking another service is always possible before confirmation and
# drops the chosen slot.
BOOKING_TRANSITIONS: Dict[BookingStep, FrozenSet[BookingStep]] = {
    BookingStep.SELECT_SERVICE: frozenset({BookingStep.SERVICE_SELECTED}),
    BookingStep.SERVICE_SELECTED: frozenset({
        BookingStep.SERVICE_SELECTED,
        BookingStep.SLOT_SELECTED,
    }),
    BookingStep.SLOT_SELECTED: frozenset({
        BookingStep.SERVICE_SELECTED,
        BookingStep.SLOT_SELECTED,
        BookingStep.CONFIRMED,
    }),
    BookingStep.CONFIRMED: frozenset({BookingStep.SERVICE_SELECTED}),
}


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


STATUS_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

STATUS_LABELS = {
    AppointmentStatus.PENDING: "Pendente",
    AppointmentStatus.CONFIRMED: "Confirmado",
    AppointmentStatus.CANCELLED: "Cancelado",
    AppointmentStatus.COMPLETED: "Concluído",
}

# Filter values offered on the admin appointment list
STATUS_FILTERS = ("all", "pending", "confirmed", "completed")


class AdminAction(str, Enum):
    CONFIRM = "confirm"
    REJECT = "reject"
    COMPLETE = "complete"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
    DELETE = "delete"


# Status change performed by each action (reschedule and delete keep it)
ACTION_TARGET_STATUS = {
    AdminAction.CONFIRM: AppointmentStatus.CONFIRMED,
    AdminAction.REJECT: AppointmentStatus.CANCELLED,
    AdminAction.COMPLETE: AppointmentStatus.COMPLETED,
    AdminAction.CANCEL: AppointmentStatus.CANCELLED,
}

_STATUS_ACTIONS = {
    AppointmentStatus.PENDING: [AdminAction.CONFIRM, AdminAction.REJECT],
    AppointmentStatus.CONFIRMED: [
        AdminAction.RESCHEDULE,
        AdminAction.COMPLETE,
        AdminAction.CANCEL,
    ],
}


def parse_status(value) -> AppointmentStatus:
    """
    Coerce a raw status string.

    Raises:
        ValueError: unknown status
    """
    if isinstance(value, AppointmentStatus):
        return value
    return AppointmentStatus(str(value).lower())


def validate_transition(current, intended) -> bool:
    """
    Check an appointment status change.

    Example:
        >>> validate_transition("pending", "confirmed")
        True
        >>> validate_transition("completed", "pending")
        False
    """
    try:
        current, intended = parse_status(current), parse_status(intended)
    except ValueError:
        return False
    return intended in STATUS_TRANSITIONS[current]


def validate_booking_step(current: BookingStep, intended: BookingStep) -> bool:
    return intended in BOOKING_TRANSITIONS.get(current, frozenset())


def available_actions(status) -> List[AdminAction]:
    """Admin actions offered for an appointment; delete is always last."""
    try:
        actions = list(_STATUS_ACTIONS.get(parse_status(status), []))
    except ValueError:
        actions = []
    actions.append(AdminAction.DELETE)
    return actions


def can_reschedule(status) -> bool:
    return AdminAction.RESCHEDULE in available_actions(status)
