"""Admin back-office: dashboard and appointment management.

Both classes require an admin session; every public operation goes
through the admin guard before touching the API.
"""
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from nail_booking import config
from nail_booking.access import admin_required
from nail_booking.api import SalonApi
from nail_booking.errors import ApiError, BookingError, FormValidationError, InvalidTransition
from nail_booking.logging_config import get_logger
from nail_booking.models import Appointment, DashboardStats, TimeSlot
from nail_booking.session_store import SessionStore
from nail_booking.state import (
    ACTION_TARGET_STATUS,
    AdminAction,
    AppointmentStatus,
    STATUS_FILTERS,
    available_actions,
    can_reschedule,
    parse_status,
    validate_transition,
)

logger = get_logger(__name__)


class RescheduleSession:
    """Slots offered while moving one appointment to another time."""

    def __init__(self, appointment: Appointment, slots: List[TimeSlot]):
        self.appointment = appointment
        self.slots = slots
        self.selected: Optional[TimeSlot] = None

    def select(self, slot: TimeSlot):
        if slot.id not in {s.id for s in self.slots}:
            raise InvalidTransition("Horário indisponível para remanejamento")
        self.selected = slot


class AppointmentManager:
    """The admin appointment list with status changes and rescheduling."""

    def __init__(self, api: SalonApi, store: SessionStore):
        self.api = api
        self.store = store
        self.appointments: List[Appointment] = []
        self.reschedule: Optional[RescheduleSession] = None

    @admin_required
    def refresh(self) -> List[Appointment]:
        try:
            self.appointments = self.api.admin_appointments()
        except BookingError as exc:
            logger.error("load_appointments_failed", error=exc.message)
            self.appointments = []
        return self.appointments

    def filtered(self, status: str = "all") -> List[Appointment]:
        if status not in STATUS_FILTERS and status != AppointmentStatus.CANCELLED.value:
            raise FormValidationError(f"Filtro inválido: {status}", field="status")
        if status == "all":
            return list(self.appointments)
        return [apt for apt in self.appointments if apt.status == status]

    def find(self, appointment_id: str) -> Appointment:
        for apt in self.appointments:
            if apt.id == appointment_id:
                return apt
        raise InvalidTransition(f"Agendamento não encontrado: {appointment_id}")

    def actions_for(self, appointment: Appointment) -> List[AdminAction]:
        return available_actions(appointment.status)

    @admin_required
    def change_status(self, appointment_id: str, new_status: str):
        """
        Move an appointment along pending → confirmed → completed, or cancel it.

        Raises:
            InvalidTransition: not allowed from the current status
            ApiError: rejected by the API
        """
        appointment = self.find(appointment_id)
        target = parse_status(new_status)
        if not validate_transition(appointment.status, target):
            raise InvalidTransition(
                f"Não é possível alterar de '{appointment.status}' para '{target.value}'"
            )

        self.api.update_appointment_status(appointment_id, target.value)
        logger.info(
            "appointment_status_changed",
            appointment_id=appointment_id,
            old=appointment.status,
            new=target.value,
        )
        self.refresh()

    def apply_action(self, appointment_id: str, action: AdminAction):
        """Run a status-changing action (confirm, reject, complete, cancel)."""
        appointment = self.find(appointment_id)
        if action not in available_actions(appointment.status):
            raise InvalidTransition(
                f"Ação '{action.value}' indisponível para status '{appointment.status}'"
            )
        if action not in ACTION_TARGET_STATUS:
            raise InvalidTransition(f"Ação '{action.value}' não altera o status")
        self.change_status(appointment_id, ACTION_TARGET_STATUS[action].value)

    @admin_required
    def delete(self, appointment_id: str):
        self.api.delete_appointment(appointment_id)
        logger.info("appointment_deleted", appointment_id=appointment_id)
        self.refresh()

    @admin_required
    def open_reschedule(self, appointment: Appointment) -> RescheduleSession:
        """
        Start moving a confirmed appointment.

        Offers the open slots of the same service, minus the slot the
        appointment already holds.
        """
        if not can_reschedule(appointment.status):
            raise InvalidTransition("Somente agendamentos confirmados podem ser remanejados")

        self.reschedule = None
        service_id = appointment.service_id
        if not service_id:
            raise FormValidationError("ID do serviço não encontrado", field="service")

        try:
            slots = self.api.available_slots(service_id)
        except ApiError as exc:
            logger.error(
                "reschedule_slots_failed",
                appointment_id=appointment.id,
                error=exc.message,
            )
            raise

        current_slot_id = appointment.time_slot_id
        self.reschedule = RescheduleSession(
            appointment, [slot for slot in slots if slot.id != current_slot_id]
        )
        return self.reschedule

    @admin_required
    def confirm_reschedule(self, slot: Optional[TimeSlot] = None):
        session = self.reschedule
        if session is None:
            raise InvalidTransition("Nenhum remanejamento em andamento")
        if slot is not None:
            session.select(slot)
        if session.selected is None:
            raise FormValidationError("Selecione um novo horário", field="slot")

        self.api.reschedule_appointment(session.appointment.id, session.selected.id)
        logger.info(
            "appointment_rescheduled",
            appointment_id=session.appointment.id,
            new_time_slot_id=session.selected.id,
        )
        self.reschedule = None
        self.refresh()

    def cancel_reschedule(self):
        self.reschedule = None


class Dashboard:
    """Headline numbers plus the most recent appointments."""

    def __init__(self, api: SalonApi, store: SessionStore):
        self.api = api
        self.store = store
        self.stats = DashboardStats()
        self.recent: List[Appointment] = []

    @admin_required
    def load(self):
        """Fetch stats and recent appointments in parallel; failures keep zeros."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            stats_future = pool.submit(self.api.admin_dashboard)
            recent_future = pool.submit(
                self.api.admin_appointments, config.DASHBOARD_RECENT_LIMIT
            )
            try:
                stats = stats_future.result()
                recent = recent_future.result()
            except BookingError as exc:
                logger.error("dashboard_load_failed", error=exc.message)
                return self
        self.stats = stats
        self.recent = recent
        return self
