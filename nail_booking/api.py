"""Endpoint wrappers for the salon booking REST API."""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from nail_booking.errors import ApiError
from nail_booking.http_client import ApiTransport
from nail_booking.models import (
    Appointment,
    DashboardStats,
    Service,
    TimeSlot,
    parse_many,
    unwrap_list,
)


class SalonApi:
    """One method per endpoint; list answers are normalized to models."""

    def __init__(self, transport: ApiTransport):
        self.transport = transport

    # -- auth -------------------------------------------------------------

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self.transport.post(
            "/auth/register",
            json={"name": name, "email": email, "password": password},
            fallback="Erro ao registrar",
        )

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self.transport.post(
            "/auth/login",
            json={"email": email, "password": password},
            fallback="Erro ao fazer login",
        )

    def quick_register(
        self,
        name: str,
        phone: str,
        email: str,
        password: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {"name": name, "phone": phone, "email": email}
        if password is not None:
            body["password"] = password
        return self.transport.post(
            "/auth/quick-register",
            json=body,
            fallback="Erro ao processar. Tente novamente.",
        )

    def me(self) -> Dict[str, Any]:
        return self.transport.get("/auth/me", fallback="Erro ao buscar usuário")

    # -- catalogue --------------------------------------------------------

    def list_services(self) -> List[Service]:
        payload = self.transport.get("/services", fallback="Erro ao carregar serviços")
        return parse_many(Service, unwrap_list(payload, "services", "data"))

    def available_slots(self, service_id: str) -> List[TimeSlot]:
        payload = self.transport.get(
            "/appointments/available-slots",
            params={"serviceId": service_id},
            fallback="Erro ao buscar horários",
        )
        return parse_many(TimeSlot, unwrap_list(payload, "slots", "data"))

    # -- appointments -----------------------------------------------------

    def create_appointment(
        self,
        service_id: str,
        time_slot_id: str,
        payment_method: str,
        notes: str = "",
    ) -> Dict[str, Any]:
        return self.transport.post(
            "/appointments",
            json={
                "serviceId": service_id,
                "timeSlotId": time_slot_id,
                "paymentMethod": payment_method,
                "notes": notes,
            },
            fallback="Erro ao realizar agendamento",
        )

    def delete_appointment(self, appointment_id: str) -> Any:
        return self.transport.delete(
            f"/appointments/{appointment_id}", fallback="Erro ao excluir"
        )

    def reschedule_appointment(self, appointment_id: str, new_time_slot_id: str) -> Any:
        return self.transport.patch(
            f"/appointments/{appointment_id}/reschedule",
            json={"newTimeSlotId": new_time_slot_id},
            fallback="Erro ao remanejar",
        )

    # -- admin ------------------------------------------------------------

    def admin_dashboard(self) -> DashboardStats:
        payload = self.transport.get("/admin/dashboard", fallback="Erro ao carregar dashboard")
        try:
            return DashboardStats.model_validate(payload or {})
        except ValidationError as exc:
            raise ApiError("Erro ao carregar dashboard", payload=payload) from exc

    def admin_appointments(self, limit: Optional[int] = None) -> List[Appointment]:
        params = {"limit": limit} if limit else None
        payload = self.transport.get(
            "/admin/appointments",
            params=params,
            fallback="Erro ao carregar agendamentos",
        )
        return parse_many(Appointment, unwrap_list(payload, "appointments"))

    def update_appointment_status(self, appointment_id: str, status: str) -> Any:
        return self.transport.patch(
            f"/admin/appointments/{appointment_id}/status",
            json={"status": status},
            fallback="Erro ao atualizar status",
        )

    def health(self) -> Dict[str, Any]:
        return self.transport.get("/health")
