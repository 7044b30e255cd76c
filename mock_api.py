"""Mock booking API for local development and integration tests.

Flask server speaking the same REST contract as the production backend:
- Auth (register, login, quick registration, current user) with JWTs
- Services and available time slots
- Appointment creation, deletion and rescheduling
- Admin dashboard, appointment list and status changes

Everything is kept in memory. Run with: python mock_api.py
"""
import threading
import uuid
from datetime import datetime, timedelta, timezone
from functools import wraps

import bcrypt
from flask import Flask, g, jsonify, request
from flask_cors import CORS
from jose import jwt
from jose.exceptions import JWTError

from nail_booking import config
from nail_booking.logging_config import RequestIDMiddleware, get_logger, setup_structured_logging
from nail_booking.state import validate_transition

logger = get_logger("mock_api")

JWT_ALGORITHM = "HS256"
# Statuses that hold a slot
ACTIVE_STATUSES = ("pending", "confirmed")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def new_id() -> str:
    return uuid.uuid4().hex[:24]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MockStore:
    """In-memory users, services, time slots and appointments."""

    def __init__(self, bcrypt_rounds: int = 12, today=None):
        self.bcrypt_rounds = bcrypt_rounds
        # Flask serves requests on several threads; slot claims go through it
        self.lock = threading.Lock()
        self.users = {}
        self.services = {}
        self.time_slots = {}
        self.appointments = {}

        for svc in config.SERVICES:
            self.services[svc["id"]] = {
                "_id": svc["id"],
                "name": svc["name"],
                "description": svc.get("description"),
                "price": svc["price"],
                "duration": svc["duration_minutes"],
            }

        admin = config.MOCK_API_ADMIN
        self.add_user(admin["name"], admin["email"], admin["password"], admin["phone"], role="admin")
        self.generate_time_slots(today or datetime.now())

    # -- users --------------------------------------------------------------

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def check_password(password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))

    def add_user(self, name, email, password=None, phone=None, role="client"):
        user = {
            "_id": new_id(),
            "name": name,
            "email": email.lower(),
            "phone": phone,
            "role": role,
            "password_hash": self.hash_password(password) if password else None,
            "createdAt": now_iso(),
        }
        self.users[user["_id"]] = user
        return user

    def find_user_by_email(self, email):
        email = (email or "").lower()
        return next((u for u in self.users.values() if u["email"] == email), None)

    # -- slots --------------------------------------------------------------

    def generate_time_slots(self, start: datetime):
        """Create slots for the configured days ahead from operating hours."""
        hours = config.OPERATING_HOURS
        open_at = datetime.strptime(hours["start_time"], "%H:%M")
        close_at = datetime.strptime(hours["end_time"], "%H:%M")
        step = timedelta(minutes=hours["slot_duration_minutes"])
        first_day = start.replace(hour=0, minute=0, second=0, microsecond=0)

        for offset in range(config.AVAILABILITY_DAYS_RANGE):
            day = first_day + timedelta(days=offset)
            if WEEKDAYS[day.weekday()] not in hours["days"]:
                continue
            current = open_at
            while current + step <= close_at:
                slot = {
                    "_id": new_id(),
                    "date": day.strftime("%Y-%m-%dT00:00:00.000Z"),
                    "start_time": current.strftime("%H:%M"),
                    "end_time": (current + step).strftime("%H:%M"),
                    "is_available": True,
                }
                self.time_slots[slot["_id"]] = slot
                current += step

    @staticmethod
    def slot_start(slot) -> datetime:
        return datetime.strptime(
            f"{slot['date'][:10]} {slot['start_time']}", "%Y-%m-%d %H:%M"
        )

    def open_slots(self):
        now = datetime.now()
        slots = [
            s for s in self.time_slots.values()
            if s["is_available"] and self.slot_start(s) > now
        ]
        return sorted(slots, key=self.slot_start)

    # -- appointments -------------------------------------------------------

    def serialize_user(self, user):
        return {k: v for k, v in user.items() if k != "password_hash"}

    def serialize_appointment(self, apt):
        user = self.users.get(apt["user"])
        return {
            **apt,
            "user": self.serialize_user(user) if user else None,
            "service": self.services.get(apt["service"], apt["service"]),
            "timeSlot": self.time_slots.get(apt["timeSlot"], apt["timeSlot"]),
        }

    def claim_slot(self, slot_id) -> bool:
        """Take a free future slot; False when it is gone or already taken."""
        with self.lock:
            slot = self.time_slots.get(slot_id)
            if slot is None or not slot["is_available"] or self.slot_start(slot) <= datetime.now():
                return False
            slot["is_available"] = False
            return True

    def release_slot(self, slot_id):
        with self.lock:
            slot = self.time_slots.get(slot_id)
            if slot:
                slot["is_available"] = True


def create_app(store: MockStore = None) -> Flask:
    """Build the Flask app around ``store`` (a fresh one by default)."""
    app = Flask(__name__)
    CORS(app)
    app.wsgi_app = RequestIDMiddleware(app.wsgi_app)
    store = store or MockStore()
    app.config["STORE"] = store

    def error(message, status):
        return jsonify({"success": False, "error": message}), status

    def issue_token(user):
        expires = datetime.now(timezone.utc) + timedelta(hours=config.MOCK_API_TOKEN_TTL_HOURS)
        claims = {"sub": user["_id"], "role": user["role"], "exp": int(expires.timestamp())}
        return jwt.encode(claims, config.MOCK_API_JWT_SECRET, algorithm=JWT_ALGORITHM)

    def auth_payload(user):
        return {"token": issue_token(user), "user": store.serialize_user(user)}

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            if not header.startswith("Bearer "):
                return error("Token não fornecido", 401)
            try:
                claims = jwt.decode(
                    header[len("Bearer "):],
                    config.MOCK_API_JWT_SECRET,
                    algorithms=[JWT_ALGORITHM],
                )
            except JWTError:
                return error("Token inválido ou expirado", 401)
            user = store.users.get(claims.get("sub"))
            if not user:
                return error("Usuário não encontrado", 401)
            g.user = user
            return view(*args, **kwargs)
        return wrapper

    def admin_only(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if g.user["role"] != "admin":
                return error("Acesso negado", 403)
            return view(*args, **kwargs)
        return wrapper

    def owned_appointment(appointment_id):
        apt = store.appointments.get(appointment_id)
        if apt is None:
            return None, error("Agendamento não encontrado", 404)
        if g.user["role"] != "admin" and apt["user"] != g.user["_id"]:
            return None, error("Acesso negado", 403)
        return apt, None

    # -- auth -----------------------------------------------------------------

    @app.route("/auth/register", methods=["POST"])
    def register():
        data = request.get_json(silent=True) or {}
        if not all(data.get(f) for f in ("name", "email", "password")):
            return error("Nome, e-mail e senha são obrigatórios", 400)
        if store.find_user_by_email(data["email"]):
            return error("E-mail já cadastrado", 400)
        user = store.add_user(data["name"], data["email"], data["password"], data.get("phone"))
        logger.info("user_registered", user_id=user["_id"])
        return jsonify(auth_payload(user)), 201

    @app.route("/auth/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True) or {}
        user = store.find_user_by_email(data.get("email"))
        password = data.get("password") or ""
        if not user or not user["password_hash"] or not store.check_password(password, user["password_hash"]):
            return error("Email ou senha inválidos", 401)
        return jsonify(auth_payload(user))

    @app.route("/auth/quick-register", methods=["POST"])
    def quick_register():
        """Create a customer from name/phone/e-mail, or sign an existing one in.

        An existing account with a password must present that password;
        a guest account (no password yet) adopts the one sent, if any.
        """
        data = request.get_json(silent=True) or {}
        if not all(data.get(f) for f in ("name", "phone", "email")):
            return error("Nome, telefone e e-mail são obrigatórios", 400)

        password = data.get("password")
        user = store.find_user_by_email(data["email"])
        if user:
            if user["password_hash"]:
                if not password:
                    return error("E-mail já cadastrado. Faça login para continuar", 409)
                if not store.check_password(password, user["password_hash"]):
                    return error("Senha incorreta para este e-mail", 401)
            elif password:
                user["password_hash"] = store.hash_password(password)
            user["phone"] = data["phone"]
            return jsonify(auth_payload(user))

        user = store.add_user(data["name"], data["email"], password, data["phone"])
        logger.info("user_quick_registered", user_id=user["_id"])
        return jsonify(auth_payload(user)), 201

    @app.route("/auth/me", methods=["GET"])
    @login_required
    def me():
        return jsonify({"user": store.serialize_user(g.user)})

    # -- catalogue --------------------------------------------------------------

    @app.route("/services", methods=["GET"])
    def list_services():
        return jsonify(list(store.services.values()))

    @app.route("/appointments/available-slots", methods=["GET"])
    def available_slots():
        service_id = request.args.get("serviceId")
        if not service_id:
            return error("serviceId é obrigatório", 400)
        if service_id not in store.services:
            return error("Serviço não encontrado", 404)
        return jsonify({"slots": store.open_slots()})

    # -- appointments -------------------------------------------------------------

    @app.route("/appointments", methods=["POST"])
    @login_required
    def create_appointment():
        data = request.get_json(silent=True) or {}
        service = store.services.get(data.get("serviceId"))
        if service is None:
            return error("Serviço não encontrado", 404)
        slot = store.time_slots.get(data.get("timeSlotId"))
        if slot is None:
            return error("Horário não encontrado", 404)
        payment_method = data.get("paymentMethod") or config.DEFAULT_PAYMENT_METHOD
        if payment_method not in config.PAYMENT_METHODS:
            return error("Forma de pagamento inválida", 400)
        if not store.claim_slot(slot["_id"]):
            return error("Horário não está mais disponível", 409)

        apt = {
            "_id": new_id(),
            "user": g.user["_id"],
            "service": service["_id"],
            "timeSlot": slot["_id"],
            "status": "pending",
            "paymentMethod": payment_method,
            "notes": data.get("notes") or "",
            "createdAt": now_iso(),
        }
        store.appointments[apt["_id"]] = apt
        logger.info("appointment_created", appointment_id=apt["_id"], slot_id=slot["_id"])
        return jsonify({"appointment": store.serialize_appointment(apt)}), 201

    @app.route("/appointments/<appointment_id>", methods=["DELETE"])
    @login_required
    def delete_appointment(appointment_id):
        apt, failure = owned_appointment(appointment_id)
        if failure:
            return failure
        if apt["status"] in ACTIVE_STATUSES:
            store.release_slot(apt["timeSlot"])
        del store.appointments[appointment_id]
        return jsonify({"message": "Agendamento excluído"})

    @app.route("/appointments/<appointment_id>/reschedule", methods=["PATCH"])
    @login_required
    def reschedule_appointment(appointment_id):
        apt, failure = owned_appointment(appointment_id)
        if failure:
            return failure
        if apt["status"] not in ACTIVE_STATUSES:
            return error("Somente agendamentos ativos podem ser remanejados", 400)

        new_slot_id = (request.get_json(silent=True) or {}).get("newTimeSlotId")
        if not new_slot_id:
            return error("newTimeSlotId é obrigatório", 400)
        if new_slot_id == apt["timeSlot"]:
            return error("O novo horário deve ser diferente do atual", 400)
        new_slot = store.time_slots.get(new_slot_id)
        if new_slot is None:
            return error("Horário não encontrado", 404)
        if not store.claim_slot(new_slot_id):
            return error("Horário não está mais disponível", 409)

        store.release_slot(apt["timeSlot"])
        apt["timeSlot"] = new_slot_id
        apt["rescheduledAt"] = now_iso()
        return jsonify({"appointment": store.serialize_appointment(apt)})

    # -- admin -------------------------------------------------------------------

    @app.route("/admin/dashboard", methods=["GET"])
    @admin_only
    def dashboard():
        month = datetime.now().strftime("%Y-%m")
        revenue = 0.0
        for apt in store.appointments.values():
            slot = store.time_slots.get(apt["timeSlot"])
            if apt["status"] == "completed" and slot and slot["date"].startswith(month):
                revenue += store.services[apt["service"]]["price"]
        return jsonify({
            "totalAppointments": len(store.appointments),
            "pendingAppointments": sum(
                1 for a in store.appointments.values() if a["status"] == "pending"
            ),
            "totalClients": sum(1 for u in store.users.values() if u["role"] == "client"),
            "monthRevenue": revenue,
        })

    @app.route("/admin/appointments", methods=["GET"])
    @admin_only
    def admin_appointments():
        items = sorted(store.appointments.values(), key=lambda a: a["createdAt"], reverse=True)
        limit = request.args.get("limit", type=int)
        if limit:
            items = items[:limit]
        return jsonify({
            "appointments": [store.serialize_appointment(a) for a in items],
            "total": len(store.appointments),
        })

    @app.route("/admin/appointments/<appointment_id>/status", methods=["PATCH"])
    @admin_only
    def update_status(appointment_id):
        apt = store.appointments.get(appointment_id)
        if apt is None:
            return error("Agendamento não encontrado", 404)
        new_status = (request.get_json(silent=True) or {}).get("status")
        if not validate_transition(apt["status"], new_status):
            return error(f"Transição de status inválida: {apt['status']} → {new_status}", 400)

        if new_status == "cancelled":
            store.release_slot(apt["timeSlot"])
        apt["status"] = new_status
        apt["updatedAt"] = now_iso()
        logger.info("appointment_status_changed", appointment_id=appointment_id, status=new_status)
        return jsonify({"appointment": store.serialize_appointment(apt)})

    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({
            "success": True,
            "status": "healthy",
            "total_appointments": len(store.appointments),
            "timestamp": now_iso(),
        })

    return app


def print_startup_info():
    print("=" * 70)
    print("MOCK BOOKING API")
    print("=" * 70)
    print(f"\nServer: http://localhost:{config.MOCK_API_PORT}")
    print(f"Salon: {config.SALON_NAME}")
    print(f"Services: {len(config.SERVICES)}")
    for service in config.SERVICES:
        print(f"   - {service['name']} ({service['duration_minutes']} min, R$ {service['price']:.2f})")
    print(f"\nAdmin login: {config.MOCK_API_ADMIN['email']}")
    print("\nEndpoints:")
    print("   POST   /auth/register | /auth/login | /auth/quick-register")
    print("   GET    /auth/me")
    print("   GET    /services")
    print("   GET    /appointments/available-slots?serviceId=...")
    print("   POST   /appointments")
    print("   DELETE /appointments/<id>")
    print("   PATCH  /appointments/<id>/reschedule")
    print("   GET    /admin/dashboard")
    print("   GET    /admin/appointments?limit=...")
    print("   PATCH  /admin/appointments/<id>/status")
    print("   GET    /health")
    print("=" * 70)


if __name__ == "__main__":
    setup_structured_logging()
    print_startup_info()
    create_app().run(debug=True, port=config.MOCK_API_PORT, host="0.0.0.0")
