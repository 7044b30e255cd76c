"""Configuration for the nail salon booking client.

Runtime settings come from the environment (a local .env file is loaded
first); salon data lives here so it can change without touching code.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# API Configuration
API_BASE_URL = os.getenv("NAIL_BOOKING_API_URL", "http://localhost:5000").rstrip("/")
REQUEST_TIMEOUT = int(os.getenv("NAIL_BOOKING_TIMEOUT", "15"))
MAX_RETRIES = int(os.getenv("NAIL_BOOKING_MAX_RETRIES", "3"))

SESSION_FILE = Path(
    os.getenv(
        "NAIL_BOOKING_SESSION_FILE",
        str(Path.home() / ".nail_booking" / "session.json"),
    )
).expanduser()

LOG_LEVEL = os.getenv("NAIL_BOOKING_LOG_LEVEL", "INFO")

# Mock backend
MOCK_API_PORT = int(os.getenv("MOCK_API_PORT", "5000"))
MOCK_API_JWT_SECRET = os.getenv("MOCK_API_JWT_SECRET", "dev-secret-change-me")
MOCK_API_TOKEN_TTL_HOURS = int(os.getenv("MOCK_API_TOKEN_TTL_HOURS", "24"))
MOCK_API_ADMIN = {
    "name": "Vitória",
    "email": os.getenv("MOCK_API_ADMIN_EMAIL", "admin@vitorianail.com"),
    "password": os.getenv("MOCK_API_ADMIN_PASSWORD", "admin123"),
    "phone": "48998164811",
}

# Salon
SALON_NAME = "Espaço Vitória Nail Designer"
CONTACT_LINKS = {
    "whatsapp": "http://wa.me/5548998164811",
    "instagram": "https://www.instagram.com/vitoriaext_nail/",
    "location": "https://www.google.com/maps?q=-28.770416,-49.372613",
}

PAYMENT_METHODS = {
    "pix": "PIX",
    "dinheiro": "Dinheiro",
    "credito": "Crédito",
    "debito": "Débito",
}
DEFAULT_PAYMENT_METHOD = "pix"

# Extra charge per damaged nail that needs a new extension
DAMAGED_NAIL_FEE = 5.00

DASHBOARD_RECENT_LIMIT = 5

# Seed data for the mock backend
SERVICES = [
    {"id": "svc-alongamento", "name": "Alongamento em Gel", "price": 150.0,
     "duration_minutes": 120, "description": "Alongamento completo com gel moldado"},
    {"id": "svc-manutencao", "name": "Manutenção de Gel", "price": 100.0,
     "duration_minutes": 90, "description": "Manutenção do alongamento em gel"},
    {"id": "svc-esmaltacao", "name": "Esmaltação em Gel", "price": 60.0,
     "duration_minutes": 60, "description": "Esmaltação em gel nas unhas naturais"},
    {"id": "svc-blindagem", "name": "Blindagem", "price": 70.0,
     "duration_minutes": 60, "description": None},
]

OPERATING_HOURS = {
    "days": ["tuesday", "wednesday", "thursday", "friday", "saturday"],
    "start_time": "08:00",
    "end_time": "18:00",
    "slot_duration_minutes": 120,
}
AVAILABILITY_DAYS_RANGE = 14
