"""pt-BR display helpers: dates, times, money, phone masks and labels."""
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from babel.dates import format_date
from babel.numbers import format_currency as babel_format_currency

from nail_booking import config
from nail_booking.state import STATUS_LABELS, AppointmentStatus

LOCALE = "pt_BR"
CURRENCY = "BRL"

PHONE_MASK = re.compile(r"(\d{2})(\d{5})(\d{4})")


def date_part(value: Optional[str]) -> Optional[str]:
    """YYYY-MM-DD part of an ISO date or datetime string."""
    if not value:
        return None
    return value.split("T")[0]


def _parse_day(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    day = date_part(value)
    if not day:
        return None
    try:
        return date.fromisoformat(day)
    except ValueError:
        return None


def format_date_long(value, placeholder: str = "Data não disponível") -> str:
    """'sábado, 15 de março'."""
    day = _parse_day(value)
    if day is None:
        return placeholder
    return format_date(day, "EEEE, dd 'de' MMMM", locale=LOCALE)


def format_date_short(value, placeholder: str = "Data inválida") -> str:
    """'sáb., 15 de mar.'."""
    day = _parse_day(value)
    if day is None:
        return placeholder
    return format_date(day, "EEE, dd 'de' MMM", locale=LOCALE)


def format_date_numeric(value, placeholder: str = "N/A") -> str:
    """'15/03/2025'."""
    day = _parse_day(value)
    if day is None:
        return placeholder
    return format_date(day, "dd/MM/yyyy", locale=LOCALE)


def format_time(value: Optional[str], placeholder: str = "N/A") -> str:
    """'09:00:00' → '09:00'."""
    if not value:
        return placeholder
    return value[:5]


def format_time_range(start: Optional[str], end: Optional[str]) -> str:
    return f"{format_time(start)} - {format_time(end)}"


def format_currency(value, decimals: bool = True) -> str:
    """BRL amount, e.g. 'R$ 150,00' ('R$ 150' without decimals).

    Whole-real amounts round half up: 150.50 shows as 'R$ 151'.
    """
    amount = value or 0
    if decimals:
        return babel_format_currency(amount, CURRENCY, locale=LOCALE)
    # Babel rounds half to even
    amount = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return babel_format_currency(
        amount, CURRENCY, format="¤\xa0#,##0", locale=LOCALE, currency_digits=False
    )


def digits_only(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def format_phone(value: Optional[str]) -> str:
    """
    Mask a Brazilian mobile number as '(48) 99816-4811'.

    Input with more than 11 digits is returned untouched; shorter input is
    reduced to its digits.
    """
    value = value or ""
    numbers = digits_only(value)
    if len(numbers) <= 11:
        return PHONE_MASK.sub(r"(\1) \2-\3", numbers, count=1)
    return value


def status_label(status: Optional[str]) -> str:
    try:
        return STATUS_LABELS[AppointmentStatus(status)]
    except ValueError:
        return status or ""


def payment_method_label(method: Optional[str]) -> str:
    return config.PAYMENT_METHODS.get(method, method) if method else "-"


def initial(name: Optional[str]) -> str:
    """Avatar letter: first letter of the name, 'U' when unknown."""
    name = (name or "").strip()
    return name[0].upper() if name else "U"
