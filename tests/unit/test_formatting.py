"""Tests for pt-BR display helpers."""
from datetime import date

import pytest

from nail_booking.formatting import (
    date_part,
    digits_only,
    format_currency,
    format_date_long,
    format_date_numeric,
    format_date_short,
    format_phone,
    format_time,
    format_time_range,
    initial,
    payment_method_label,
    status_label,
)


class TestDates:
    def test_long_date_in_portuguese(self):
        """Should spell weekday and month in Portuguese."""
        formatted = format_date_long("2025-03-15T00:00:00.000Z")
        assert formatted.startswith("sábado")
        assert "15 de março" in formatted

    def test_time_part_is_ignored(self):
        """Late UTC timestamps must not shift to the previous day."""
        assert format_date_numeric("2025-03-15T23:59:00.000Z") == "15/03/2025"

    def test_accepts_date_objects(self):
        """Should accept date objects."""
        assert format_date_numeric(date(2025, 12, 1)) == "01/12/2025"

    def test_short_date(self):
        """Should abbreviate weekday and month."""
        formatted = format_date_short("2025-03-15")
        assert formatted.startswith("sáb")
        assert "15 de mar" in formatted

    @pytest.mark.parametrize("value", [None, "", "not-a-date"])
    def test_placeholders(self, value):
        """Should show placeholders for missing or bad dates."""
        assert format_date_long(value) == "Data não disponível"
        assert format_date_short(value) == "Data inválida"
        assert format_date_numeric(value) == "N/A"

    def test_date_part(self):
        """Should keep only the date part."""
        assert date_part("2025-03-15T10:00:00Z") == "2025-03-15"
        assert date_part(None) is None


class TestTimes:
    def test_truncates_seconds(self):
        """Should show HH:MM."""
        assert format_time("09:00:00") == "09:00"
        assert format_time(None) == "N/A"

    def test_range(self):
        """Should join start and end times."""
        assert format_time_range("08:00", "10:00:00") == "08:00 - 10:00"


class TestCurrency:
    def test_brl_with_cents(self):
        """Should format reais with cents."""
        formatted = format_currency(150)
        assert formatted.startswith("R$")
        assert formatted.endswith("150,00")

    def test_thousands_separator(self):
        """Should group thousands with a dot."""
        assert format_currency(1250.5).endswith("1.250,50")

    def test_without_decimals(self):
        """Should drop the cents when asked."""
        formatted = format_currency(1500, decimals=False)
        assert formatted.startswith("R$")
        assert formatted.endswith("1.500")
        assert "," not in formatted

    def test_none_is_zero(self):
        """Should show zero for None."""
        assert format_currency(None).endswith("0,00")

    @pytest.mark.parametrize("value,expected", [
        (150.5, "151"),
        (2.5, "3"),
        (1250.49, "1.250"),
        (1499.5, "1.500"),
    ])
    def test_whole_reais_round_half_up(self, value, expected):
        """Should round half up when dropping the cents."""
        formatted = format_currency(value, decimals=False)
        assert formatted.startswith("R$")
        assert formatted.endswith(expected)


class TestPhone:
    def test_masks_mobile_number(self):
        """Should mask an 11-digit mobile number."""
        assert format_phone("48998164811") == "(48) 99816-4811"

    def test_reformats_masked_input(self):
        """Should keep an already masked number."""
        assert format_phone("(48) 99816-4811") == "(48) 99816-4811"

    def test_partial_input_keeps_digits(self):
        """Should keep partial input as digits."""
        assert format_phone("48 998") == "48998"

    def test_long_input_is_untouched(self):
        """Should leave longer input alone."""
        assert format_phone("+55 48 99816-4811") == "+55 48 99816-4811"

    def test_digits_only(self):
        """Should strip everything but digits."""
        assert digits_only("(48) 99816-4811") == "48998164811"
        assert digits_only(None) == ""


class TestLabels:
    @pytest.mark.parametrize("status,label", [
        ("pending", "Pendente"),
        ("confirmed", "Confirmado"),
        ("cancelled", "Cancelado"),
        ("completed", "Concluído"),
    ])
    def test_status_labels(self, status, label):
        """Should translate each status."""
        assert status_label(status) == label

    def test_unknown_status_passes_through(self):
        """Should pass unknown statuses through."""
        assert status_label("archived") == "archived"

    def test_payment_labels(self):
        """Should label known payment methods."""
        assert payment_method_label("pix") == "PIX"
        assert payment_method_label("credito") == "Crédito"
        assert payment_method_label("boleto") == "boleto"
        assert payment_method_label(None) == "-"

    def test_initial(self):
        """Should use the first letter, U when empty."""
        assert initial("maria") == "M"
        assert initial("") == "U"
        assert initial(None) == "U"
