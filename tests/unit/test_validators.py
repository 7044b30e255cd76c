"""Tests for form validation and input sanitizing."""
import pytest

from nail_booking.errors import FormValidationError
from nail_booking.validators import (
    InputSanitizer,
    sanitize_pin,
    validate_guest_details,
    validate_login,
    validate_quick_register,
)


class TestInputSanitizer:
    def test_removes_script_blocks(self):
        """Should drop script blocks with their content."""
        text = "Unha quebrada<script>alert('x')</script> no polegar"
        assert InputSanitizer.sanitize_text(text) == "Unha quebrada no polegar"

    def test_removes_tags_and_javascript_scheme(self):
        """Should strip tags and the javascript: scheme."""
        assert InputSanitizer.sanitize_text("<b>Maria</b> javascript:void(0)") == "Maria void(0)"

    def test_collapses_whitespace(self):
        """Should collapse and trim whitespace."""
        assert InputSanitizer.sanitize_text("  Maria   Silva \n") == "Maria Silva"

    def test_empty(self):
        """Should turn None into an empty string."""
        assert InputSanitizer.sanitize_text(None) == ""


class TestGuestDetails:
    def test_valid(self):
        """Should accept complete guest details."""
        validate_guest_details("Maria", "(48) 99816-4811", "maria@example.com")

    def test_ten_digit_landline_is_enough(self):
        """Should accept a 10-digit landline."""
        validate_guest_details("Maria", "4833334444", "maria@example.com")

    @pytest.mark.parametrize("name,phone,email,field", [
        ("  ", "48998164811", "maria@example.com", "name"),
        ("Maria", "123456789", "maria@example.com", "phone"),
        ("Maria", "", "maria@example.com", "phone"),
        ("Maria", "48998164811", "maria.example.com", "email"),
    ])
    def test_first_failing_field(self, name, phone, email, field):
        """Should name the first field that fails."""
        with pytest.raises(FormValidationError) as exc_info:
            validate_guest_details(name, phone, email)
        assert exc_info.value.field == field


class TestQuickRegister:
    def test_valid(self):
        """Should accept complete details with a 4-digit PIN."""
        validate_quick_register("Maria", "48998164811", "maria@example.com", "1234")

    def test_missing_field(self):
        """Should require every field."""
        with pytest.raises(FormValidationError) as exc_info:
            validate_quick_register("Maria", "", "maria@example.com", "1234")
        assert exc_info.value.message == "Preencha todos os campos"

    @pytest.mark.parametrize("pin", ["", "123", "12345", "12a4"])
    def test_pin_must_be_four_digits(self, pin):
        """Should require exactly four digits."""
        with pytest.raises(FormValidationError) as exc_info:
            validate_quick_register("Maria", "48998164811", "maria@example.com", pin)
        assert exc_info.value.message == "Digite uma senha de 4 dígitos"


def test_login_requires_both_fields():
    """Should require e-mail and password."""
    validate_login("maria@example.com", "1234")
    with pytest.raises(FormValidationError) as exc_info:
        validate_login("maria@example.com", "")
    assert exc_info.value.message == "Preencha email e senha"


def test_sanitize_pin():
    """Should keep at most four digits."""
    assert sanitize_pin("12a34b5") == "1234"
    assert sanitize_pin(None) == ""
