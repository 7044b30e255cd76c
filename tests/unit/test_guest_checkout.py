"""Tests for the two-step guest checkout."""
import pytest

from nail_booking.booking import GUEST_SUCCESS_MESSAGE, GuestCheckout
from nail_booking.errors import ApiError, FormValidationError, InvalidTransition


@pytest.fixture
def checkout(api, auth, service, slots, make_token, client_user):
    api.quick_register.return_value = {"token": make_token(), "user": client_user}
    api.create_appointment.return_value = {"appointment": {"_id": "apt-1"}}
    return GuestCheckout(api, auth, service, slots[0])


def fill(checkout):
    checkout.set_field("name", "Maria Silva")
    checkout.set_field("phone", "48998164811")
    checkout.set_field("email", "maria@example.com")


def test_phone_is_masked_while_typing(checkout):
    """Should mask the phone as it is typed."""
    checkout.set_field("phone", "48998164811")
    assert checkout.phone == "(48) 99816-4811"


def test_unknown_field(checkout):
    """Should reject unknown fields."""
    with pytest.raises(FormValidationError):
        checkout.set_field("address", "Rua A")


def test_payment_method_field(checkout):
    """Should accept known payment methods only."""
    checkout.set_field("payment_method", "debito")
    assert checkout.payment_method == "debito"
    with pytest.raises(FormValidationError):
        checkout.set_field("payment_method", "cheque")


def test_details_are_validated_before_next_step(checkout):
    """Should stay on details while they are invalid."""
    checkout.set_field("name", "Maria")
    checkout.set_field("phone", "4899")

    with pytest.raises(FormValidationError):
        checkout.next_step()

    assert checkout.step == GuestCheckout.DETAILS
    assert checkout.error == "Por favor, informe um telefone válido"


def test_back_returns_to_details(checkout):
    """Should go back to the details step."""
    fill(checkout)
    checkout.next_step()
    checkout.back()
    assert checkout.step == GuestCheckout.DETAILS


def test_confirm_requires_confirmation_step(checkout, api):
    """Should not book from the details step."""
    fill(checkout)
    with pytest.raises(InvalidTransition):
        checkout.confirm()
    api.quick_register.assert_not_called()


def test_confirm_registers_guest_and_books(checkout, api, store):
    """Should register the guest without a PIN and book."""
    fill(checkout)
    checkout.set_field("payment_method", "dinheiro")
    checkout.next_step()

    checkout.confirm()

    api.quick_register.assert_called_once_with(
        "Maria Silva", "48998164811", "maria@example.com", None
    )
    api.create_appointment.assert_called_once_with(
        service_id="svc-1", time_slot_id="slot-1", payment_method="dinheiro"
    )
    assert checkout.completed is True
    assert checkout.success == GUEST_SUCCESS_MESSAGE
    assert store.is_authenticated()


def test_confirm_only_once(checkout):
    """Should refuse a second confirmation."""
    fill(checkout)
    checkout.next_step()
    checkout.confirm()

    with pytest.raises(InvalidTransition):
        checkout.confirm()


def test_failure_keeps_checkout_open(checkout, api):
    """Should stay open with a message when booking fails."""
    api.create_appointment.side_effect = ApiError("Erro ao realizar agendamento", status_code=500)
    fill(checkout)
    checkout.next_step()

    with pytest.raises(ApiError):
        checkout.confirm()

    assert checkout.completed is False
    assert checkout.error == "Erro ao realizar agendamento. Tente novamente."
