#!/usr/bin/env python3
"""Terminal front end for the Espaço Vitória booking API.

Usage:
    python booking_cli.py [--api-url http://localhost:5000] [--session-file PATH]

Menus:
- Home with contact links
- Services: pick a service and slot, answer the damaged-nail survey,
  choose payment, then book (quick registration or login when needed)
- Admin: dashboard and appointment management (admin login required)
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TypeVar

from nail_booking import config
from nail_booking.access import require_admin
from nail_booking.booking import AuthMode, BookingResult
from nail_booking.client import SalonClient, build_client
from nail_booking.errors import BookingError
from nail_booking.formatting import (
    format_currency,
    format_date_long,
    format_date_numeric,
    format_date_short,
    format_time,
    format_time_range,
    initial,
    payment_method_label,
    status_label,
)
from nail_booking.logging_config import setup_structured_logging
from nail_booking.models import Appointment
from nail_booking.session_store import SessionStore
from nail_booking.state import STATUS_FILTERS, AdminAction
from nail_booking.validators import sanitize_pin

T = TypeVar("T")


# ANSI color codes
class Colors:
    PINK = '\033[95m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


ACTION_LABELS = {
    AdminAction.CONFIRM: "Confirmar",
    AdminAction.REJECT: "Recusar",
    AdminAction.RESCHEDULE: "Remanejar",
    AdminAction.COMPLETE: "Concluir",
    AdminAction.CANCEL: "Cancelar",
    AdminAction.DELETE: "Excluir",
}


def print_colored(text: str, color: str = Colors.RESET):
    print(f"{color}{text}{Colors.RESET}")


def print_banner(title: str):
    print("\n" + "=" * 70)
    print_colored(f"💅  {title}", Colors.BOLD + Colors.PINK)
    print("=" * 70)


def choose(options: Sequence[T], render, prompt: str = "Escolha") -> Optional[T]:
    """Numbered picker; empty input or 0 returns None."""
    for i, option in enumerate(options, 1):
        print(f"  {i}. {render(option)}")
    print("  0. Voltar")
    while True:
        raw = input(f"{prompt}: ").strip()
        if raw in ("", "0"):
            return None
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return options[int(raw) - 1]
        print_colored("Opção inválida", Colors.YELLOW)


def show_home(client: SalonClient):
    print_banner(config.SALON_NAME)
    if client.auth.is_authenticated():
        name = client.auth.user_name()
        print(f"[{initial(name)}] Olá, {name or 'cliente'}!")
    print("\nAgende seu horário pelo menu de serviços.")
    print(f"\n  WhatsApp:    {config.CONTACT_LINKS['whatsapp']}")
    print(f"  Instagram:   {config.CONTACT_LINKS['instagram']}")
    print(f"  Localização: {config.CONTACT_LINKS['location']}")


def book_service(client: SalonClient):
    """Services screen: service → slot → survey → payment → book."""
    flow = client.booking_flow()
    services = flow.load_services()
    if not services:
        print_colored("Nenhum serviço disponível no momento.", Colors.YELLOW)
        return

    print_banner("Serviços")
    service = choose(
        services,
        lambda s: f"{s.name} - {format_currency(s.price)}"
        + (f" ({s.duration} min)" if s.duration else ""),
    )
    if service is None:
        return

    flow.select_service(service)
    grouped = flow.slots_by_date()
    if not grouped:
        print_colored("Nenhum horário disponível para este serviço.", Colors.YELLOW)
        return

    day = choose(list(grouped), format_date_long, prompt="Data")
    if day is None:
        return
    slot = choose(grouped[day], lambda s: format_time(s.start_time), prompt="Horário")
    if slot is None:
        return
    flow.select_slot(slot)

    answer = input("Possui unha(s) danificada(s)? (sim/nao) [nao]: ").strip().lower() or "nao"
    note = ""
    if answer == "sim":
        print_colored(
            f"Taxa de {format_currency(config.DAMAGED_NAIL_FEE)} por unha danificada.",
            Colors.YELLOW,
        )
        note = input("Descreva (opcional): ")
    try:
        flow.set_damaged_nails(answer, note)
    except BookingError as exc:
        print_colored(exc.message, Colors.RED)
        return

    methods = list(config.PAYMENT_METHODS)
    method = choose(methods, payment_method_label, prompt="Forma de pagamento")
    flow.set_payment_method(method or config.DEFAULT_PAYMENT_METHOD)

    print(f"\n{service.name} - {format_date_short(slot.date)} às {format_time(slot.start_time)}")
    print(f"Total: {format_currency(service.price)}")
    if input("Confirmar agendamento? (s/n): ").strip().lower() != "s":
        return

    try:
        if flow.request_booking() is BookingResult.NEEDS_AUTH:
            authenticate_and_book(flow)
    except BookingError as exc:
        print_colored(f"❌ {flow.error or exc.message}", Colors.RED)
        return

    if flow.success:
        print_colored(f"✅ {flow.success}", Colors.GREEN)


def authenticate_and_book(flow):
    print_colored("\nPara agendar, identifique-se.", Colors.BOLD)
    print("  1. Cadastro rápido")
    print("  2. Já tenho conta")
    if input("Escolha: ").strip() == "2":
        flow.switch_auth_mode(AuthMode.LOGIN)

    if flow.auth_mode is AuthMode.LOGIN:
        email = input("E-mail: ")
        password = input("Senha: ")
        flow.login_and_book(email, password)
        return

    name = input("Nome: ")
    phone = input("Telefone: ")
    email = input("E-mail: ")
    pin = sanitize_pin(input("Senha (4 dígitos): "))
    flow.quick_register_and_book(name, phone, email, pin)


def describe_appointment(apt: Appointment) -> str:
    service = apt.service_details
    slot = apt.slot_details
    client_name = apt.user.name if apt.user else "Cliente"
    when = "N/A"
    if slot:
        when = f"{format_date_numeric(slot.date)} {format_time_range(slot.start_time, slot.end_time)}"
    parts = [
        f"{client_name}",
        service.name if service else "Serviço",
        when,
        format_currency(service.price) if service else "-",
        payment_method_label(apt.payment_method),
        status_label(apt.status),
    ]
    line = " | ".join(parts)
    if apt.notes:
        line += f"\n     {apt.notes}"
    return line


def show_dashboard(client: SalonClient):
    dashboard = client.dashboard().load()
    stats = dashboard.stats
    print_banner("Dashboard")
    print(f"  Total de agendamentos: {stats.total_appointments}")
    print(f"  Pendentes:             {stats.pending_appointments}")
    print(f"  Clientes:              {stats.total_clients}")
    print(f"  Receita do mês:        {format_currency(stats.month_revenue, decimals=False)}")
    print("\nAgendamentos recentes:")
    if not dashboard.recent:
        print("  Nenhum agendamento ainda.")
    for apt in dashboard.recent:
        print(f"  - {describe_appointment(apt)}")


def manage_appointments(client: SalonClient):
    manager = client.appointment_manager()
    status_filter = "all"
    while True:
        manager.refresh()
        items: List[Appointment] = manager.filtered(status_filter)
        label = "Todos" if status_filter == "all" else status_label(status_filter)
        print_banner(f"Agendamentos - {label}")
        print("  f. Filtrar por status")
        for i, apt in enumerate(items, 1):
            print(f"  {i}. {describe_appointment(apt)}")
        print("  0. Voltar")

        raw = input("Agendamento: ").strip().lower()
        if raw == "f":
            status_filter = choose_filter()
            continue
        if not raw.isdigit() or not 1 <= int(raw) <= len(items):
            return

        apt = items[int(raw) - 1]
        action = choose(manager.actions_for(apt), lambda a: ACTION_LABELS[a], prompt="Ação")
        if action is None:
            continue
        try:
            run_admin_action(manager, apt, action)
        except BookingError as exc:
            print_colored(f"❌ {exc.message}", Colors.RED)


def choose_filter() -> str:
    selected = choose(list(STATUS_FILTERS), lambda s: "Todos" if s == "all" else status_label(s))
    return selected or "all"


def run_admin_action(manager, apt: Appointment, action: AdminAction):
    if action is AdminAction.DELETE:
        if input("Excluir este agendamento? (s/n): ").strip().lower() == "s":
            manager.delete(apt.id)
            print_colored("Agendamento excluído.", Colors.GREEN)
        return

    if action is AdminAction.RESCHEDULE:
        session = manager.open_reschedule(apt)
        if not session.slots:
            print_colored("Nenhum horário disponível.", Colors.YELLOW)
            manager.cancel_reschedule()
            return
        slot = choose(
            session.slots,
            lambda s: f"{format_date_short(s.date)} {format_time(s.start_time)}",
            prompt="Novo horário",
        )
        if slot is None:
            manager.cancel_reschedule()
            return
        manager.confirm_reschedule(slot)
        print_colored("Agendamento remanejado.", Colors.GREEN)
        return

    manager.apply_action(apt.id, action)
    print_colored("Status atualizado.", Colors.GREEN)


def admin_menu(client: SalonClient):
    if not client.auth.is_authenticated():
        print_colored("Login administrativo", Colors.BOLD)
        try:
            client.auth.login(input("E-mail: ").strip(), input("Senha: "))
        except BookingError as exc:
            print_colored(f"❌ {exc.message}", Colors.RED)
            return
    try:
        require_admin(client.store)
    except BookingError as exc:
        print_colored(f"❌ {exc.message}", Colors.RED)
        return

    while True:
        print_banner("Administração")
        print("  1. Dashboard")
        print("  2. Agendamentos")
        print("  0. Voltar")
        option = input("Escolha: ").strip()
        if option == "1":
            show_dashboard(client)
        elif option == "2":
            manage_appointments(client)
        else:
            return


def main(argv=None):
    parser = argparse.ArgumentParser(description=f"{config.SALON_NAME} - agendamentos")
    parser.add_argument("--api-url", default=config.API_BASE_URL)
    parser.add_argument("--session-file", type=Path, default=config.SESSION_FILE)
    args = parser.parse_args(argv)

    setup_structured_logging("WARNING")
    client = build_client(base_url=args.api_url, store=SessionStore(args.session_file))

    while True:
        show_home(client)
        print("\n  1. Agendar serviço")
        print("  2. Administração")
        if client.auth.is_authenticated():
            print("  3. Sair da conta")
        print("  0. Encerrar")
        try:
            option = input("Escolha: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n👋 Até logo!\n")
            return 0

        try:
            if option == "1":
                book_service(client)
            elif option == "2":
                admin_menu(client)
            elif option == "3":
                client.auth.logout()
                print_colored("Você saiu da conta.", Colors.GREEN)
            elif option == "0":
                print("\n👋 Até logo!\n")
                return 0
        except BookingError as exc:
            # e.g. the session expired inside the admin screens
            print_colored(f"❌ {exc.message}", Colors.RED)
        except (KeyboardInterrupt, EOFError):
            print()


if __name__ == "__main__":
    sys.exit(main())
