"""Interactive terminal session for one account holder."""

from __future__ import annotations

import argparse
import signal
import sys
from typing import Callable, Optional

from banco.accounts import ACCOUNTS_FILE, Account, save_account
from banco.buffer import OperationBuffer
from banco.config import read_config
from banco.logs import log_application
from banco.operations import AccountNotFound, InsufficientFunds, LimitExceeded, Teller
from banco.table import DEFAULT_NAME, AccountTable

__all__ = ["format_account", "main", "run_session"]

_MENU = (
    "=== MENU USUARIO ===\n"
    "¿Qué quieres hacer en tu cuenta?\n"
    "1. Depositar dinero \n"
    "2. Retirar dinero \n"
    "3. Hacer transferencia \n"
    "4. Consultar saldo \n"
    "5. Salir \n"
)
_EXIT = "5"


def format_account(account: Account) -> str:
    """Render the account information block."""
    state = "Bloqueada" if account.blocked else "Activa"
    return (
        "\n=== Información de la Cuenta ===\n"
        f"Titular: {account.holder}\n"
        f"Número de cuenta: {account.number}\n"
        f"Saldo actual: {account.balance:.2f}\n"
        f"Transacciones realizadas: {account.transactions}\n"
        f"Estado: {state}\n"
        "================================\n"
    )


def _read_number(read: Callable[[], str], write: Callable[[str], object], kind):
    text = read().strip()
    try:
        return kind(text)
    except ValueError:
        write("Valor no valido.\n")
        return None


def _deposit(teller: Teller, number: int, read, write) -> None:
    write("¿Cuánto dinero quiere depositar?\n")
    amount = _read_number(read, write, float)
    if amount is None:
        return
    account = teller.deposit(number, amount)
    write(f"Depósito realizado. Nuevo saldo: {account.balance:.2f}\n")


def _withdraw(teller: Teller, number: int, read, write) -> None:
    limit = teller.config.withdrawal_limit
    write("¿Cuánto dinero quiere retirar?\n")
    write(f"Solo puede retirar un monto maximo de: ({limit})\n")
    amount = _read_number(read, write, float)
    if amount is None:
        return
    try:
        account = teller.withdraw(number, amount)
    except InsufficientFunds:
        write("Fondos insuficientes.\n")
    except LimitExceeded:
        write(f"El monto excede el limite para retiros ({limit})\n")
    else:
        write(f"Retiro realizado. Nuevo saldo: {account.balance:.2f}\n")


def _transfer(teller: Teller, number: int, read, write) -> None:
    write("Introduzca la cuenta destino: ")
    target = _read_number(read, write, int)
    if target is None:
        return
    write("Ingrese la cantidad a transferir: ")
    amount = _read_number(read, write, float)
    if amount is None:
        return
    try:
        origin, _ = teller.transfer(number, target, amount)
    except AccountNotFound:
        write("Error: Una de las cuentas no existe\n")
    except InsufficientFunds:
        write("Fondos insuficientes para la transferencia.\n")
    except LimitExceeded:
        write(
            "El monto excede el límite para transferencias "
            f"({teller.config.transfer_limit})\n"
        )
    else:
        write(f"Transferencia realizada. Nuevo saldo: {origin.balance:.2f}\n")


def _balance(teller: Teller, number: int, read, write) -> None:
    write(format_account(teller.balance(number)))


_ACTIONS = {"1": _deposit, "2": _withdraw, "3": _transfer, "4": _balance}


def run_session(
    teller: Teller,
    number: int,
    read: Callable[[], str],
    write: Callable[[str], object],
) -> None:
    """Run the account menu until the holder leaves or input ends.

    Raises AccountNotFound when *number* is not in the table.  Pending
    writes of the buffer are flushed on leaving.
    """
    if teller.table.find(number) is None:
        write("Error: Cuenta no encontrada\n")
        try:
            log_application(
                teller.logs.application,
                "Error",
                "Cuenta no encontrada al iniciar usuario",
                number,
            )
        except OSError:
            pass
        raise AccountNotFound(number)

    while True:
        write(_MENU)
        try:
            option = read().strip()
            if option == _EXIT:
                break
            action = _ACTIONS.get(option)
            if action is None:
                write("Introduzca una opción válida por favor\n")
                continue
            try:
                action(teller, number, read, write)
            except AccountNotFound:
                write("Error: Cuenta no encontrada\n")
        except EOFError:
            break
    write("Saliendo.......\n")
    teller.buffer.flush()


def _raise_exit(signum, frame) -> None:
    raise SystemExit(0)


def _install_signal_handlers() -> None:
    for name in ("SIGTERM", "SIGHUP"):
        signum = getattr(signal, name, None)
        if signum is not None:
            signal.signal(signum, _raise_exit)


def _write_out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def main(argv: Optional[list[str]] = None) -> int:
    """Open the session of the account given on the command line."""
    parser = argparse.ArgumentParser(description="Terminal de usuario del banco.")
    parser.add_argument("numero_cuenta", type=int)
    parser.add_argument("--config", default="config.txt")
    parser.add_argument("--table", default=DEFAULT_NAME)
    parser.add_argument("--accounts", default=ACCOUNTS_FILE)
    args = parser.parse_args(argv)

    try:
        config = read_config(args.config)
    except OSError as error:
        print(f"Error al abrir config.txt: {error}", file=sys.stderr)
        return 1
    try:
        table = AccountTable.attach(args.table)
    except (FileNotFoundError, ValueError) as error:
        print(f"Memoria compartida no disponible: {error}", file=sys.stderr)
        return 1

    accounts_path = args.accounts
    buffer = OperationBuffer(lambda account: save_account(accounts_path, account))
    teller = Teller(table, buffer, config)
    _install_signal_handlers()
    buffer.start()
    try:
        run_session(teller, args.numero_cuenta, input, _write_out)
    except AccountNotFound:
        return 1
    except KeyboardInterrupt:
        print("\n[INFO] Interrupcion recibida, guardando operaciones pendientes...")
    finally:
        buffer.stop()
        table.close()
    return 0