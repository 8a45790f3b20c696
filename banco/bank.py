"""Bank front desk: login, opening user terminals and the main menu."""

from __future__ import annotations

import argparse
import subprocess
import sys
import threading
from os import PathLike
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Union

from banco.accounts import ACCOUNTS_FILE, Account, load_valid_accounts
from banco.config import Config, read_config
from banco.logs import LogPaths, log_application, user_log_path
from banco.monitor import TRANSACTIONS_FILE, watch
from banco.table import DEFAULT_NAME, AccountTable

__all__ = [
    "DEFAULT_COMMAND",
    "TRANSACTIONS_DIR",
    "TerminalLauncher",
    "ensure_transaction_file",
    "ensure_transactions_dir",
    "format_account_list",
    "login",
    "main",
    "run_menu",
]

PathType = Union[str, PathLike]

TRANSACTIONS_DIR = "transacciones"
LOGIN_ATTEMPTS = 3

DEFAULT_COMMAND = (
    "x-terminal-emulator",
    "-e",
    sys.executable,
    "-c",
    "import sys; from banco.user import main; sys.exit(main(sys.argv[1:]))",
    "{number}",
)

_BANNER = "\n".join(
    (
        r" /$$$$$$                                                    /$$$$$$$                      /$$ ",
        r" /$$__  $$                                                  | $$__  $$                    | $$      ",
        r"| $$  \__/  /$$$$$$   /$$$$$$$ /$$   /$$  /$$$$$$   /$$$$$$ | $$  \ $$  /$$$$$$  /$$$$$$$ | $$   /$$",
        r"|  $$$$$$  /$$__  $$ /$$_____/| $$  | $$ /$$__  $$ /$$__  $$| $$$$$$$  |____  $$| $$__  $$| $$  /$$/",
        r" \____  $$| $$$$$$$$| $$      | $$  | $$| $$  \__/| $$$$$$$$| $$__  $$  /$$$$$$$| $$  \ $$| $$$$$$/ ",
        r" /$$  \ $$| $$_____/| $$      | $$  | $$| $$      | $$_____/| $$  \ $$ /$$__  $$| $$  | $$| $$_  $$ ",
        r"|  $$$$$$/|  $$$$$$$|  $$$$$$$|  $$$$$$/| $$      |  $$$$$$$| $$$$$$$/|  $$$$$$$| $$  | $$| $$ \  $$",
        r" \______/  \_______/ \_______/ \______/ |__/       \_______/|_______/  \_______/|__/  |__/|__/  \__/",
    )
) + "\n"

Reader = Callable[[], str]
Writer = Callable[[str], object]


def _log(kind: str, description: str) -> None:
    try:
        log_application(LogPaths().application, kind, description)
    except OSError as error:
        print(f"Error al abrir application.log: {error}", file=sys.stderr)


def ensure_transactions_dir(path: PathType = TRANSACTIONS_DIR) -> Path:
    """Create the directory of personal transaction logs if it is missing."""
    directory = Path(path)
    if not directory.exists():
        directory.mkdir(mode=0o700)
    return directory


def ensure_transaction_file(directory: PathType, number: int) -> Path:
    """Create the empty personal log of account *number* if it is missing."""
    path = user_log_path(directory, number)
    if not path.exists():
        path.touch()
    return path


def format_account_list(accounts: Iterable[Account]) -> str:
    """Render the list of available accounts shown before login."""
    lines = ["\n ==== Cuentas disponibles ====", "Numero | Titular | Saldo"]
    lines.extend(f"{a.number} | {a.holder} | {a.balance:.2f}" for a in accounts)
    lines.append("===================================")
    return "\n".join(lines) + "\n"


def _read_int(read: Reader) -> Optional[int]:
    try:
        return int(read().strip())
    except ValueError:
        return None


def login(
    table: AccountTable,
    read: Reader,
    write: Writer,
    directory: PathType = TRANSACTIONS_DIR,
    attempts: int = LOGIN_ATTEMPTS,
) -> Optional[int]:
    """Ask for account number and PIN; return the number, or None on failure.

    On success the holder's personal transaction log is created if needed.
    """
    write(format_account_list(table.accounts()))
    remaining = attempts
    while remaining > 0:
        write("Ingrese el número de cuenta: \n")
        number = _read_int(read)
        write("Ingrese el PIN de la cuenta:\n")
        pin = _read_int(read)

        found = number is not None and pin is not None and any(
            a.number == number and a.pin == pin for a in table.accounts()
        )
        if found:
            try:
                ensure_transaction_file(directory, number)
            except OSError as error:
                write(f"Error al crear archivo de transacciones: {error}\n")
            write("Cuenta encontrada. ¡Bienvenido!\n")
            _log("Login", "Login exitoso")
            return number

        remaining -= 1
        write(f"La cuenta no fue encontrada. Intentos restantes: {remaining}\n")
        _log("Login", "Cuenta no encontrada")

    write("Demasiados intentos. Vuelve más tarde.\n")
    _log("Login", "Demasiados intentos de login")
    return None


class TerminalLauncher:
    """Opens user terminals, at most *limit* of them at the same time.

    *command* is the argument list of a terminal, where ``{number}`` stands
    for the account number; *spawn* starts it and returns a process object.
    """

    def __init__(
        self,
        limit: int,
        command: Sequence[str] = DEFAULT_COMMAND,
        spawn: Callable[[list[str]], subprocess.Popen] = subprocess.Popen,
    ) -> None:
        if limit <= 0:
            raise ValueError(f"NUM_HILOS debe ser positivo (Valor leído: {limit})")
        self.limit = limit
        self._command = tuple(command)
        self._spawn = spawn
        self._lock = threading.Lock()
        self._active = 0
        self._processes: list = []
        self._threads: list[threading.Thread] = []

    def open(self, number: int) -> threading.Thread:
        """Open a terminal for account *number*.

        Returns the thread that waits for the terminal to close.  Raises
        RuntimeError when the limit of open terminals is reached.
        """
        with self._lock:
            if self._active >= self.limit:
                _log("Main", "Limite de usuarios alcanzado")
                raise RuntimeError("Limite de usuarios alcanzado")
            self._active += 1
        args = [part.format(number=number) for part in self._command]
        try:
            process = self._spawn(args)
        except OSError:
            with self._lock:
                self._active -= 1
            raise
        with self._lock:
            self._processes.append(process)
        _log("Main", "Abriendo terminal")
        thread = threading.Thread(
            target=self._wait, args=(process,), name=f"terminal-{number}", daemon=True
        )
        with self._lock:
            self._threads.append(thread)
        thread.start()
        return thread

    def _wait(self, process) -> None:
        try:
            process.wait()
        finally:
            with self._lock:
                self._active -= 1
                if process in self._processes:
                    self._processes.remove(process)

    def active(self) -> int:
        """Number of terminals currently open."""
        with self._lock:
            return self._active

    def close(self) -> None:
        """Terminate every open terminal and wait for them to end."""
        with self._lock:
            processes = list(self._processes)
            threads = list(self._threads)
            self._threads.clear()
        for process in processes:
            try:
                process.terminate()
            except OSError:
                pass
        for thread in threads:
            thread.join()


def run_menu(
    table: AccountTable,
    config: Config,
    launcher: TerminalLauncher,
    read: Reader,
    write: Writer,
    directory: PathType = TRANSACTIONS_DIR,
) -> None:
    """Run the bank menu until it is closed or input ends."""
    limit = config.num_threads
    if limit <= 0:
        _log("Main", "Error num hilos debe ser positivo")
        raise ValueError(f"NUM_HILOS debe ser positivo (Valor leído: {limit})")

    while True:
        write(f"Actualmente hay {launcher.active()}/{limit} usuarios abiertos.\n")
        write("1.Acceder al sistema\n2.Cerrar\n")
        try:
            option = read().strip()
            if option == "1":
                _access(table, limit, launcher, read, write, directory)
            elif option == "2":
                write("Cerrando todos los terminales....\n")
                _log("Main", "Cerrando terminales")
                launcher.close()
                write("Saliendo.......\n")
                _log("Main", "Salida del sistema")
                return
            else:
                write("Introduzca un valor valido.\n")
                _log("Main", "Error de usuario opcion del menu")
        except EOFError:
            return


def _access(
    table: AccountTable,
    limit: int,
    launcher: TerminalLauncher,
    read: Reader,
    write: Writer,
    directory: PathType,
) -> None:
    number = login(table, read, write, directory)
    if number is None:
        write("Error en el login. Intente nuevamente.\n")
        return
    if launcher.active() >= limit:
        write(f"Se ha alcanzado el numero de usuarios maximo ({limit})\n")
        _log("Main", "Numero de usuarios max. alcanzado")
        return
    try:
        launcher.open(number)
    except RuntimeError:
        write("Limite de usuarios alcanzado\n")
    except OSError as error:
        write(f"Error al crear hijo: {error}\n")
        _log("Main", "Error al abrir terminal")
    else:
        write(f"Abriendo terminal. Usuarios activos: {launcher.active()}/{limit}\n")


def _run_monitor(path: PathType, config: Config) -> None:
    for _ in watch(path, config):
        pass


def _read_line() -> str:
    return input()


def _write_out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def main(argv: Optional[list[str]] = None) -> int:
    """Start the bank: load accounts into shared memory and run the menu."""
    parser = argparse.ArgumentParser(description="Sistema bancario.")
    parser.add_argument("--config", default="config.txt")
    parser.add_argument("--accounts", default=ACCOUNTS_FILE)
    parser.add_argument("--table", default=DEFAULT_NAME)
    parser.add_argument("--transactions-dir", default=TRANSACTIONS_DIR)
    parser.add_argument("--transactions-log", default=TRANSACTIONS_FILE)
    args = parser.parse_args(argv)

    print("=== Banco inciado ===")
    _log("Main", "Banco iniciado")
    try:
        ensure_transactions_dir(args.transactions_dir)
    except OSError as error:
        print(f"Error al crear directorio de transacciones: {error}", file=sys.stderr)
        return 1
    print(_BANNER, end="")

    try:
        config = read_config(args.config)
    except OSError as error:
        print(f"Error al abrir config.txt: {error}", file=sys.stderr)
        return 1
    try:
        accounts = load_valid_accounts(args.accounts)
    except OSError as error:
        print(f"Error al abrir cuentas.dat: {error}", file=sys.stderr)
        return 1

    if config.num_threads <= 0:
        print(
            f"Error: NUM_HILOS debe ser positivo (Valor leído: {config.num_threads})",
            file=sys.stderr,
        )
        _log("Main", "Error num hilos debe ser positivo")
        return 1

    table = AccountTable.create(args.table, accounts)
    launcher = TerminalLauncher(config.num_threads)
    monitor = threading.Thread(
        target=_run_monitor,
        args=(args.transactions_log, config),
        name="monitor",
        daemon=True,
    )
    monitor.start()
    try:
        run_menu(table, config, launcher, _read_line, _write_out, args.transactions_dir)
    except KeyboardInterrupt:
        launcher.close()
    finally:
        table.close()
        table.unlink()
    return 0