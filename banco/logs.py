"""Appending lines to the application, transaction and per-user logs."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from os import PathLike
from pathlib import Path
from typing import Optional, Union

__all__ = [
    "LogPaths",
    "log_application",
    "log_transaction",
    "log_user",
    "timestamp",
    "user_log_path",
]

PathType = Union[str, PathLike]

_application_lock = threading.Lock()
_transaction_lock = threading.Lock()
_user_lock = threading.Lock()


@dataclass(frozen=True)
class LogPaths:
    """Locations of the log files used by the bank."""

    application: Path = Path("application.log")
    transactions: Path = Path("transacciones.log")
    user_directory: Path = Path("transacciones")


def timestamp(now: Optional[datetime] = None) -> str:
    """Format *now* (default: the current local time) for log lines."""
    return (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")


def _append(path: PathType, line: str, lock: threading.Lock) -> str:
    with lock, open(path, "a", encoding="utf-8") as handle:
        handle.write(line)
    return line


def log_application(
    path: PathType, kind: str, description: str, account: Optional[int] = None
) -> str:
    """Append a general event and return the line written.

    With *account* the line names the account it concerns.
    """
    if account is None:
        line = f"[{timestamp()}] | Operación: {kind} | Descripcion: {description}\n"
    else:
        line = (
            f"[{timestamp()}] Cuenta: {account} | Operación: {kind} "
            f"| Descripcion: {description}\n"
        )
    return _append(path, line, _application_lock)


def log_transaction(
    path: PathType, kind: str, account: int, amount: float, balance: float
) -> str:
    """Append a transaction to the shared transaction log."""
    line = (
        f"[{timestamp()}] Cuenta: {account} | Operación: {kind} "
        f"| Monto: {amount:.2f} | Saldo final: {balance:.2f}\n"
    )
    return _append(path, line, _transaction_lock)


def user_log_path(directory: PathType, account: int) -> Path:
    """Return the path of the personal transaction log of *account*."""
    return Path(directory) / f"transacciones_{account}.log"


def log_user(
    directory: PathType, kind: str, account: int, amount: float, balance: float
) -> str:
    """Append a transaction to the personal log of *account*."""
    line = (
        f"[{timestamp()}] | Operación: {kind} "
        f"| Monto: {amount:.2f} | Saldo final: {balance:.2f}\n"
    )
    return _append(user_log_path(directory, account), line, _user_lock)