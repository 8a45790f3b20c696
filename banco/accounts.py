"""Bank accounts and the fixed-size binary accounts file."""

from __future__ import annotations

import argparse
import logging
import os
import struct
import sys
import threading
from dataclasses import dataclass
from os import PathLike
from typing import Iterable, Iterator, Optional, Union

__all__ = [
    "ACCOUNTS_FILE",
    "HOLDER_SIZE",
    "INITIAL_ACCOUNTS",
    "MAX_ACCOUNTS",
    "RECORD_SIZE",
    "Account",
    "authenticate",
    "create_initial_accounts",
    "find_account",
    "load_valid_accounts",
    "main",
    "read_accounts",
    "save_account",
    "write_accounts",
]

ACCOUNTS_FILE = "cuentas.dat"
HOLDER_SIZE = 100
MAX_ACCOUNTS = 100

_RECORD = struct.Struct("<i%dsfiii" % HOLDER_SIZE)
_NUMBER = struct.Struct("<i")
RECORD_SIZE = _RECORD.size

_logger = logging.getLogger(__name__)
_file_lock = threading.Lock()

PathType = Union[str, PathLike]


@dataclass
class Account:
    """One bank account as stored in the accounts file."""

    number: int
    holder: str
    balance: float = 0.0
    pin: int = 0
    transactions: int = 0
    blocked: bool = False

    def to_bytes(self) -> bytes:
        """Encode the account as one fixed-size record."""
        holder = self.holder.encode("utf-8")
        if len(holder) >= HOLDER_SIZE:
            raise ValueError(
                f"holder name takes {len(holder)} bytes, at most {HOLDER_SIZE - 1} allowed"
            )
        return _RECORD.pack(
            self.number,
            holder,
            self.balance,
            self.pin,
            self.transactions,
            int(self.blocked),
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "Account":
        """Decode one fixed-size record."""
        if len(data) != RECORD_SIZE:
            raise ValueError(f"record must be {RECORD_SIZE} bytes, got {len(data)}")
        number, raw_holder, balance, pin, transactions, blocked = _RECORD.unpack(data)
        holder = raw_holder.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(number, holder, balance, pin, transactions, bool(blocked))


INITIAL_ACCOUNTS = (
    Account(1000, "David Sanez", 5000.0, 1234),
    Account(1001, "Miguel Ramirez", 5000.0, 9876),
    Account(1002, "Lucía Ramírez", 5000.0, 4567),
    Account(1003, "Valeria Torres", 5000.0, 8776),
    Account(1004, "Julián Navarro", 5000.0, 2233),
    Account(1005, "Camila Duarte", 5000.0, 2233),
)


def _records(handle) -> Iterator[bytes]:
    while len(chunk := handle.read(RECORD_SIZE)) == RECORD_SIZE:
        yield chunk


def read_accounts(path: PathType) -> list[Account]:
    """Return every complete record in the accounts file."""
    with open(path, "rb") as handle:
        return [Account.from_bytes(chunk) for chunk in _records(handle)]


def load_valid_accounts(path: PathType, limit: int = MAX_ACCOUNTS) -> list[Account]:
    """Return the valid accounts of the file, at most *limit* of them.

    Records with a non-positive number or an empty holder are skipped.
    """
    valid: list[Account] = []
    for account in read_accounts(path):
        if len(valid) >= limit:
            _logger.warning("Limite de cuentas alcanzado")
            break
        if account.number <= 0 or not account.holder:
            _logger.warning("Cuenta invalida encontrada")
            continue
        valid.append(account)
    if not valid:
        _logger.warning("No se encontraron cuentas validas.")
    return valid


def write_accounts(path: PathType, accounts: Iterable[Account]) -> None:
    """Replace the accounts file with *accounts*."""
    data = b"".join(account.to_bytes() for account in accounts)
    with _file_lock, open(path, "wb") as handle:
        handle.write(data)


def save_account(path: PathType, account: Account) -> None:
    """Overwrite the record with the same number, or append a new one."""
    record = account.to_bytes()
    with _file_lock:
        try:
            handle = open(path, "r+b")
        except FileNotFoundError:
            handle = open(path, "w+b")
        with handle:
            position = 0
            for chunk in _records(handle):
                if _NUMBER.unpack_from(chunk)[0] == account.number:
                    handle.seek(position)
                    break
                position += RECORD_SIZE
            else:
                handle.seek(0, os.SEEK_END)
            handle.write(record)


def find_account(path: PathType, number: int) -> Optional[Account]:
    """Return the account with *number*, or None when there is none."""
    return next((a for a in read_accounts(path) if a.number == number), None)


def authenticate(path: PathType, number: int, pin: int) -> bool:
    """Tell whether an account with this number and PIN exists."""
    return any(a.number == number and a.pin == pin for a in read_accounts(path))


def create_initial_accounts(path: PathType = ACCOUNTS_FILE) -> list[Account]:
    """Write the six starting accounts and return them."""
    accounts = [
        Account(a.number, a.holder, a.balance, a.pin, a.transactions, a.blocked)
        for a in INITIAL_ACCOUNTS
    ]
    write_accounts(path, accounts)
    return accounts


def main(argv: Optional[list[str]] = None) -> int:
    """Create the accounts file with the starting accounts."""
    parser = argparse.ArgumentParser(description="Crea el archivo de cuentas iniciales.")
    parser.add_argument("path", nargs="?", default=ACCOUNTS_FILE)
    args = parser.parse_args(argv)
    try:
        accounts = create_initial_accounts(args.path)
    except OSError as error:
        print(f"Error al crear el archivo de cuentas iniciales: {error}", file=sys.stderr)
        return 1
    print(f"Archivo de cuentas creado con las {len(accounts)} cuentas inciales")
    return 0