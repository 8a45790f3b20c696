"""Deposits, withdrawals, transfers and balance queries on the shared table."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from banco.accounts import Account
from banco.buffer import OperationBuffer
from banco.config import Config
from banco.logs import LogPaths, log_application, log_transaction, log_user
from banco.table import AccountTable

__all__ = [
    "AccountNotFound",
    "InsufficientFunds",
    "LimitExceeded",
    "OperationError",
    "Teller",
]

_logger = logging.getLogger(__name__)


class OperationError(Exception):
    """An operation on an account was refused."""


class AccountNotFound(OperationError, LookupError):
    """No account with the given number exists."""

    def __init__(self, number: int) -> None:
        super().__init__(f"Cuenta {number} no encontrada")
        self.number = number


class InsufficientFunds(OperationError):
    """The balance does not cover the amount."""

    def __init__(self, number: int, amount: float, balance: float) -> None:
        super().__init__(
            f"Fondos insuficientes en la cuenta {number}: "
            f"{amount:.2f} solicitado, {balance:.2f} disponible"
        )
        self.number = number
        self.amount = amount
        self.balance = balance


class LimitExceeded(OperationError):
    """The amount is above the configured limit."""

    def __init__(self, number: int, amount: float, limit: int) -> None:
        super().__init__(f"El monto {amount:.2f} excede el limite ({limit})")
        self.number = number
        self.amount = amount
        self.limit = limit


class Teller:
    """Carries out account operations and records them in the logs.

    Every change is written to the shared *table* and queued in *buffer*
    for the background write to the accounts file.
    """

    def __init__(
        self,
        table: AccountTable,
        buffer: OperationBuffer,
        config: Config,
        logs: Optional[LogPaths] = None,
    ) -> None:
        self.table = table
        self.buffer = buffer
        self.config = config
        self.logs = logs or LogPaths()

    @staticmethod
    def _safely(write: Callable[..., str], *args: object) -> None:
        try:
            write(*args)
        except OSError as error:
            _logger.error("Error al escribir en el log: %s", error)

    def _app(self, kind: str, number: int, description: str) -> None:
        self._safely(log_application, self.logs.application, kind, description, number)

    def _record(self, kind: str, user_kind: str, account: Account, amount: float) -> None:
        self._safely(
            log_transaction,
            self.logs.transactions,
            kind,
            account.number,
            amount,
            account.balance,
        )
        self._safely(
            log_user,
            self.logs.user_directory,
            user_kind,
            account.number,
            amount,
            account.balance,
        )

    def deposit(self, number: int, amount: float) -> Account:
        """Add *amount* to the account and return it updated."""
        with self.table.lock:
            account = self.table.find(number)
            if account is None:
                raise AccountNotFound(number)
            account.balance += amount
            account.transactions += 1
            stored = self.table.update(account)
        self.buffer.put(stored)
        self._safely(
            log_transaction,
            self.logs.transactions,
            "Depósito",
            number,
            amount,
            stored.balance,
        )
        self._app("Depósito", number, "Usuario ha realizado un depósito")
        self._safely(
            log_user, self.logs.user_directory, "Deposito", number, amount, stored.balance
        )
        return stored

    def withdraw(self, number: int, amount: float) -> Account:
        """Take *amount* from the account and return it updated."""
        limit = self.config.withdrawal_limit
        with self.table.lock:
            account = self.table.find(number)
            if account is None:
                raise AccountNotFound(number)
            if amount > account.balance:
                error: OperationError = InsufficientFunds(number, amount, account.balance)
                reason = "Retiro rechazado por fondos insuficientes"
            elif amount > limit:
                error = LimitExceeded(number, amount, limit)
                reason = "Retiro rechazado por exceder limite"
            else:
                account.balance -= amount
                account.transactions += 1
                stored = self.table.update(account)
                error = None
        if error is not None:
            self._app("Retiro", number, reason)
            raise error
        self.buffer.put(stored)
        self._app("Retiro", number, "Usuario ha realizado un retiro")
        self._record("Retiro", "Retiro", stored, amount)
        return stored

    def transfer(
        self, source: int, target: int, amount: float
    ) -> tuple[Account, Account]:
        """Move *amount* from *source* to *target*; return both updated."""
        limit = self.config.transfer_limit
        error: Optional[OperationError] = None
        with self.table.lock:
            origin = self.table.find(source)
            destination = origin if source == target else self.table.find(target)
            if origin is None or destination is None:
                error = AccountNotFound(target if origin is not None else source)
                reason = "Cuenta no encontrada"
            elif amount > origin.balance:
                error = InsufficientFunds(source, amount, origin.balance)
                reason = "Rechazada por fondos insuficientes"
            elif amount > limit:
                error = LimitExceeded(source, amount, limit)
                reason = "Rechazada tras exceder limite"
            else:
                origin.balance -= amount
                destination.balance += amount
                origin.transactions += 1
                self.table.update(origin)
                self.table.update(destination)
                origin = self.table.find(source)
                destination = self.table.find(target)
        if error is not None:
            self._app("Transferencia fallida", source, reason)
            raise error
        self.buffer.put(origin)
        self.buffer.put(destination)
        self._safely(
            log_transaction,
            self.logs.transactions,
            "Transferencia realizada",
            source,
            amount,
            origin.balance,
        )
        self._safely(
            log_transaction,
            self.logs.transactions,
            "Transferencia recibida",
            target,
            amount,
            destination.balance,
        )
        self._app("Transferencia realizada", source, "Transferencia realizada por usuario")
        self._app("Transferencia recibida", target, "Transferencia recibida por usuario")
        self._safely(
            log_user,
            self.logs.user_directory,
            "Transferencia enviada",
            source,
            amount,
            origin.balance,
        )
        self._safely(
            log_user,
            self.logs.user_directory,
            "Transferencia recibida",
            target,
            amount,
            destination.balance,
        )
        return origin, destination

    def balance(self, number: int) -> Account:
        """Return the current state of the account."""
        account = self.table.find(number)
        if account is None:
            self._app("Consulta", number, "Cuenta no encontrada al consultar saldo")
            raise AccountNotFound(number)
        self._app("Consulta", number, "Consulta de saldo realizada")
        return account