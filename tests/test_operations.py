import uuid

import pytest

from banco.accounts import Account
from banco.buffer import OperationBuffer
from banco.config import Config
from banco.logs import LogPaths, user_log_path
from banco.operations import (
    AccountNotFound,
    InsufficientFunds,
    LimitExceeded,
    OperationError,
    Teller,
)
from banco.table import AccountTable


@pytest.fixture
def table():
    created = AccountTable.create(
        f"banco_test_{uuid.uuid4().hex[:12]}",
        [
            Account(1000, "David Sanez", 5000.0, 1234),
            Account(1001, "Miguel Ramirez", 5000.0, 9876),
            Account(1002, "Lucía Ramírez", 300.0, 4567),
        ],
    )
    yield created
    created.close()
    created.unlink()


@pytest.fixture
def written():
    return []


@pytest.fixture
def logs(tmp_path):
    paths = LogPaths(
        tmp_path / "application.log",
        tmp_path / "transacciones.log",
        tmp_path / "transacciones",
    )
    paths.user_directory.mkdir()
    return paths


@pytest.fixture
def teller(table, written, logs):
    buffer = OperationBuffer(written.append)
    config = Config(withdrawal_limit=1000, transfer_limit=2000)
    return Teller(table, buffer, config, logs)


def test_deposit_updates_table_and_buffer(teller, table, written):
    result = teller.deposit(1000, 250.5)
    assert result.balance == 5000.0 + 250.5
    assert result.transactions == 1
    assert table.find(1000) == result
    assert teller.buffer.flush() == 1
    assert written == [result]


def test_deposit_logs(teller, logs):
    teller.deposit(1000, 250.0)
    transactions = logs.transactions.read_text(encoding="utf-8")
    assert "Cuenta: 1000 | Operación: Depósito | Monto: 250.00" in transactions
    application = logs.application.read_text(encoding="utf-8")
    assert "Usuario ha realizado un depósito" in application
    personal = user_log_path(logs.user_directory, 1000).read_text(encoding="utf-8")
    assert "Operación: Deposito | Monto: 250.00" in personal


def test_deposit_missing_account(teller):
    with pytest.raises(AccountNotFound):
        teller.deposit(4242, 10.0)


def test_withdraw(teller, table, written):
    result = teller.withdraw(1000, 400.0)
    assert result.balance == 5000.0 - 400.0
    assert result.transactions == 1
    assert table.find(1000).balance == result.balance
    teller.buffer.flush()
    assert written == [result]


def test_withdraw_insufficient_funds(teller, table, logs):
    with pytest.raises(InsufficientFunds):
        teller.withdraw(1002, 500.0)
    assert table.find(1002).balance == 300.0
    assert len(teller.buffer) == 0
    assert "Retiro rechazado por fondos insuficientes" in logs.application.read_text(
        encoding="utf-8"
    )


def test_withdraw_over_limit(teller, table, logs):
    with pytest.raises(LimitExceeded) as info:
        teller.withdraw(1000, 1500.0)
    assert info.value.limit == 1000
    assert table.find(1000).balance == 5000.0
    assert "Retiro rechazado por exceder limite" in logs.application.read_text(
        encoding="utf-8"
    )


def test_withdraw_funds_checked_before_limit(teller):
    with pytest.raises(InsufficientFunds):
        teller.withdraw(1002, 1500.0)


def test_withdraw_logs_transaction(teller, logs):
    teller.withdraw(1000, 100.0)
    transactions = logs.transactions.read_text(encoding="utf-8")
    assert "Cuenta: 1000 | Operación: Retiro | Monto: 100.00" in transactions


def test_transfer_conserves_money(teller, table, written):
    before = sum(a.balance for a in table.accounts())
    origin, destination = teller.transfer(1000, 1001, 750.0)
    assert origin.balance == 5000.0 - 750.0
    assert destination.balance == 5000.0 + 750.0
    assert origin.transactions == 1
    assert destination.transactions == 0
    assert sum(a.balance for a in table.accounts()) == before
    teller.buffer.flush()
    assert written == [origin, destination]


def test_transfer_logs_both_sides(teller, logs):
    teller.transfer(1000, 1001, 10.0)
    transactions = logs.transactions.read_text(encoding="utf-8")
    assert "Cuenta: 1000 | Operación: Transferencia realizada" in transactions
    assert "Cuenta: 1001 | Operación: Transferencia recibida" in transactions
    sent = user_log_path(logs.user_directory, 1000).read_text(encoding="utf-8")
    received = user_log_path(logs.user_directory, 1001).read_text(encoding="utf-8")
    assert "Transferencia enviada" in sent
    assert "Transferencia recibida" in received


def test_transfer_missing_target(teller, table, logs):
    with pytest.raises(AccountNotFound) as info:
        teller.transfer(1000, 4242, 10.0)
    assert info.value.number == 4242
    assert table.find(1000).balance == 5000.0
    assert "Cuenta no encontrada" in logs.application.read_text(encoding="utf-8")


def test_transfer_insufficient_funds(teller, table):
    with pytest.raises(InsufficientFunds):
        teller.transfer(1002, 1000, 301.0)
    assert table.find(1002).balance == 300.0


def test_transfer_over_limit(teller, table, logs):
    with pytest.raises(LimitExceeded):
        teller.transfer(1000, 1001, 2500.0)
    assert table.find(1001).balance == 5000.0
    assert "Rechazada tras exceder limite" in logs.application.read_text(
        encoding="utf-8"
    )


def test_transfer_to_self_keeps_balance(teller):
    origin, destination = teller.transfer(1000, 1000, 100.0)
    assert origin.balance == 5000.0
    assert destination == origin
    assert origin.transactions == 1


def test_balance(teller, table, logs):
    assert teller.balance(1001) == table.find(1001)
    assert "Consulta de saldo realizada" in logs.application.read_text(encoding="utf-8")


def test_balance_missing(teller, logs):
    with pytest.raises(OperationError):
        teller.balance(4242)
    assert "Cuenta no encontrada al consultar saldo" in logs.application.read_text(
        encoding="utf-8"
    )


def test_missing_log_directory_does_not_fail(table, tmp_path):
    paths = LogPaths(
        tmp_path / "application.log",
        tmp_path / "transacciones.log",
        tmp_path / "missing",
    )
    teller = Teller(table, OperationBuffer(lambda a: None), Config(), paths)
    result = teller.deposit(1000, 1.0)
    assert result.balance == 5001.0
    assert not (tmp_path / "missing").exists()