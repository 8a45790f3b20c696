import pytest

from banco.accounts import (
    INITIAL_ACCOUNTS,
    RECORD_SIZE,
    Account,
    authenticate,
    create_initial_accounts,
    find_account,
    load_valid_accounts,
    main,
    read_accounts,
    save_account,
    write_accounts,
)


def test_record_size_matches_layout():
    assert RECORD_SIZE == 120
    assert len(Account(1, "X").to_bytes()) == RECORD_SIZE


def test_round_trip():
    account = Account(2001, "Ana Gómez", 150.5, 4321, 7, True)
    assert Account.from_bytes(account.to_bytes()) == account


def test_number_is_little_endian_first_field():
    data = Account(1000, "David Sanez").to_bytes()
    assert data[:4] == (1000).to_bytes(4, "little")
    assert data[4:15] == b"David Sanez"
    assert data[15] == 0


def test_holder_too_long_is_rejected():
    with pytest.raises(ValueError):
        Account(1, "x" * 100).to_bytes()


def test_from_bytes_wrong_length():
    with pytest.raises(ValueError):
        Account.from_bytes(b"\0" * (RECORD_SIZE - 1))


def test_create_initial_accounts(tmp_path):
    path = tmp_path / "cuentas.dat"
    created = create_initial_accounts(path)
    read = read_accounts(path)
    assert read == created
    assert [a.number for a in read] == [1000, 1001, 1002, 1003, 1004, 1005]
    assert all(a.balance == 5000.0 for a in read)
    assert path.stat().st_size == len(INITIAL_ACCOUNTS) * RECORD_SIZE


def test_read_ignores_partial_trailing_record(tmp_path):
    path = tmp_path / "cuentas.dat"
    write_accounts(path, [Account(5, "Uno")])
    with open(path, "ab") as handle:
        handle.write(b"\1" * 10)
    assert read_accounts(path) == [Account(5, "Uno")]


def test_save_account_overwrites_existing(tmp_path):
    path = tmp_path / "cuentas.dat"
    create_initial_accounts(path)
    updated = Account(1002, "Lucía Ramírez", 4800.0, 4567, 1)
    save_account(path, updated)
    accounts = read_accounts(path)
    assert len(accounts) == len(INITIAL_ACCOUNTS)
    assert accounts[2] == updated
    assert accounts[1] == INITIAL_ACCOUNTS[1]


def test_save_account_appends_new(tmp_path):
    path = tmp_path / "cuentas.dat"
    create_initial_accounts(path)
    new = Account(2000, "Nueva Cuenta", 10.0, 1111)
    save_account(path, new)
    accounts = read_accounts(path)
    assert len(accounts) == len(INITIAL_ACCOUNTS) + 1
    assert accounts[-1] == new


def test_save_account_creates_missing_file(tmp_path):
    path = tmp_path / "cuentas.dat"
    account = Account(7, "Siete", 1.0)
    save_account(path, account)
    assert read_accounts(path) == [account]


def test_load_valid_accounts_skips_invalid(tmp_path):
    path = tmp_path / "cuentas.dat"
    write_accounts(
        path,
        [Account(1, "Bien"), Account(0, "Cero"), Account(-3, "Neg"), Account(4, ""), Account(5, "Otra")],
    )
    assert [a.number for a in load_valid_accounts(path)] == [1, 5]


def test_load_valid_accounts_respects_limit(tmp_path):
    path = tmp_path / "cuentas.dat"
    write_accounts(path, [Account(n, f"T{n}") for n in range(1, 6)])
    assert [a.number for a in load_valid_accounts(path, 3)] == [1, 2, 3]


def test_load_valid_accounts_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_valid_accounts(tmp_path / "nada.dat")


def test_find_account(tmp_path):
    path = tmp_path / "cuentas.dat"
    create_initial_accounts(path)
    assert find_account(path, 1003) == INITIAL_ACCOUNTS[3]
    assert find_account(path, 42) is None


def test_authenticate(tmp_path):
    path = tmp_path / "cuentas.dat"
    create_initial_accounts(path)
    assert authenticate(path, 1000, 1234) is True
    assert authenticate(path, 1000, 9876) is False
    assert authenticate(path, 42, 1234) is False


def test_main_creates_file(tmp_path, capsys):
    path = tmp_path / "cuentas.dat"
    assert main([str(path)]) == 0
    assert read_accounts(path) == list(INITIAL_ACCOUNTS)
    assert "6 cuentas" in capsys.readouterr().out


def test_main_reports_unwritable_path(tmp_path, capsys):
    path = tmp_path / "missing_dir" / "cuentas.dat"
    assert main([str(path)]) == 1
    assert "Error al crear" in capsys.readouterr().err