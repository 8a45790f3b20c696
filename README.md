# banco

A small bank simulator for the console. A central menu authenticates
customers and opens a separate terminal session for each one, with a
configurable cap on simultaneous sessions. Customers can deposit,
withdraw, transfer and check their balance; every change is made in a
shared-memory account table and queued to be written back to the
account file in the background. A monitor re-reads the transaction log
and raises an alert when one account makes too many withdrawals or
transfers in a row.

## Installing

    pip install .

No third-party libraries are needed.

## Files

By default all files are read from and written to the current directory:

- `config.txt` – system settings, `KEY=value` per line; lines starting
  with `#` and empty lines are ignored, unknown keys are skipped and a
  later line overrides an earlier one:

      LIMITE_RETIRO=1000
      LIMITE_TRANSFERENCIA=2000
      UMBRAL_RETIROS=3
      UMBRAL_TRANSFERENCIAS=3
      NUM_HILOS=4
      ARCHIVO_CUENTAS=cuentas.dat
      ARCHIVO_LOG=application.log

  `NUM_HILOS` is the number of customer sessions that may be open at
  once and must be positive. `ARCHIVO_CUENTAS` and `ARCHIVO_LOG` are read
  into `Config.accounts_file` and `Config.log_file`, but the commands take
  their file names from their command-line options instead.
- `cuentas.dat` – the binary account file: fixed-size records holding
  number, holder (at most 99 UTF-8 bytes), balance, PIN, transaction
  count and blocked flag.
- `application.log` – general event log.
- `transacciones.log` – one line per transaction, read by the monitor.
- `transacciones/transacciones_<account>.log` – each customer's own history.

## Running

Create the account file with the six sample accounts (numbers 1000 to
1005, balance 5000.00 each); an optional argument names another file:

    banco-init-accounts

Start the bank:

    banco

It creates the `transacciones` directory if it is missing, loads the
valid accounts (positive number, non-empty holder, at most 100) into a
shared-memory table, starts the anomaly monitor in the background and
shows the menu. Option `1` lists the accounts and asks for an account
number and PIN, with three attempts; on success it opens a customer
session in a new `x-terminal-emulator` window. Option `2` terminates the
open sessions and exits. Options: `--config`, `--accounts`, `--table`
(name of the shared-memory block, default `banco_cuentas`),
`--transactions-dir` and `--transactions-log`.

A customer session attaches to the table that `banco` created, so
`banco` must be running:

    banco-user 1000

Its menu offers deposit, withdrawal, transfer, balance and exit. Pending
writes to the account file are flushed on leaving, on Ctrl-C, on SIGTERM
and on SIGHUP. Options: `--config`, `--table`, `--accounts`.

The anomaly monitor can also be run on its own; it prints each alert and
records it in `application.log`:

    banco-monitor --interval 4

Options: `--config`, `--file` (default `transacciones.log`), `--interval`
(seconds between readings).

## Using it from Python

    from banco.config import read_config
    from banco.monitor import AnomalyDetector

    config = read_config("config.txt")
    detector = AnomalyDetector(config)
    with open("transacciones.log", encoding="utf-8") as log:
        for alert in detector.scan(log):
            print(alert)

Each account raises at most one alert over the life of a detector.

Other building blocks:

- `banco.accounts` – the `Account` record (`to_bytes`, `from_bytes`) and
  the account file: `read_accounts`, `load_valid_accounts`,
  `write_accounts`, `save_account`, `find_account`, `authenticate`,
  `create_initial_accounts`.
- `banco.table.AccountTable` – the shared-memory table (`create`,
  `attach`, `accounts`, `find`, `update`, `close`, `unlink`).
- `banco.buffer.OperationBuffer` – a bounded queue of updated accounts
  with a background writer (`put`, `take`, `flush`, `start`, `stop`).
- `banco.operations.Teller` – `deposit`, `withdraw`, `transfer` and
  `balance`; refusals raise `AccountNotFound`, `InsufficientFunds` or
  `LimitExceeded`, all subclasses of `OperationError`.
- `banco.logs` – `log_application`, `log_transaction`, `log_user` and
  `LogPaths` for the three kinds of log line.
- `banco.user.run_session` and `banco.bank.login` / `run_menu` take
  `read` and `write` callables, so the menus can be driven without a
  console.

## What it does not do

- There is no command to open, close or edit accounts; the account file
  starts from the six sample accounts.
- The blocked flag is stored and shown but never stops an operation.
- PINs are kept in the account file as plain numbers.
- Opening customer sessions from `banco` needs an `x-terminal-emulator`
  command on the system.

## Tests

    pip install .[test]
    pytest