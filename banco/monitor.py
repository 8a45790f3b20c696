"""Watcher of the transaction log that reports suspicious runs of operations."""

from __future__ import annotations

import argparse
import re
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass
from os import PathLike
from typing import IO, Iterable, Iterator, Optional, Union

from banco.config import Config, read_config
from banco.logs import LogPaths, timestamp

__all__ = [
    "MAX_ALERTED",
    "AnomalyDetector",
    "TransactionRecord",
    "main",
    "parse_transaction_line",
    "watch",
]

PathType = Union[str, PathLike]

MAX_ALERTED = 1000
TRANSACTIONS_FILE = "transacciones.log"
_RETRY_DELAY = 2.0

# Kinds as captured from the log line, trailing blank included.
_TRANSFER_SENT = "Transferencia realizada "
_WITHDRAWAL = "Retiro "

_FLOAT = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
_LINE = re.compile(
    r"\[([^\]]+)\]\s*Cuenta:\s*([+-]?\d+)\s*\|\s*Operación:\s*([^|]+)\|"
    r"\s*Monto:\s*(" + _FLOAT + r")\s*\|\s*Saldo\s*final:\s*(" + _FLOAT + r")"
)

_log_lock = threading.Lock()


@dataclass(frozen=True)
class TransactionRecord:
    """One parsed line of the shared transaction log."""

    date: str
    account: int
    kind: str
    amount: float
    balance: float


def parse_transaction_line(line: str) -> Optional[TransactionRecord]:
    """Parse a transaction log line; return None when it does not match."""
    match = _LINE.match(line)
    if match is None:
        return None
    date, account, kind, amount, balance = match.groups()
    return TransactionRecord(date, int(account), kind, float(amount), float(balance))


class AnomalyDetector:
    """Detects consecutive withdrawals and transfers made by one account.

    Run counters live for the whole life of the detector; the window of the
    last three operations starts empty on each :meth:`scan`.  Each account
    raises at most one alert.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._withdrawals = 1
        self._transfers = 1
        self._gap = 0
        self._alerted: list[int] = []
        self._window: deque[tuple[int, str]] = deque(maxlen=3)
        self._reset_window()

    def _reset_window(self) -> None:
        self._window.clear()
        self._window.extend([(-1, ""), (-1, ""), (-1, "")])

    @property
    def alerted(self) -> tuple[int, ...]:
        """Accounts that have already raised an alert."""
        return tuple(self._alerted)

    def _register(self, account: int) -> None:
        if len(self._alerted) < MAX_ALERTED:
            self._alerted.append(account)

    def feed(self, line: str) -> list[str]:
        """Process one log line and return the alerts it raises."""
        record = parse_transaction_line(line)
        if record is None:
            return []
        self._window.append((record.account, record.kind))
        (account2, kind2), (account1, kind1), (account, kind) = self._window
        alerts: list[str] = []

        if kind2 == _TRANSFER_SENT and account == account2 and kind == _TRANSFER_SENT:
            self._transfers += 1
            self._gap = 0
        else:
            if self._gap == 1:
                self._transfers = 1
            self._gap += 1

        threshold = self.config.transfer_threshold
        if self._transfers == threshold and account not in self._alerted:
            alerts.append(
                f"🚨 ALERTA: Cuenta {account} ha realizado {threshold} transacciones seguidas"
            )
            self._register(account)
            self._transfers = 1

        if kind == _WITHDRAWAL and account == account1 and kind1 == _WITHDRAWAL:
            self._withdrawals += 1
        else:
            self._withdrawals = 1

        threshold = self.config.withdrawal_threshold
        if self._withdrawals == threshold and account not in self._alerted:
            alerts.append(
                f"🚨 ALERTA: Cuenta {account} ha realizado {threshold} retiros seguidas"
            )
            self._register(account)
            self._withdrawals = 1

        return alerts

    def scan(self, lines: Iterable[str]) -> list[str]:
        """Process a whole reading of the log and return its alerts."""
        self._reset_window()
        alerts: list[str] = []
        for line in lines:
            alerts.extend(self.feed(line))
        return alerts


def _log(kind: str, description: str, path: PathType) -> None:
    line = f"[{timestamp()}] | Tipo: {kind} | Descripcion: {description}\n"
    try:
        with _log_lock, open(path, "a", encoding="utf-8") as handle:
            handle.write(line)
    except OSError as error:
        print(f"Error al abrir application.log: {error}", file=sys.stderr)


def watch(
    path: PathType,
    config: Config,
    interval: float = 4.0,
    output: Optional[IO[str]] = None,
) -> Iterator[str]:
    """Re-read the transaction log every *interval* seconds, yielding alerts.

    Each alert is also written to *output* (standard output by default) and
    recorded in the application log.
    """
    out = output if output is not None else sys.stdout
    detector = AnomalyDetector(config)
    application_log = LogPaths().application
    while True:
        try:
            with open(path, encoding="utf-8", errors="replace") as handle:
                alerts = detector.scan(handle)
        except OSError as error:
            print(
                f"No se pudo abrir el fichero de transacciones.log: {error}",
                file=sys.stderr,
            )
            time.sleep(_RETRY_DELAY)
            continue
        for alert in alerts:
            out.write(alert + "\n")
            out.flush()
            description = (
                "Alerta de anomalia retiro"
                if "retiros" in alert
                else "Alerta de anomalia transferencia"
            )
            _log("Monitor", description, application_log)
            yield alert
        time.sleep(interval)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the monitor until interrupted."""
    parser = argparse.ArgumentParser(description="Monitor de anomalias en transacciones.")
    parser.add_argument("--config", default="config.txt")
    parser.add_argument("--file", default=TRANSACTIONS_FILE)
    parser.add_argument("--interval", type=float, default=4.0)
    args = parser.parse_args(argv)
    try:
        config = read_config(args.config)
    except OSError as error:
        print(f"Error al abrir config.txt: {error}", file=sys.stderr)
        return 1
    print("🔍 Monitor activo. Escuchando anomalías por retiros y tranferencias reiteradas...")
    _log("Monitor", "Activo, escuchando", LogPaths().application)
    try:
        for _ in watch(args.file, config, args.interval):
            pass
    except KeyboardInterrupt:
        return 0
    return 0