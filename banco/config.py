"""System configuration read from a ``KEY=value`` text file."""

from __future__ import annotations

import re
from dataclasses import dataclass
from os import PathLike
from typing import Union

__all__ = ["Config", "parse_config", "read_config"]

_INT_KEYS = (
    ("LIMITE_RETIRO=", "withdrawal_limit"),
    ("LIMITE_TRANSFERENCIA=", "transfer_limit"),
    ("UMBRAL_RETIROS=", "withdrawal_threshold"),
    ("UMBRAL_TRANSFERENCIAS=", "transfer_threshold"),
    ("NUM_HILOS=", "num_threads"),
)
_STR_KEYS = (
    ("ARCHIVO_CUENTAS=", "accounts_file"),
    ("ARCHIVO_LOG=", "log_file"),
)
_MAX_STR_LEN = 49

_INT_VALUE = re.compile(r"\s*([+-]?\d+)")
_STR_VALUE = re.compile(r"\s*(\S{1,%d})" % _MAX_STR_LEN)


@dataclass(frozen=True)
class Config:
    """Limits, anomaly thresholds and file names of the bank."""

    withdrawal_limit: int = 0
    transfer_limit: int = 0
    withdrawal_threshold: int = 0
    transfer_threshold: int = 0
    num_threads: int = 0
    accounts_file: str = ""
    log_file: str = ""


def _match_line(line: str) -> tuple[str, object] | None:
    for prefix, field in _INT_KEYS:
        if line.startswith(prefix):
            match = _INT_VALUE.match(line, len(prefix))
            if match:
                return field, int(match.group(1))
    for prefix, field in _STR_KEYS:
        if line.startswith(prefix):
            match = _STR_VALUE.match(line, len(prefix))
            if match:
                return field, match.group(1)
    return None


def parse_config(text: str) -> Config:
    """Build a :class:`Config` from configuration text.

    Lines starting with ``#`` and empty lines are ignored, as are lines
    that match no known key.  Later assignments override earlier ones.
    """
    values: dict[str, object] = {}
    for line in text.splitlines():
        if not line or line.startswith("#"):
            continue
        found = _match_line(line)
        if found is not None:
            field, value = found
            values[field] = value
    return Config(**values)


def read_config(path: Union[str, PathLike]) -> Config:
    """Read and parse the configuration file at *path*."""
    with open(path, encoding="utf-8") as handle:
        return parse_config(handle.read())