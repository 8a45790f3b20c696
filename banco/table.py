"""The table of accounts kept in shared memory while the bank runs."""

from __future__ import annotations

import struct
import threading
from multiprocessing.shared_memory import SharedMemory
from typing import Iterable, Iterator, Optional

from banco.accounts import MAX_ACCOUNTS, RECORD_SIZE, Account

__all__ = ["DEFAULT_NAME", "TABLE_SIZE", "AccountTable"]

DEFAULT_NAME = "banco_cuentas"

_COUNT = struct.Struct("<i")
_COUNT_OFFSET = MAX_ACCOUNTS * RECORD_SIZE
TABLE_SIZE = _COUNT_OFFSET + _COUNT.size


class AccountTable:
    """Up to ``MAX_ACCOUNTS`` accounts in a named shared-memory block.

    ``lock`` serialises read-modify-write sequences inside one process.
    """

    def __init__(self, memory: SharedMemory) -> None:
        if memory.size < TABLE_SIZE:
            memory.close()
            raise ValueError(
                f"shared memory block holds {memory.size} bytes, {TABLE_SIZE} needed"
            )
        self._memory = memory
        self.lock = threading.RLock()

    @property
    def name(self) -> str:
        """Name of the shared-memory block."""
        return self._memory.name

    @classmethod
    def create(
        cls, name: str = DEFAULT_NAME, accounts: Iterable[Account] = ()
    ) -> "AccountTable":
        """Create (or reuse) the block *name* and fill it with *accounts*."""
        records = [account.to_bytes() for account in accounts]
        if len(records) > MAX_ACCOUNTS:
            raise ValueError(
                f"{len(records)} accounts given, at most {MAX_ACCOUNTS} fit in the table"
            )
        try:
            memory = SharedMemory(name=name, create=True, size=TABLE_SIZE)
        except FileExistsError:
            memory = SharedMemory(name=name)
        table = cls(memory)
        with table.lock:
            table._memory.buf[: len(records) * RECORD_SIZE] = b"".join(records)
            _COUNT.pack_into(table._memory.buf, _COUNT_OFFSET, len(records))
        return table

    @classmethod
    def attach(cls, name: str = DEFAULT_NAME) -> "AccountTable":
        """Attach to an existing block; raises FileNotFoundError if absent."""
        return cls(SharedMemory(name=name))

    def _count(self) -> int:
        (count,) = _COUNT.unpack_from(self._memory.buf, _COUNT_OFFSET)
        return max(0, min(count, MAX_ACCOUNTS))

    def _slots(self) -> Iterator[tuple[int, Account]]:
        for offset in range(0, self._count() * RECORD_SIZE, RECORD_SIZE):
            data = bytes(self._memory.buf[offset : offset + RECORD_SIZE])
            yield offset, Account.from_bytes(data)

    def accounts(self) -> list[Account]:
        """Return a copy of every account in the table."""
        with self.lock:
            return [account for _, account in self._slots()]

    def find(self, number: int) -> Optional[Account]:
        """Return a copy of the account with *number*, or None."""
        with self.lock:
            return next(
                (account for _, account in self._slots() if account.number == number),
                None,
            )

    def update(self, account: Account) -> Account:
        """Overwrite the stored account with the same number.

        Returns the account as stored.  Raises KeyError if no account in the
        table has that number.
        """
        record = account.to_bytes()
        with self.lock:
            for offset, stored in self._slots():
                if stored.number == account.number:
                    self._memory.buf[offset : offset + RECORD_SIZE] = record
                    return Account.from_bytes(record)
        raise KeyError(account.number)

    def __len__(self) -> int:
        with self.lock:
            return self._count()

    def close(self) -> None:
        """Detach from the block; it stays alive for other users."""
        self._memory.close()

    def unlink(self) -> None:
        """Destroy the block."""
        self._memory.unlink()

    def __enter__(self) -> "AccountTable":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()