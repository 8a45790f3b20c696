"""Bounded queue of updated accounts waiting to be written to disk."""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections import deque
from typing import Callable, Optional

from banco.accounts import Account

__all__ = ["BUFFER_SIZE", "OperationBuffer"]

BUFFER_SIZE = 10

_logger = logging.getLogger(__name__)


class OperationBuffer:
    """FIFO of account snapshots drained by a background writer thread.

    *writer* is called with each account in the order it was queued.
    """

    def __init__(
        self, writer: Callable[[Account], None], capacity: int = BUFFER_SIZE
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._writer = writer
        self._capacity = capacity
        self._items: deque[Account] = deque()
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._stopping = False

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def put(self, account: Account) -> None:
        """Queue a snapshot of *account*, waiting while the buffer is full."""
        snapshot = dataclasses.replace(account)
        with self._cond:
            while len(self._items) >= self._capacity:
                self._cond.wait()
            self._items.append(snapshot)
            self._cond.notify_all()

    def take(self) -> Account:
        """Remove and return the oldest account, waiting until there is one."""
        with self._cond:
            while not self._items:
                self._cond.wait()
            account = self._items.popleft()
            self._cond.notify_all()
            return account

    def _write(self, account: Account) -> None:
        try:
            self._writer(account)
        except OSError as error:
            _logger.error(
                "Fallo al escribir en disco la cuenta %d: %s", account.number, error
            )

    def flush(self) -> int:
        """Write every pending account now and return how many there were."""
        with self._cond:
            pending = list(self._items)
            self._items.clear()
            self._cond.notify_all()
            for account in pending:
                self._write(account)
        return len(pending)

    def _run(self) -> None:
        while True:
            with self._cond:
                while not self._items and not self._stopping:
                    self._cond.wait()
                if not self._items:
                    return
                account = self._items.popleft()
                self._cond.notify_all()
            self._write(account)

    def start(self) -> None:
        """Start the background writer unless it is already running."""
        if self._thread is not None and self._thread.is_alive():
            return
        with self._cond:
            self._stopping = False
        self._thread = threading.Thread(
            target=self._run, name="operation-writer", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the background writer after every pending account is written."""
        thread = self._thread
        if thread is not None:
            with self._cond:
                self._stopping = True
                self._cond.notify_all()
            thread.join()
            self._thread = None
        self.flush()
        with self._cond:
            self._stopping = False

    def __enter__(self) -> "OperationBuffer":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()