"""Token ledger abstraction.

The engine never holds tokens itself; it moves them through a ledger. Any
object with the LedgerAccount methods works. InMemoryLedger is the
reference implementation used by the HTTP service and the tests.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol, runtime_checkable

import structlog

from stableswap.errors import InsufficientFunds
from stableswap.guards import require_u64

logger = structlog.get_logger()


@runtime_checkable
class LedgerAccount(Protocol):
    """Balances keyed by (account, asset)."""

    def balance_of(self, account: str, asset: str) -> int:
        """Amount of `asset` held by `account`."""
        ...

    def transfer(self, asset: str, source: str, destination: str, amount: int) -> None:
        """Move `amount` of `asset`; raises InsufficientFunds if `source` is short."""
        ...

    def mint(self, asset: str, account: str, amount: int) -> None:
        """Create `amount` of `asset` in `account`."""
        ...

    def burn(self, asset: str, account: str, amount: int) -> None:
        """Destroy `amount` of `asset` from `account`; raises InsufficientFunds if short."""
        ...


class InMemoryLedger:
    """Thread-safe dict-backed ledger."""

    def __init__(self) -> None:
        self._balances: defaultdict[tuple[str, str], int] = defaultdict(int)
        self._lock = threading.Lock()

    def balance_of(self, account: str, asset: str) -> int:
        with self._lock:
            return self._balances.get((account, asset), 0)

    def supply(self, asset: str) -> int:
        """Total amount of `asset` across all accounts."""
        with self._lock:
            return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def transfer(self, asset: str, source: str, destination: str, amount: int) -> None:
        require_u64("amount", amount)
        with self._lock:
            self._debit(asset, source, amount)
            self._balances[(destination, asset)] += amount
        logger.debug("ledger_transfer", asset=asset, source=source, destination=destination, amount=amount)

    def mint(self, asset: str, account: str, amount: int) -> None:
        require_u64("amount", amount)
        with self._lock:
            self._balances[(account, asset)] += amount
        logger.debug("ledger_mint", asset=asset, account=account, amount=amount)

    def burn(self, asset: str, account: str, amount: int) -> None:
        require_u64("amount", amount)
        with self._lock:
            self._debit(asset, account, amount)
        logger.debug("ledger_burn", asset=asset, account=account, amount=amount)

    def _debit(self, asset: str, account: str, amount: int) -> None:
        held = self._balances.get((account, asset), 0)
        if held < amount:
            raise InsufficientFunds(f"{account} holds {held} {asset}, needs {amount}")
        self._balances[(account, asset)] = held - amount


class LedgerJournal:
    """Ledger wrapper that remembers each movement so it can be reversed.

    The engine settles every operation through a fresh journal. If the
    operation fails after some movements went through, `rollback` applies
    the inverse movements newest first.
    """

    def __init__(self, ledger: LedgerAccount) -> None:
        self._ledger = ledger
        self._undo: list[tuple[str, tuple]] = []

    def __len__(self) -> int:
        return len(self._undo)

    def balance_of(self, account: str, asset: str) -> int:
        return self._ledger.balance_of(account, asset)

    def transfer(self, asset: str, source: str, destination: str, amount: int) -> None:
        self._ledger.transfer(asset, source, destination, amount)
        self._undo.append(("transfer", (asset, destination, source, amount)))

    def mint(self, asset: str, account: str, amount: int) -> None:
        self._ledger.mint(asset, account, amount)
        self._undo.append(("burn", (asset, account, amount)))

    def burn(self, asset: str, account: str, amount: int) -> None:
        self._ledger.burn(asset, account, amount)
        self._undo.append(("mint", (asset, account, amount)))

    def rollback(self) -> None:
        reversed_count = len(self._undo)
        while self._undo:
            method, args = self._undo.pop()
            getattr(self._ledger, method)(*args)
        if reversed_count:
            logger.info("ledger_rolled_back", movements=reversed_count)
