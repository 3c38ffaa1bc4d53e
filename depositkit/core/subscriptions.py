"""Deposit event subscriptions that own their log filter."""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Deque, Dict, Mapping, Optional

from ..utils import logbook
from ..utils.encoding import to_hex_string
from .contract_manager import ContractReference

DEPOSIT_EVENT = "DepositEvent"


@dataclass(frozen=True)
class DepositNotice:
    """One ``DepositEvent`` log emitted by the deposit contract."""

    contract: str
    block_number: int
    transaction_hash: str
    log_index: int
    args: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_log(cls, entry: Mapping[str, Any]) -> "DepositNotice":
        args = {name: to_hex_string(value) for name, value in dict(entry.get("args", {})).items()}
        return cls(
            contract=str(entry["address"]),
            block_number=int(entry["blockNumber"]),
            transaction_hash=to_hex_string(entry["transactionHash"]),
            log_index=int(entry["logIndex"]),
            args=args,
        )


class DepositSubscription:
    """Async iterator over deposit events for one contract.

    The log filter is installed on first use and uninstalled by
    :meth:`aclose`, which ``async with`` calls on exit. A closed subscription
    stops iterating.
    """

    def __init__(
        self,
        reference: ContractReference,
        *,
        uninstall: Callable[[Any], Awaitable[Any]],
        poll_interval: float = 2.0,
        on_close: Optional[Callable[["DepositSubscription"], None]] = None,
    ) -> None:
        self.reference = reference
        self.poll_interval = poll_interval
        self._uninstall = uninstall
        self._on_close = on_close
        self._filter: Any = None
        self._pending: Deque[DepositNotice] = deque()
        self._closed = False

    @property
    def address(self) -> str:
        return self.reference.address

    @property
    def closed(self) -> bool:
        return self._closed

    async def _ensure_filter(self) -> Any:
        if self._filter is None:
            event = getattr(self.reference.contract.events, DEPOSIT_EVENT)
            self._filter = await event.create_filter(from_block="latest")
            logbook.info({"action": "subscription_open", "contract": self.address})
        return self._filter

    async def poll(self) -> int:
        """Fetch new logs once and queue them; returns how many arrived."""

        log_filter = await self._ensure_filter()
        entries = await log_filter.get_new_entries()
        for entry in entries:
            self._pending.append(DepositNotice.from_log(entry))
        return len(entries)

    def __aiter__(self) -> "DepositSubscription":
        return self

    async def __anext__(self) -> DepositNotice:
        while not self._closed:
            if self._pending:
                return self._pending.popleft()
            if not await self.poll():
                await asyncio.sleep(self.poll_interval)
        raise StopAsyncIteration

    async def __aenter__(self) -> "DepositSubscription":
        await self._ensure_filter()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        if self._filter is not None:
            await self._uninstall(self._filter.filter_id)
            logbook.info({"action": "subscription_close", "contract": self.address})
        if self._on_close is not None:
            self._on_close(self)


class EmptySubscription:
    """Subscription returned when network access is disabled; yields nothing."""

    def __init__(self, address: str) -> None:
        self.address = address
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def poll(self) -> int:
        return 0

    def __aiter__(self) -> "EmptySubscription":
        return self

    async def __anext__(self) -> DepositNotice:
        raise StopAsyncIteration

    async def __aenter__(self) -> "EmptySubscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._closed = True


__all__ = ["DEPOSIT_EVENT", "DepositNotice", "DepositSubscription", "EmptySubscription"]
