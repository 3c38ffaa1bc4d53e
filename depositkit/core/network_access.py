"""Live and disabled network access behind one interface.

The facade picks a variant once at construction. :class:`DisabledNetwork`
answers every call with a fixed default and never opens a connection, which
lets the same code run where no provider is reachable (server-side
rendering, offline tooling).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Union

from aiohttp import ClientTimeout
from web3 import AsyncHTTPProvider, AsyncWeb3

from ..config import ChainSettings
from ..exceptions import NoAccountsError, WrongNetworkError
from ..utils import logbook
from ..utils.encoding import little_endian_hex_to_int, timestamp_to_datetime, to_hex_string
from .contract_manager import ContractManager, ContractReference
from .subscriptions import DepositSubscription, EmptySubscription

Subscription = Union[DepositSubscription, EmptySubscription]


def build_web3(settings: ChainSettings) -> AsyncWeb3:
    """Return an :class:`AsyncWeb3` client for the configured RPC URL.

    No request is issued until the first call.
    """

    return AsyncWeb3(
        AsyncHTTPProvider(settings.rpc_url, request_kwargs={"timeout": ClientTimeout(total=settings.request_timeout)})
    )


class NetworkAccess(ABC):
    """Operations the facade forwards to the chain."""

    live: bool

    def __init__(self, settings: ChainSettings, contracts: ContractManager) -> None:
        self.settings = settings
        self.contracts = contracts

    @property
    def web3(self) -> Optional[AsyncWeb3]:
        return None

    @property
    def signer(self) -> Optional[str]:
        return None

    @abstractmethod
    async def ensure_testnet(self) -> None: ...

    @abstractmethod
    async def ensure_signer(self) -> Optional[str]: ...

    @abstractmethod
    async def query_accounts(self) -> List[str]: ...

    @abstractmethod
    async def eth_balance_of(self, address: str) -> str: ...

    @abstractmethod
    def deposit_contract(self, address: str) -> ContractReference: ...

    @abstractmethod
    async def num_validators(self, address: str) -> int: ...

    @abstractmethod
    async def max_deposit_value(self, address: str) -> int: ...

    @abstractmethod
    def deposit_events(
        self,
        address: str,
        on_close: Optional[Callable[[DepositSubscription], None]] = None,
    ) -> Subscription: ...

    @abstractmethod
    async def genesis_time(self, address: str) -> datetime: ...

    @abstractmethod
    async def block_time(self, height: int) -> datetime: ...

    @abstractmethod
    async def send_deposit(self, address: str, deposit_input: bytes) -> Optional[str]: ...


class LiveNetwork(NetworkAccess):
    """Forward every operation to a connected web3 provider."""

    live = True

    def __init__(self, web3: AsyncWeb3, settings: ChainSettings, contracts: ContractManager) -> None:
        super().__init__(settings, contracts)
        self._web3 = web3
        self._signer: Optional[str] = None

    @property
    def web3(self) -> AsyncWeb3:
        return self._web3

    @property
    def signer(self) -> Optional[str]:
        return self._signer

    async def ensure_testnet(self) -> None:
        chain_id = await self._web3.eth.chain_id
        if chain_id != self.settings.chain_id:
            logbook.warning(
                {
                    "action": "network_check",
                    "observed": chain_id,
                    "expected": self.settings.chain_id,
                }
            )
            raise WrongNetworkError(chain_id, self.settings.chain_id, self.settings.expected_endpoint)

    async def ensure_signer(self) -> str:
        accounts = await self.query_accounts()
        if not accounts:
            raise NoAccountsError()
        previous, self._signer = self._signer, accounts[0]
        if previous != self._signer:
            logbook.info({"action": "signer_bound", "address": self._signer, "previous": previous})
        return self._signer

    async def query_accounts(self) -> List[str]:
        return list(await self._web3.eth.accounts)

    async def eth_balance_of(self, address: str) -> str:
        balance = await self._web3.eth.get_balance(AsyncWeb3.to_checksum_address(address))
        # Plain decimal notation, never an exponent.
        return format(Decimal(AsyncWeb3.from_wei(balance, "ether")), "f")

    def deposit_contract(self, address: str) -> ContractReference:
        return self.contracts.build(self._web3, address, self._signer)

    async def num_validators(self, address: str) -> int:
        count = await self.deposit_contract(address).read("deposit_count")
        return int(count)

    async def max_deposit_value(self, address: str) -> int:
        # The contract stores this amount in gwei.
        amount = await self.deposit_contract(address).read("MAX_DEPOSIT_AMOUNT")
        return int(AsyncWeb3.to_wei(amount, "gwei"))

    def deposit_events(
        self,
        address: str,
        on_close: Optional[Callable[[DepositSubscription], None]] = None,
    ) -> DepositSubscription:
        return DepositSubscription(
            self.deposit_contract(address),
            uninstall=self._web3.eth.uninstall_filter,
            poll_interval=self.settings.poll_interval,
            on_close=on_close,
        )

    async def genesis_time(self, address: str) -> datetime:
        raw = await self.deposit_contract(address).read("genesisTime")
        return timestamp_to_datetime(little_endian_hex_to_int(to_hex_string(raw)))

    async def block_time(self, height: int) -> datetime:
        block = await self._web3.eth.get_block(height)
        moment = timestamp_to_datetime(int(block["timestamp"]))
        logbook.info({"action": "block_time", "height": height, "time": moment.isoformat()})
        return moment

    async def send_deposit(self, address: str, deposit_input: bytes) -> str:
        reference = self.deposit_contract(address)
        tx_hash = await reference.write("deposit", deposit_input, value=self.settings.deposit_amount_wei)
        tx_hex = to_hex_string(tx_hash)
        logbook.info(
            {
                "action": "deposit_sent",
                "contract": reference.address,
                "from": reference.signer,
                "value": self.settings.deposit_amount_wei,
                "tx_hash": tx_hex,
            }
        )
        return tx_hex


class DisabledNetwork(NetworkAccess):
    """Answer every operation with its default without touching the network."""

    live = False

    def __init__(self, settings: ChainSettings, contracts: ContractManager) -> None:
        super().__init__(settings, contracts)
        self._offline: Optional[AsyncWeb3] = None

    async def ensure_testnet(self) -> None:
        return None

    async def ensure_signer(self) -> None:
        return None

    async def query_accounts(self) -> List[str]:
        return []

    async def eth_balance_of(self, address: str) -> str:
        return "0"

    def deposit_contract(self, address: str) -> ContractReference:
        # Building a contract object does not issue requests, so an
        # unconnected client is enough for a read-only reference.
        if self._offline is None:
            self._offline = build_web3(self.settings)
        return self.contracts.build(self._offline, address)

    async def num_validators(self, address: str) -> int:
        return 0

    async def max_deposit_value(self, address: str) -> int:
        return self.settings.deposit_amount_wei

    def deposit_events(
        self,
        address: str,
        on_close: Optional[Callable[[DepositSubscription], None]] = None,
    ) -> EmptySubscription:
        return EmptySubscription(address)

    async def genesis_time(self, address: str) -> datetime:
        return timestamp_to_datetime(0)

    async def block_time(self, height: int) -> datetime:
        return timestamp_to_datetime(0)

    async def send_deposit(self, address: str, deposit_input: bytes) -> None:
        return None


__all__ = ["DisabledNetwork", "LiveNetwork", "NetworkAccess", "build_web3"]
