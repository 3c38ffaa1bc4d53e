"""Chain access façade exposing deposit contract operations to a UI layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Set

from web3 import AsyncWeb3

from ..config import ChainSettings, load_settings
from .contract_manager import ContractManager, ContractReference
from .network_access import DisabledNetwork, LiveNetwork, NetworkAccess, Subscription, build_web3
from .subscriptions import DepositSubscription


class ChainManager:
    """Translate UI intents into provider and deposit contract calls.

    With ``server_context`` set (explicitly or through the settings) every
    operation resolves to its default and no provider is created. Otherwise
    ``web3`` is used when given, or built from ``settings.rpc_url``.
    """

    def __init__(
        self,
        settings: Optional[ChainSettings] = None,
        *,
        web3: Optional[AsyncWeb3] = None,
        server_context: Optional[bool] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.contracts = ContractManager(abi_path=self.settings.abi_path)
        disabled = self.settings.server_context if server_context is None else server_context
        self._access: NetworkAccess
        if disabled:
            self._access = DisabledNetwork(self.settings, self.contracts)
        else:
            self._access = LiveNetwork(web3 or build_web3(self.settings), self.settings, self.contracts)
        self._subscriptions: Set[DepositSubscription] = set()

    @property
    def server_context(self) -> bool:
        return not self._access.live

    @property
    def web3(self) -> Optional[AsyncWeb3]:
        """The live provider, or ``None`` when network access is disabled."""

        return self._access.web3

    @property
    def signer(self) -> Optional[str]:
        return self._access.signer

    @property
    def subscriptions(self) -> List[DepositSubscription]:
        return list(self._subscriptions)

    async def ensure_testnet(self) -> None:
        """Raise :class:`WrongNetworkError` if the provider is on another chain."""

        await self._access.ensure_testnet()

    async def ensure_signer(self) -> Optional[str]:
        """Bind the first provider account as signer, raising if there is none."""

        return await self._access.ensure_signer()

    async def query_accounts(self) -> List[str]:
        """Accounts exposed by the provider."""

        return await self._access.query_accounts()

    async def eth_balance_of(self, address: str) -> str:
        """Balance of ``address`` in ETH as a decimal string."""

        return await self._access.eth_balance_of(address)

    def deposit_contract(self, address: str) -> ContractReference:
        return self._access.deposit_contract(address)

    async def num_validators(self, address: str) -> int:
        """Number of deposits recorded by the contract so far."""

        return await self._access.num_validators(address)

    async def max_deposit_value(self, address: str) -> int:
        """Maximum deposit accepted by the contract, in wei."""

        return await self._access.max_deposit_value(address)

    def deposit_events(self, address: str) -> Subscription:
        """Open a subscription to ``DepositEvent`` logs of the contract.

        Every call returns an independent subscription. Close it with
        ``aclose()`` or use it as an async context manager; :meth:`aclose` on
        the manager closes whatever is still open.
        """

        subscription = self._access.deposit_events(address, on_close=self._subscriptions.discard)
        if isinstance(subscription, DepositSubscription):
            self._subscriptions.add(subscription)
        return subscription

    async def genesis_time(self, address: str) -> datetime:
        return await self._access.genesis_time(address)

    async def block_time(self, height: int) -> datetime:
        return await self._access.block_time(height)

    async def send_deposit(self, address: str, deposit_input: bytes) -> Optional[str]:
        """Submit ``deposit_input`` with the configured deposit amount.

        Requires a signer bound by :meth:`ensure_signer`.
        """

        return await self._access.send_deposit(address, deposit_input)

    async def aclose(self) -> None:
        for subscription in list(self._subscriptions):
            await subscription.aclose()

    async def __aenter__(self) -> "ChainManager":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["ChainManager"]
