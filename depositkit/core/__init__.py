"""Core managers powering depositkit."""

from .chain_manager import ChainManager
from .contract_manager import ContractManager, ContractReference, load_deposit_abi
from .network_access import DisabledNetwork, LiveNetwork, NetworkAccess, build_web3
from .subscriptions import DepositNotice, DepositSubscription, EmptySubscription

__all__ = [
    "ChainManager",
    "ContractManager",
    "ContractReference",
    "DepositNotice",
    "DepositSubscription",
    "DisabledNetwork",
    "EmptySubscription",
    "LiveNetwork",
    "NetworkAccess",
    "build_web3",
    "load_deposit_abi",
]
