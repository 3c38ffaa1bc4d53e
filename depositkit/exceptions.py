"""Error taxonomy for chain access."""

from __future__ import annotations

from typing import Optional


class ChainAccessError(RuntimeError):
    """Raised when the facade cannot satisfy a request against the chain."""


class WrongNetworkError(ChainAccessError):
    """The connected provider reports an unexpected chain id."""

    def __init__(self, observed: int, expected: int, endpoint: str) -> None:
        self.observed = observed
        self.expected = expected
        self.endpoint = endpoint
        super().__init__(
            f"Invalid testnet id: {observed}. Restart your web3 provider "
            f"connected to {endpoint} or another node of chain {expected}."
        )


class NoAccountsError(ChainAccessError):
    """No signer-capable account is available."""

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or "no accounts to sign with")


class ConfigurationError(ValueError):
    """Settings or the contract ABI could not be loaded."""


__all__ = [
    "ChainAccessError",
    "ConfigurationError",
    "NoAccountsError",
    "WrongNetworkError",
]
