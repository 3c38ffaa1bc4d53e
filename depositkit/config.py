"""Settings for the chain access facade, resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from web3 import AsyncWeb3

from .exceptions import ConfigurationError
from .utils import keyring_backend
from .utils.paths import env_file_path

TESTNET_ID = 5
TESTNET_URL = "https://goerli.prylabs.net"
DEFAULT_DEPOSIT_ETHER = "32"

CHAIN_ID_ENV = "DEPOSITKIT_CHAIN_ID"
EXPECTED_ENDPOINT_ENV = "DEPOSITKIT_EXPECTED_ENDPOINT"
RPC_ENV_KEY = "DEPOSITKIT_RPC_URL"
DEPOSIT_AMOUNT_ENV = "DEPOSITKIT_DEPOSIT_AMOUNT"
ABI_PATH_ENV = "DEPOSITKIT_ABI_PATH"
SERVER_CONTEXT_ENV = "DEPOSITKIT_SERVER_CONTEXT"
POLL_INTERVAL_ENV = "DEPOSITKIT_POLL_INTERVAL"
REQUEST_TIMEOUT_ENV = "DEPOSITKIT_REQUEST_TIMEOUT"

# Keyring username for an RPC URL that embeds an API key.
RPC_SECRET_NAME = "RPC_URL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class ChainSettings:
    """Constants the facade needs at construction time."""

    chain_id: int = TESTNET_ID
    expected_endpoint: str = TESTNET_URL
    rpc_url: str = TESTNET_URL
    deposit_amount_wei: int = AsyncWeb3.to_wei(DEFAULT_DEPOSIT_ETHER, "ether")
    abi_path: Optional[Path] = None
    server_context: bool = False
    poll_interval: float = 2.0
    request_timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.deposit_amount_wei <= 0:
            raise ConfigurationError("Deposit amount must be positive")
        if self.poll_interval <= 0:
            raise ConfigurationError("Poll interval must be positive")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw, 0)
    except ValueError:
        pass
    # int(raw, 0) rejects zero-padded decimals such as "05".
    try:
        return int(raw, 10)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_ether(raw: str) -> int:
    try:
        return int(AsyncWeb3.to_wei(raw.strip(), "ether"))
    except (ValueError, TypeError, ArithmeticError) as exc:
        raise ConfigurationError(f"{DEPOSIT_AMOUNT_ENV} must be an ether amount, got {raw!r}") from exc


def _rpc_url_from_keyring() -> Optional[str]:
    entry = keyring_backend.get_entry(keyring_backend.KEYRING_SERVICE, RPC_SECRET_NAME)
    if entry is None or not entry.secret:
        return None
    return entry.secret


def load_settings(
    env_file: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> ChainSettings:
    """Build :class:`ChainSettings` from the process environment.

    A ``.env`` file (``env_file`` or ``./.env``) is loaded first without
    overriding variables that are already set. Passing ``environ`` skips the
    ``.env`` lookup entirely, which keeps tests hermetic.
    """

    if environ is None:
        load_dotenv(env_file or env_file_path(), override=False)
        environ = os.environ

    expected_endpoint = environ.get(EXPECTED_ENDPOINT_ENV) or TESTNET_URL
    rpc_url = environ.get(RPC_ENV_KEY) or _rpc_url_from_keyring() or expected_endpoint

    kwargs = {
        "expected_endpoint": expected_endpoint,
        "rpc_url": rpc_url,
    }
    if environ.get(CHAIN_ID_ENV):
        kwargs["chain_id"] = _parse_int(CHAIN_ID_ENV, environ[CHAIN_ID_ENV])
    if environ.get(DEPOSIT_AMOUNT_ENV):
        kwargs["deposit_amount_wei"] = _parse_ether(environ[DEPOSIT_AMOUNT_ENV])
    if environ.get(ABI_PATH_ENV):
        kwargs["abi_path"] = Path(environ[ABI_PATH_ENV]).expanduser()
    if SERVER_CONTEXT_ENV in environ:
        kwargs["server_context"] = _parse_bool(SERVER_CONTEXT_ENV, environ[SERVER_CONTEXT_ENV])
    if environ.get(POLL_INTERVAL_ENV):
        kwargs["poll_interval"] = _parse_float(POLL_INTERVAL_ENV, environ[POLL_INTERVAL_ENV])
    if environ.get(REQUEST_TIMEOUT_ENV):
        kwargs["request_timeout"] = _parse_float(REQUEST_TIMEOUT_ENV, environ[REQUEST_TIMEOUT_ENV])
    return ChainSettings(**kwargs)


__all__ = [
    "ChainSettings",
    "TESTNET_ID",
    "TESTNET_URL",
    "load_settings",
]
