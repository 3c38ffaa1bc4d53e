from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Iterable, Optional
from unittest.mock import AsyncMock, MagicMock

import keyring
import keyring.backend
import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from depositkit.config import ChainSettings  # noqa: E402

CONTRACT = "0x" + "ab" * 20
ACCOUNT_A = "0x" + "11" * 20
ACCOUNT_B = "0x" + "22" * 20


class MemoryKeyring(keyring.backend.KeyringBackend):
    priority = 1

    def __init__(self) -> None:
        self._data: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> str | None:
        return self._data.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self._data[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        self._data.pop((service, username), None)


async def _resolved(value: Any) -> Any:
    return value


def set_call(contract: MagicMock, function: str, value: Any = None, error: Optional[BaseException] = None) -> AsyncMock:
    """Make ``contract.functions.<function>(...).call()`` resolve to ``value`` or raise ``error``."""

    call = AsyncMock(return_value=value, side_effect=error)
    getattr(contract.functions, function).return_value.call = call
    return call


def make_filter(batches: Iterable[list], filter_id: str = "0x1") -> SimpleNamespace:
    return SimpleNamespace(filter_id=filter_id, get_new_entries=AsyncMock(side_effect=list(batches)))


def make_log(block_number: int, log_index: int = 0, amount: bytes = b"\x00\x40\x59\x73\x07") -> dict:
    return {
        "address": "0x" + "AB" * 20,
        "blockNumber": block_number,
        "transactionHash": bytes([block_number]) * 32,
        "logIndex": log_index,
        "args": {"pubkey": b"\x01" * 48, "amount": amount},
    }


class FakeEth:
    """Stand-in for ``AsyncWeb3().eth`` with awaitable properties."""

    def __init__(self, *, chain_id: int = 5, accounts: Optional[list[str]] = None) -> None:
        self.chain_id_value = chain_id
        self.accounts_value = list(accounts or [])
        self.get_balance = AsyncMock(return_value=0)
        self.get_block = AsyncMock(return_value={"timestamp": 0})
        self.uninstall_filter = AsyncMock(return_value=True)
        self.deposit_contract = MagicMock(name="deposit_contract")
        self.contract = MagicMock(return_value=self.deposit_contract)

    @property
    def chain_id(self):
        return _resolved(self.chain_id_value)

    @property
    def accounts(self):
        return _resolved(list(self.accounts_value))


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("DEPOSITKIT_STATE_DIR", str(tmp_path / "state"))
    keyring.set_keyring(MemoryKeyring())
    return tmp_path


@pytest.fixture()
def settings() -> ChainSettings:
    return ChainSettings(poll_interval=0.01)


@pytest.fixture()
def fake_eth() -> FakeEth:
    return FakeEth(accounts=[ACCOUNT_A, ACCOUNT_B])


@pytest.fixture()
def fake_web3(fake_eth: FakeEth) -> SimpleNamespace:
    return SimpleNamespace(eth=fake_eth)
