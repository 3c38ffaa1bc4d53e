from __future__ import annotations

from pathlib import Path

import pytest
from web3 import AsyncWeb3

from depositkit.config import TESTNET_ID, TESTNET_URL, ChainSettings, load_settings
from depositkit.exceptions import ConfigurationError
from depositkit.utils import keyring_backend

_KEYS = (
    "DEPOSITKIT_CHAIN_ID",
    "DEPOSITKIT_EXPECTED_ENDPOINT",
    "DEPOSITKIT_RPC_URL",
    "DEPOSITKIT_DEPOSIT_AMOUNT",
    "DEPOSITKIT_ABI_PATH",
    "DEPOSITKIT_SERVER_CONTEXT",
    "DEPOSITKIT_POLL_INTERVAL",
    "DEPOSITKIT_REQUEST_TIMEOUT",
)


@pytest.fixture()
def clean_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv before delenv so monkeypatch removes whatever dotenv adds later.
    for key in _KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_defaults() -> None:
    settings = load_settings(environ={})
    assert settings.chain_id == TESTNET_ID
    assert settings.expected_endpoint == TESTNET_URL
    assert settings.rpc_url == TESTNET_URL
    assert settings.deposit_amount_wei == AsyncWeb3.to_wei(32, "ether")
    assert settings.server_context is False
    assert settings.abi_path is None


def test_environment_overrides(tmp_path: Path) -> None:
    settings = load_settings(
        environ={
            "DEPOSITKIT_CHAIN_ID": "1337",
            "DEPOSITKIT_RPC_URL": "http://127.0.0.1:8545",
            "DEPOSITKIT_DEPOSIT_AMOUNT": "3.2",
            "DEPOSITKIT_ABI_PATH": str(tmp_path / "abi.json"),
            "DEPOSITKIT_SERVER_CONTEXT": "yes",
            "DEPOSITKIT_POLL_INTERVAL": "0.5",
            "DEPOSITKIT_REQUEST_TIMEOUT": "3",
        }
    )
    assert settings.chain_id == 1337
    assert settings.rpc_url == "http://127.0.0.1:8545"
    assert settings.deposit_amount_wei == 3_200_000_000_000_000_000
    assert settings.abi_path == tmp_path / "abi.json"
    assert settings.server_context is True
    assert settings.poll_interval == 0.5
    assert settings.request_timeout == 3.0


def test_rpc_url_falls_back_to_keyring() -> None:
    keyring_backend.set_entry(keyring_backend.KEYRING_SERVICE, "RPC_URL", "https://node.example/key")
    settings = load_settings(environ={})
    assert settings.rpc_url == "https://node.example/key"


def test_environment_rpc_url_beats_keyring() -> None:
    keyring_backend.set_entry(keyring_backend.KEYRING_SERVICE, "RPC_URL", "https://node.example/key")
    settings = load_settings(environ={"DEPOSITKIT_RPC_URL": "http://localhost:8545"})
    assert settings.rpc_url == "http://localhost:8545"


@pytest.mark.parametrize(
    "environ",
    [
        {"DEPOSITKIT_CHAIN_ID": "goerli"},
        {"DEPOSITKIT_SERVER_CONTEXT": "maybe"},
        {"DEPOSITKIT_DEPOSIT_AMOUNT": "lots"},
        {"DEPOSITKIT_DEPOSIT_AMOUNT": "0"},
        {"DEPOSITKIT_POLL_INTERVAL": "soon"},
        {"DEPOSITKIT_POLL_INTERVAL": "-1"},
        {"DEPOSITKIT_POLL_INTERVAL": "0"},
    ],
)
def test_invalid_values_raise(environ: dict) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(environ=environ)


def test_dotenv_file_is_loaded(tmp_path: Path, clean_environ: None) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DEPOSITKIT_CHAIN_ID=31337\nDEPOSITKIT_SERVER_CONTEXT=true\n", encoding="utf-8")
    settings = load_settings(env_file)
    assert settings.chain_id == 31337
    assert settings.server_context is True


def test_process_environment_wins_over_dotenv(
    tmp_path: Path, clean_environ: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DEPOSITKIT_CHAIN_ID=31337\n", encoding="utf-8")
    monkeypatch.setenv("DEPOSITKIT_CHAIN_ID", "7")
    assert load_settings(env_file).chain_id == 7


def test_settings_are_frozen() -> None:
    settings = ChainSettings()
    with pytest.raises(AttributeError):
        settings.chain_id = 1  # type: ignore[misc]


def test_zero_padded_decimal_chain_id() -> None:
    assert load_settings(environ={"DEPOSITKIT_CHAIN_ID": "05"}).chain_id == 5
    assert load_settings(environ={"DEPOSITKIT_CHAIN_ID": "0x539"}).chain_id == 1337


def test_zero_poll_interval_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        ChainSettings(poll_interval=0)
