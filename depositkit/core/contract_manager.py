"""Deposit contract ABI loading and contract references using Web3."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from web3 import AsyncWeb3
from web3.contract import AsyncContract

from ..exceptions import ConfigurationError, NoAccountsError

DEFAULT_ABI_PATH = Path(__file__).resolve().parent.parent / "data" / "deposit_contract.json"


def _normalise_abi(abi_definition: object) -> List[Dict[str, Any]]:
    if isinstance(abi_definition, list):
        entries = [dict(entry) for entry in abi_definition if isinstance(entry, dict)]
        if entries:
            return entries
        raise ConfigurationError("Contract ABI is empty")
    raise ConfigurationError("Contract ABI must be a list of JSON objects")


def load_deposit_abi(path: Optional[Path] = None) -> List[Dict[str, Any]]:
    """Load the deposit contract ABI from ``path`` or the bundled artifact.

    Both a bare ABI list and a compiler artifact with an ``abi`` key are
    accepted.
    """

    json_path = Path(path).expanduser() if path else DEFAULT_ABI_PATH
    try:
        payload = json.loads(json_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"ABI file not found: {json_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"ABI file is not valid JSON: {json_path}") from exc
    if isinstance(payload, dict) and "abi" in payload:
        payload = payload["abi"]
    return _normalise_abi(payload)


@dataclass
class ContractReference:
    """A deposit contract bound either to a signer or to the read-only provider."""

    address: str
    contract: AsyncContract
    signer: Optional[str] = None

    @property
    def read_only(self) -> bool:
        return self.signer is None

    async def read(self, function: str, *args: Any) -> Any:
        return await getattr(self.contract.functions, function)(*args).call()

    async def write(self, function: str, *args: Any, value: int = 0) -> Any:
        if self.signer is None:
            raise NoAccountsError(f"'{function}' requires a signer; call ensure_signer() first")
        transaction = {"from": self.signer, "value": value}
        return await getattr(self.contract.functions, function)(*args).transact(transaction)


class ContractManager:
    """Hold the fixed deposit ABI and construct contract references on demand."""

    def __init__(self, *, abi_path: Optional[Path] = None) -> None:
        self.abi_path = abi_path or DEFAULT_ABI_PATH
        self.abi = load_deposit_abi(abi_path)

    def build(self, web3: AsyncWeb3, address: str, signer: Optional[str] = None) -> ContractReference:
        checksum = AsyncWeb3.to_checksum_address(address)
        contract = web3.eth.contract(address=checksum, abi=self.abi)
        return ContractReference(address=checksum, contract=contract, signer=signer)

    def describe(self) -> Dict[str, object]:
        functions: List[Dict[str, object]] = []
        events: List[str] = []
        for entry in self.abi:
            if entry.get("type") == "function":
                functions.append(
                    {
                        "name": entry["name"],
                        "inputs": [param.get("type", "") for param in entry.get("inputs", [])],
                        "outputs": [param.get("type", "") for param in entry.get("outputs", [])],
                        "stateMutability": entry.get("stateMutability", ""),
                    }
                )
            elif entry.get("type") == "event":
                events.append(str(entry.get("name", "")))
        return {"path": str(self.abi_path), "functions": functions, "events": events}


__all__ = ["ContractManager", "ContractReference", "DEFAULT_ABI_PATH", "load_deposit_abi"]
