"""Headless control surface for the deposit contract."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from web3 import AsyncWeb3

from . import __version__
from .config import load_settings
from .core import ChainManager
from .exceptions import ChainAccessError, ConfigurationError

EXIT_CHAIN_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="depositctl", description="Deposit contract chain access")
    parser.add_argument("--version", action="store_true", help="Display version information and exit")
    parser.add_argument("--env-file", help="Load settings from this .env file", default=None)
    parser.add_argument(
        "--server-context",
        action="store_true",
        help="Answer with offline defaults instead of contacting the provider",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("network", help="Verify the provider's chain id")
    subparsers.add_parser("accounts", help="List provider accounts")
    subparsers.add_parser("abi", help="Describe the deposit contract ABI")

    balance = subparsers.add_parser("balance", help="ETH balance of an address")
    balance.add_argument("address")

    validators = subparsers.add_parser("validators", help="Number of deposits made so far")
    validators.add_argument("contract")

    max_deposit = subparsers.add_parser("max-deposit", help="Maximum deposit value in wei")
    max_deposit.add_argument("contract")

    genesis = subparsers.add_parser("genesis", help="Genesis time recorded by the contract")
    genesis.add_argument("contract")

    block_time = subparsers.add_parser("block-time", help="Timestamp of a block")
    block_time.add_argument("height", type=int)

    watch = subparsers.add_parser("watch", help="Print deposit events as they arrive")
    watch.add_argument("contract")
    watch.add_argument("--limit", type=int, default=None, help="Stop after this many events")

    deposit = subparsers.add_parser("deposit", help="Bind a signer and submit a deposit")
    deposit.add_argument("contract")
    deposit.add_argument("data", help="Deposit input as 0x-prefixed hex")

    return parser


async def _handle_network(manager: ChainManager, args: argparse.Namespace) -> Any:
    await manager.ensure_testnet()
    return {"chain_id": manager.settings.chain_id, "status": "ok"}


async def _handle_accounts(manager: ChainManager, args: argparse.Namespace) -> Any:
    return {"accounts": await manager.query_accounts()}


async def _handle_abi(manager: ChainManager, args: argparse.Namespace) -> Any:
    return manager.contracts.describe()


async def _handle_balance(manager: ChainManager, args: argparse.Namespace) -> Any:
    return {"address": args.address, "balance_eth": await manager.eth_balance_of(args.address)}


async def _handle_validators(manager: ChainManager, args: argparse.Namespace) -> Any:
    return {"contract": args.contract, "validators": await manager.num_validators(args.contract)}


async def _handle_max_deposit(manager: ChainManager, args: argparse.Namespace) -> Any:
    return {"contract": args.contract, "max_deposit_wei": await manager.max_deposit_value(args.contract)}


async def _handle_genesis(manager: ChainManager, args: argparse.Namespace) -> Any:
    moment = await manager.genesis_time(args.contract)
    return {"contract": args.contract, "genesis_time": moment.isoformat()}


async def _handle_block_time(manager: ChainManager, args: argparse.Namespace) -> Any:
    moment = await manager.block_time(args.height)
    return {"height": args.height, "time": moment.isoformat()}


async def _handle_watch(manager: ChainManager, args: argparse.Namespace) -> Any:
    seen = 0
    async with manager.deposit_events(args.contract) as subscription:
        async for notice in subscription:
            json.dump(asdict(notice), sys.stdout, default=str)
            sys.stdout.write("\n")
            sys.stdout.flush()
            seen += 1
            if args.limit is not None and seen >= args.limit:
                break
    return {"events": seen}


async def _handle_deposit(manager: ChainManager, args: argparse.Namespace) -> Any:
    try:
        payload = AsyncWeb3.to_bytes(hexstr=args.data)
    except ValueError as exc:
        raise ConfigurationError(f"Deposit data must be hex, got {args.data!r}") from exc
    await manager.ensure_testnet()
    signer = await manager.ensure_signer()
    tx_hash = await manager.send_deposit(args.contract, payload)
    return {"contract": args.contract, "from": signer, "tx_hash": tx_hash}


Handler = Callable[[ChainManager, argparse.Namespace], Awaitable[Any]]

_HANDLERS: Dict[str, Handler] = {
    "network": _handle_network,
    "accounts": _handle_accounts,
    "abi": _handle_abi,
    "balance": _handle_balance,
    "validators": _handle_validators,
    "max-deposit": _handle_max_deposit,
    "genesis": _handle_genesis,
    "block-time": _handle_block_time,
    "watch": _handle_watch,
    "deposit": _handle_deposit,
}


async def _run(handler: Handler, args: argparse.Namespace) -> Any:
    settings = load_settings(Path(args.env_file) if args.env_file else None)
    async with ChainManager(settings, server_context=True if args.server_context else None) as manager:
        return await handler(manager, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.version:
        print(f"depositctl {__version__}")
        return 0
    if args.command is None:
        parser.print_help()
        return 1
    try:
        result = asyncio.run(_run(_HANDLERS[args.command], args))
    except (ChainAccessError, ConfigurationError) as exc:
        print(f"depositctl: {exc}", file=sys.stderr)
        return EXIT_CHAIN_ERROR
    if result is not None:
        json.dump(result, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
    return 0


__all__ = ["main"]
