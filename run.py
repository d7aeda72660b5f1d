#!/usr/bin/env python3
"""
SOL CLI -- Wallet Balance & CLMM Position Summary
=================================================

Reports a Solana wallet's SOL, wrapped SOL, their sum, and the SOL held in
its Raydium CLMM SOL-USDC (1 bp) liquidity positions.

Usage:
  python run.py <address>                         Summary on mainnet-beta
  python run.py <address> --rpc-url <url>         Use another RPC endpoint
  python run.py <address> --pool <pool_id>        Value positions in another pool
  python run.py <address> -v                      Debug logging

Sources:
  Solana JSON-RPC     : https://solana.com/docs/rpc
  Raydium CLMM        : https://github.com/raydium-io/raydium-clmm
  Uniswap V3 Whitepaper (amount formulas) : https://uniswap.org/whitepaper-v3.pdf
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

# ── Imports ───────────────────────────────────────────────────────────────

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from sol_cli.addresses import parse_pubkey
from sol_cli.central_config import (
    EXAMPLE_ADDRESS,
    PROJECT_NAME,
    PROJECT_VERSION,
    RPC_URL_ENV,
    SolCliConfig,
)
from sol_cli.commands import cmd_summary
from sol_cli.rpc_helpers import RpcError


# ── CLI Parser ────────────────────────────────────────────────────────────


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sol-cli",
        description=f"{PROJECT_NAME} v{PROJECT_VERSION} — SOL balance & position summary",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  python run.py {EXAMPLE_ADDRESS}
  python run.py {EXAMPLE_ADDRESS} --rpc-url https://my-node.example

Environment:
  {RPC_URL_ENV}   RPC endpoint (default: https://api.mainnet-beta.solana.com)
""",
    )
    parser.add_argument(
        "--version", action="version", version=f"{PROJECT_NAME} v{PROJECT_VERSION}"
    )
    parser.add_argument(
        "address", nargs="?", default=None, help="Wallet address (base58)"
    )
    parser.add_argument(
        "--rpc-url",
        type=str,
        default=None,
        help=f"JSON-RPC endpoint (default: ${RPC_URL_ENV} or mainnet-beta)",
    )
    parser.add_argument(
        "--pool",
        type=str,
        default=None,
        help="CLMM pool id to value positions in (default: SOL-USDC 1bp)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def _usage(prog: str) -> None:
    print(f"Please Usage: {prog} <address>", file=sys.stderr)
    print(f"Example: {prog} {EXAMPLE_ADDRESS}", file=sys.stderr)


# ── Main ──────────────────────────────────────────────────────────────────


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s - %(message)s",
    )

    if not args.address:
        _usage(parser.prog)
        return 1

    try:
        wallet = parse_pubkey(args.address)
    except ValueError:
        print(
            f"Invalid address. Good address example: {EXAMPLE_ADDRESS}",
            file=sys.stderr,
        )
        return 1

    config = SolCliConfig()
    if args.rpc_url:
        config = dataclasses.replace(config, rpc_url=args.rpc_url)
    if args.pool:
        try:
            pool = parse_pubkey(args.pool)
        except ValueError:
            print(f"❌ Invalid pool address: {args.pool}", file=sys.stderr)
            return 1
        config = dataclasses.replace(config, pool=pool, pool_label=f"{args.pool[:8]}…")

    try:
        asyncio.run(cmd_summary(wallet, config))
    except (RpcError, httpx.HTTPError) as exc:
        print(f"❌ RPC request failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n❌ Cancelled.")
        sys.exit(130)
