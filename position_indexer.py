#!/usr/bin/env python3
"""
CLMM Position Indexer — Wallet Scanner & Valuator
=================================================

Discovers the Raydium CLMM positions owned by a wallet and converts them
into underlying token amounts for one pool.

Flow:
  1. getTokenAccountsByOwner(wallet, token_program)  → wallet's token accounts
  2. keep NFTs (decimals == 0, amount == 1)          → position-ownership tokens
  3. PDA(b"position", mint) under the CLMM program   → position addresses
  4. getMultipleAccounts(addresses)                  → raw PersonalPositionState
  5. decode, keep pool_id == pool                    → position records
  6. ticks → Q64.64 sqrt prices → token amounts      → summed (amount_0, amount_1)

All data comes from public JSON-RPC — no API key, no indexer, no SDK.

References:
  Personal position: https://github.com/raydium-io/raydium-clmm/blob/master/programs/amm/src/states/personal_position.rs
  Liquidity math:    https://github.com/raydium-io/raydium-clmm/blob/master/programs/amm/src/libraries/liquidity_math.rs
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from solders.pubkey import Pubkey

from clmm_math import position_token_amounts
from sol_cli.addresses import derive_position_address, parse_pubkey
from sol_cli.central_config import (
    CLMM_PROGRAM_ID,
    PARSED_TOKEN_PROGRAMS,
    SOL_USDC_1BP_POOL,
    TOKEN_PROGRAM_ID,
    default_rpc_url,
)
from sol_cli.layouts import (
    AccountDecodeError,
    PositionRecord,
    decode_parsed_token_account,
    decode_position,
)
from sol_cli.rpc_helpers import SolanaRpc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionRef:
    """A position-ownership token and the position account it unlocks."""

    ownership_token_account: Pubkey
    mint: Pubkey
    position_address: Pubkey


class FetchStatus(enum.Enum):
    OK = "ok"
    ABSENT = "absent"
    DECODE_ERROR = "decode_error"


@dataclass(frozen=True)
class PositionFetch:
    """Outcome of fetching one candidate position account."""

    ref: PositionRef
    status: FetchStatus
    record: Optional[PositionRecord] = None
    error: str = ""


# ── Position Indexer ────────────────────────────────────────────────────


class PositionIndexer:
    """
    Discovers and values CLMM positions owned by a wallet.

    Usage:
        indexer = PositionIndexer(SolanaRpc(url))
        refs = await indexer.enumerate_positions(wallet)
        amount_0, amount_1 = await indexer.value_positions(wallet, pool)
    """

    def __init__(
        self,
        rpc: SolanaRpc,
        token_program: Pubkey = TOKEN_PROGRAM_ID,
        clmm_program: Pubkey = CLMM_PROGRAM_ID,
    ):
        self.rpc = rpc
        self.token_program = token_program
        self.clmm_program = clmm_program

    async def enumerate_positions(
        self,
        wallet: Pubkey,
        token_program: Optional[Pubkey] = None,
        exchange_program: Optional[Pubkey] = None,
    ) -> List[PositionRef]:
        """
        Position references for every position NFT held by ``wallet``.

        Order follows the RPC response. Entries that cannot be parsed are
        logged and skipped.
        """
        token_program = token_program or self.token_program
        exchange_program = exchange_program or self.clmm_program

        entries = await self.rpc.get_token_accounts_by_owner(wallet, token_program)

        refs: List[PositionRef] = []
        seen = set()
        for entry in entries:
            try:
                account = decode_parsed_token_account(entry)
            except AccountDecodeError as exc:
                logger.warning("Skipping token account: %s", exc)
                continue

            if account.program not in PARSED_TOKEN_PROGRAMS:
                continue
            if not account.is_nft:
                continue

            position_address = derive_position_address(account.mint, exchange_program)
            if position_address in seen:
                continue
            seen.add(position_address)
            refs.append(
                PositionRef(
                    ownership_token_account=account.address,
                    mint=account.mint,
                    position_address=position_address,
                )
            )

        logger.debug("Found %d position NFT candidate(s)", len(refs))
        return refs

    async def fetch_positions(self, refs: List[PositionRef]) -> List[PositionFetch]:
        """Batch-fetch and decode the position accounts behind ``refs``."""
        if not refs:
            return []

        blobs = await self.rpc.get_multiple_accounts([r.position_address for r in refs])

        fetched: List[PositionFetch] = []
        for ref, data in zip(refs, blobs):
            if data is None:
                fetched.append(PositionFetch(ref, FetchStatus.ABSENT))
                continue
            try:
                record = decode_position(data)
            except AccountDecodeError as exc:
                fetched.append(PositionFetch(ref, FetchStatus.DECODE_ERROR, error=str(exc)))
                continue
            fetched.append(PositionFetch(ref, FetchStatus.OK, record=record))
        return fetched

    async def read_pool_positions(
        self, wallet: Pubkey, pool: Pubkey
    ) -> List[PositionRecord]:
        """Decoded positions of ``wallet`` that belong to ``pool``."""
        refs = await self.enumerate_positions(wallet)
        fetched = await self.fetch_positions(refs)

        records = []
        for item in fetched:
            if item.status is FetchStatus.ABSENT:
                logger.warning(
                    "No position account at %s (mint %s)",
                    item.ref.position_address, item.ref.mint,
                )
                continue
            if item.status is FetchStatus.DECODE_ERROR:
                logger.warning(
                    "Undecodable account at %s: %s",
                    item.ref.position_address, item.error,
                )
                continue
            if item.record.pool_id == pool:
                records.append(item.record)
        return records

    async def value_positions(
        self, wallet: Pubkey, pool: Pubkey = SOL_USDC_1BP_POOL
    ) -> Tuple[int, int]:
        """
        Total (token 0, token 1) amounts, in raw units, across the wallet's
        positions in ``pool``; (0, 0) when there are none.

        Raises:
            TickIndexError / AmountOverflowError: corrupt position data.
        """
        records = await self.read_pool_positions(wallet, pool)
        return sum_position_amounts(records)


def sum_position_amounts(records: List[PositionRecord]) -> Tuple[int, int]:
    """Sum of (token 0, token 1) over ``records``, each rounded up."""
    amount_0 = 0
    amount_1 = 0
    for record in records:
        delta_0, delta_1 = position_token_amounts(
            record.tick_lower_index, record.tick_upper_index, record.liquidity
        )
        amount_0 += delta_0
        amount_1 += delta_1
    return amount_0, amount_1


# ── Standalone CLI ──────────────────────────────────────────────────────


async def _main(wallet: str, pool: Optional[str] = None) -> Tuple[int, int]:
    """Quick test: value a wallet's positions in one CLMM pool."""
    owner = parse_pubkey(wallet)
    pool_key = parse_pubkey(pool) if pool else SOL_USDC_1BP_POOL
    indexer = PositionIndexer(SolanaRpc(default_rpc_url()))

    records = await indexer.read_pool_positions(owner, pool_key)
    print(f"\n{'=' * 65}")
    print(f"  CLMM Positions — {str(pool_key)[:8]}…")
    print(f"  👛 Wallet: {wallet[:6]}…{wallet[-4:]}")
    print(f"{'=' * 65}")

    if not records:
        print("  No positions found.")
        return 0, 0

    for i, r in enumerate(records, 1):
        print(f"\n    {i}. Position {str(r.nft_mint)[:16]}...")
        print(f"       Ticks    : [{r.tick_lower_index}, {r.tick_upper_index}]")
        print(f"       Liquidity: {r.liquidity:,}")

    amounts = sum_position_amounts(records)
    print(f"\n  Total: {amounts[0]:,} (token 0) / {amounts[1]:,} (token 1)")
    print(f"{'=' * 65}")
    return amounts


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python position_indexer.py <wallet_address> [pool_address]")
        sys.exit(1)
    _wallet = sys.argv[1]
    _pool = sys.argv[2] if len(sys.argv) > 2 else None
    asyncio.run(_main(_wallet, _pool))
