"""
SOL CLI — Command Implementations
=================================

The summary command lives here, keeping run.py as a thin argparse
dispatcher: collect the four balances for a wallet, scale them by the
native decimals and print the report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from solders.pubkey import Pubkey

from balance_fetcher import BalanceFetcher
from position_indexer import PositionIndexer
from sol_cli.central_config import SolCliConfig
from sol_cli.rpc_helpers import SolanaRpc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceSummary:
    """Raw (lamport) results for one wallet."""

    wallet: Pubkey
    sol: int
    wsol: int
    sol_unified: int
    sol_in_position: int


async def collect_summary(
    wallet: Pubkey, rpc: SolanaRpc, config: SolCliConfig
) -> BalanceSummary:
    """Run the balance lookups then the position valuation, in order."""
    fetcher = BalanceFetcher(
        rpc, wsol_mint=config.wsol_mint, token_program=config.token_program
    )
    indexer = PositionIndexer(
        rpc,
        token_program=config.token_program,
        clmm_program=config.clmm_program,
    )

    sol = await fetcher.balance_sol(wallet)
    wsol = await fetcher.balance_wsol(wallet)
    sol_unified = await fetcher.balance_sol_unified(wallet)
    sol_in_position, token_1 = await indexer.value_positions(wallet, config.pool)
    logger.debug("Position amounts in %s: 0=%d 1=%d", config.pool, sol_in_position, token_1)

    return BalanceSummary(
        wallet=wallet,
        sol=sol,
        wsol=wsol,
        sol_unified=sol_unified,
        sol_in_position=sol_in_position,
    )


def format_amount(value: float) -> str:
    """
    Shortest round-trip decimal for ``value``, never in exponent notation
    and without a trailing ``.0``: 1e-05 → "0.00001", 2.0 → "2".
    """
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_summary(summary: BalanceSummary, config: SolCliConfig) -> str:
    """Multi-line report, amounts divided by 10^native_decimals."""
    multiplier = 10 ** config.native_decimals
    sol = format_amount(summary.sol / multiplier)
    wsol = format_amount(summary.wsol / multiplier)
    sol_unified = format_amount(summary.sol_unified / multiplier)
    sol_in_position = format_amount(summary.sol_in_position / multiplier)
    return (
        f"\nSOL Balance/Position Summary for address: {summary.wallet}\n"
        f"- SOL: {sol}\n"
        f"- WSOL: {wsol}\n"
        f"- SOL Unified (SOL + WSOL): {sol_unified}\n"
        f"- SOL in {config.pool_label} LP Position: {sol_in_position}\n"
    )


async def cmd_summary(wallet: Pubkey, config: SolCliConfig) -> BalanceSummary:
    """Fetch and print the summary for ``wallet``."""
    rpc = SolanaRpc.from_config(config)
    summary = await collect_summary(wallet, rpc, config)
    print(format_summary(summary, config))
    return summary
