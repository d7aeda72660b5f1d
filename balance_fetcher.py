#!/usr/bin/env python3
"""
On-Chain Balance Fetcher for Solana
===================================

Reads native SOL and SPL token balances directly from a public JSON-RPC
node. No API key required. No solana-py dependency — uses httpx for raw
JSON-RPC (see sol_cli.rpc_helpers).

Data Sources (per RPC call):
─────────────────────────────
1. getBalance(wallet)
   Returns: lamports held by the system account.

2. getTokenAccountBalance(associated_token_account)
   Returns: {"amount": "<u64 string>", "decimals": n}
   The associated token account is derived locally from (wallet, mint).
   A wallet that never held the token has no such account: the node answers
   "could not find account", which is reported here as a zero balance.

Wrapped SOL (So111…112) is an SPL token backed 1:1 by lamports, so
SOL + WSOL is the wallet's unified SOL balance.
"""

import asyncio
import logging
from typing import Tuple

from solders.pubkey import Pubkey

from sol_cli.addresses import get_associated_token_address, parse_pubkey
from sol_cli.central_config import TOKEN_PROGRAM_ID, WSOL_MINT, default_rpc_url
from sol_cli.rpc_helpers import AccountNotFoundError, SolanaRpc

logger = logging.getLogger(__name__)


class BalanceFetcher:
    """
    Reads SOL / WSOL balances for a wallet.

    Usage:
        fetcher = BalanceFetcher(SolanaRpc("https://api.mainnet-beta.solana.com"))
        lamports = await fetcher.balance_sol(wallet)
        unified = await fetcher.balance_sol_unified(wallet)
    """

    def __init__(
        self,
        rpc: SolanaRpc,
        wsol_mint: Pubkey = WSOL_MINT,
        token_program: Pubkey = TOKEN_PROGRAM_ID,
    ):
        self.rpc = rpc
        self.wsol_mint = wsol_mint
        self.token_program = token_program

    async def balance_sol(self, wallet: Pubkey) -> int:
        """Native balance in lamports."""
        return await self.rpc.get_balance(wallet)

    async def balance_token(self, wallet: Pubkey, mint: Pubkey) -> Tuple[int, int]:
        """
        (raw amount, decimals) of the wallet's associated token account for
        ``mint``; (0, 0) when that account does not exist.
        """
        token_account = get_associated_token_address(wallet, mint, self.token_program)
        try:
            return await self.rpc.get_token_account_balance(token_account)
        except AccountNotFoundError:
            logger.debug("No token account %s for mint %s", token_account, mint)
            return 0, 0

    async def balance_wsol(self, wallet: Pubkey) -> int:
        """Wrapped SOL in lamports."""
        amount, _decimals = await self.balance_token(wallet, self.wsol_mint)
        return amount

    async def balance_sol_unified(self, wallet: Pubkey) -> int:
        """SOL + WSOL in lamports."""
        sol = await self.balance_sol(wallet)
        wsol = await self.balance_wsol(wallet)
        return sol + wsol


# ── Standalone Test ──────────────────────────────────────────────────────


async def _main(address: str) -> None:
    wallet = parse_pubkey(address)
    fetcher = BalanceFetcher(SolanaRpc(default_rpc_url()))
    print(f"  SOL  : {await fetcher.balance_sol(wallet):,} lamports")
    print(f"  WSOL : {await fetcher.balance_wsol(wallet):,} lamports")


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python balance_fetcher.py <wallet_address>")
        sys.exit(1)
    asyncio.run(_main(sys.argv[1]))
