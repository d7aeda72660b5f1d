#!/usr/bin/env python3
"""
RPC Helpers — Solana JSON-RPC Client
====================================

Low-level Solana interaction primitives shared by balance_fetcher.py and
position_indexer.py:

  • JSON-RPC transport over httpx (single requests, bounded retry)
  • Typed RPC errors, with "account not found" as its own class
  • Read-only queries: getBalance, getTokenAccountBalance,
    getTokenAccountsByOwner, getMultipleAccounts
  • base64 account-data decoding

All methods reference the Solana JSON-RPC API:
  https://solana.com/docs/rpc/http

Terminology:
  • Lamport:  smallest unit of SOL (1 SOL = 10^9 lamports)
  • Value:    every query result is wrapped as {"context": {...}, "value": ...}
"""

import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from solders.pubkey import Pubkey

from sol_cli.central_config import SolCliConfig

logger = logging.getLogger(__name__)

# ── JSON-RPC Constants ──────────────────────────────────────────────────

JSONRPC_VERSION = "2.0"
INVALID_PARAMS = -32602  # Also used by validators for "could not find account"
ACCOUNT_NOT_FOUND_MARKER = "could not find account"

# getMultipleAccounts accepts at most 100 keys per request
# Ref: https://solana.com/docs/rpc/http/getmultipleaccounts
MAX_MULTIPLE_ACCOUNTS = 100

COMMITMENT = "confirmed"


# ── Errors ──────────────────────────────────────────────────────────────


class RpcError(RuntimeError):
    """JSON-RPC error object returned by the node."""

    def __init__(self, code: Optional[int], message: str, method: str = ""):
        self.code = code
        self.message = message
        self.method = method
        prefix = f"{method}: " if method else ""
        super().__init__(f"RPC error: {prefix}{message} (code {code})")


class AccountNotFoundError(RpcError):
    """The queried account does not exist on-chain."""


def raise_for_rpc_error(result: Dict[str, Any], method: str = "") -> None:
    """Raise the matching RpcError subclass if a JSON-RPC response carries one."""
    error = result.get("error")
    if error is None:
        return
    if isinstance(error, dict):
        code = error.get("code")
        message = str(error.get("message", error))
    else:
        code, message = None, str(error)
    if ACCOUNT_NOT_FOUND_MARKER in message.lower():
        raise AccountNotFoundError(code, message, method)
    raise RpcError(code, message, method)


def decode_account_data(account: Optional[Dict[str, Any]]) -> Optional[bytes]:
    """
    Decode the raw bytes of an account returned with ``encoding: base64``.

    The node returns ``"data": ["<base64>", "base64"]``. A ``None`` account
    (address with no data on-chain) decodes to ``None``.
    """
    if account is None:
        return None
    data = account["data"]
    if isinstance(data, list):
        payload, encoding = data[0], data[1]
        if encoding != "base64":
            raise ValueError(f"Unsupported account encoding: {encoding}")
        return base64.b64decode(payload)
    return base64.b64decode(data)


# ── JSON-RPC Client ─────────────────────────────────────────────────────


async def rpc_request(
    rpc_url: str, method: str, params: List[Any], timeout: float = 20
) -> Any:
    """
    Execute one JSON-RPC call against a Solana node.

    Args:
        rpc_url: JSON-RPC endpoint URL (e.g. https://api.mainnet-beta.solana.com)
        method: RPC method name (e.g. "getBalance")
        params: Positional params list
        timeout: HTTP timeout in seconds

    Returns:
        The ``result`` member of the response.

    Raises:
        AccountNotFoundError: If the node reports a missing account.
        RpcError: For any other JSON-RPC error object.
        httpx.HTTPError: For transport failures and non-2xx statuses.
    """
    payload = {
        "jsonrpc": JSONRPC_VERSION,
        "id": 1,
        "method": method,
        "params": params,
    }
    async with httpx.AsyncClient(timeout=timeout) as client:
        resp = await client.post(rpc_url, json=payload)
        resp.raise_for_status()
        result = resp.json()
    raise_for_rpc_error(result, method)
    if "result" not in result:
        raise RpcError(None, "Response has neither result nor error", method)
    return result["result"]


class SolanaRpc:
    """
    Stateless handle on one Solana RPC endpoint.

    Holds only the endpoint and the retry policy, so a single instance can be
    created by the caller and passed to every query.

    Usage:
        rpc = SolanaRpc("https://api.mainnet-beta.solana.com")
        lamports = await rpc.get_balance(wallet)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 20,
        max_retries: int = 2,
        backoff: float = 0.5,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries}")
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff

    @classmethod
    def from_config(cls, config: SolCliConfig) -> "SolanaRpc":
        return cls(
            config.rpc_url,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            backoff=config.retry_backoff_seconds,
        )

    async def call(self, method: str, params: List[Any]) -> Any:
        """Run ``method``; transport errors are retried with exponential backoff."""
        attempt = 0
        while True:
            try:
                return await rpc_request(self.rpc_url, method, params, self.timeout)
            except httpx.TransportError as exc:
                if attempt >= self.max_retries:
                    raise
                delay = self.backoff * (2 ** attempt)
                attempt += 1
                logger.warning(
                    "%s failed (%s), retry %d/%d in %.1fs",
                    method, exc, attempt, self.max_retries, delay,
                )
                await asyncio.sleep(delay)

    # ── Queries ─────────────────────────────────────────────────────────

    async def get_balance(self, address: Pubkey) -> int:
        """Native balance in lamports."""
        result = await self.call("getBalance", [str(address), {"commitment": COMMITMENT}])
        return int(result["value"])

    async def get_token_account_balance(self, token_account: Pubkey) -> Tuple[int, int]:
        """
        Raw amount and decimals of an SPL token account.

        The node returns the amount as a decimal string (u64 does not fit
        a JSON number); it is converted to ``int`` here.
        """
        result = await self.call(
            "getTokenAccountBalance", [str(token_account), {"commitment": COMMITMENT}]
        )
        value = result["value"]
        return int(value["amount"]), int(value["decimals"])

    async def get_token_accounts_by_owner(
        self, owner: Pubkey, program_id: Pubkey
    ) -> List[Dict[str, Any]]:
        """All token accounts of ``owner`` under ``program_id``, jsonParsed."""
        result = await self.call(
            "getTokenAccountsByOwner",
            [
                str(owner),
                {"programId": str(program_id)},
                {"encoding": "jsonParsed", "commitment": COMMITMENT},
            ],
        )
        return list(result["value"])

    async def get_multiple_accounts(
        self, addresses: Sequence[Pubkey]
    ) -> List[Optional[bytes]]:
        """
        Raw data for each address, in request order; ``None`` where the
        account does not exist.

        One request per MAX_MULTIPLE_ACCOUNTS addresses.
        """
        accounts: List[Optional[bytes]] = []
        for start in range(0, len(addresses), MAX_MULTIPLE_ACCOUNTS):
            chunk = addresses[start:start + MAX_MULTIPLE_ACCOUNTS]
            result = await self.call(
                "getMultipleAccounts",
                [
                    [str(a) for a in chunk],
                    {"encoding": "base64", "commitment": COMMITMENT},
                ],
            )
            values = result["value"]
            if len(values) != len(chunk):
                raise RpcError(
                    None,
                    f"Expected {len(chunk)} accounts, got {len(values)}",
                    "getMultipleAccounts",
                )
            accounts.extend(decode_account_data(v) for v in values)
        return accounts
