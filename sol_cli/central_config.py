"""
Project Configuration — RPC endpoint, version, well-known constants
===================================================================

Contains the Solana RPC configuration, the Raydium CLMM program and pool
identifiers, and project metadata.

Sources:
  Solana JSON-RPC        : https://solana.com/docs/rpc
  SPL Token program      : https://spl.solana.com/token
  Raydium CLMM           : https://docs.raydium.io/raydium/pool-creation/creating-a-clmm-pool-and-farm
"""

import os
import re
from dataclasses import dataclass, field
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path

from solders.pubkey import Pubkey

# Version: single source of truth is pyproject.toml
try:
    PROJECT_VERSION = version("sol-cli")
except PackageNotFoundError:
    # Dev / CI: package not installed, read pyproject.toml directly
    _toml = Path(__file__).resolve().parent.parent / "pyproject.toml"
    _m = (
        re.search(r'version\s*=\s*"([^"]+)"', _toml.read_text())
        if _toml.exists()
        else None
    )
    PROJECT_VERSION = _m.group(1) if _m else "0.0.0-dev"
PROJECT_NAME = "SOL CLI"


# ── Endpoints ───────────────────────────────────────────────────────────

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
RPC_URL_ENV = "SOLANA_RPC_URL"

# Example wallet shown in usage / error messages
EXAMPLE_ADDRESS = "53zSj4G935ZY2a5x2UnGAiJXSuXXmGHaLph2zhAUvYpg"


# ── Well-Known Addresses ────────────────────────────────────────────────
# Ref: https://spl.solana.com/token, https://github.com/raydium-io/raydium-clmm

WSOL_MINT = Pubkey.from_string("So11111111111111111111111111111111111111112")
USDC_MINT = Pubkey.from_string("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)

CLMM_PROGRAM_ID = Pubkey.from_string("CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK")

# SOL/USDC CLMM pool, tick spacing 1 (0.01% fee tier)
SOL_USDC_1BP_POOL = Pubkey.from_string("8sLbNZoA1cfnvMJLPfp98ZLAnFSYCFApfJKMbiXNLwxj")

# Seed of the personal position PDA: [POSITION_SEED, nft_mint]
POSITION_SEED = b"position"

# jsonParsed "program" tags accepted for position-ownership tokens
PARSED_TOKEN_PROGRAMS = frozenset({"spl-token", "spl-token-2022"})

SOL_DECIMALS = 9
LAMPORTS_PER_SOL = 10 ** SOL_DECIMALS


def default_rpc_url() -> str:
    """RPC endpoint from $SOLANA_RPC_URL, falling back to public mainnet."""
    return os.environ.get(RPC_URL_ENV) or DEFAULT_RPC_URL


@dataclass(frozen=True)
class SolCliConfig:
    """Runtime configuration. Defaults reproduce the SOL-USDC 1bp report."""

    rpc_url: str = field(default_factory=default_rpc_url)

    # HTTP behaviour
    timeout_seconds: float = 20.0
    max_retries: int = 2
    retry_backoff_seconds: float = 0.5

    # Tokens & programs
    wsol_mint: Pubkey = WSOL_MINT
    token_program: Pubkey = TOKEN_PROGRAM_ID
    clmm_program: Pubkey = CLMM_PROGRAM_ID

    # Target pool
    pool: Pubkey = SOL_USDC_1BP_POOL
    pool_label: str = "SOL-USDC.1bp"

    native_decimals: int = SOL_DECIMALS
