"""
Address Derivation — associated token accounts and CLMM personal position PDAs
============================================================================

Program-derived addresses (PDAs) are computed off-chain from seeds and the
owning program id; no RPC call is involved.

  Associated token account : seeds [owner, token_program, mint]
                             program ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL
  CLMM personal position   : seeds [b"position", nft_mint]
                             program CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK

Refs:
  https://spl.solana.com/associated-token-account
  https://github.com/raydium-io/raydium-clmm/blob/master/programs/amm/src/states/personal_position.rs
"""

from solders.pubkey import Pubkey

from sol_cli.central_config import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    POSITION_SEED,
    TOKEN_PROGRAM_ID,
    CLMM_PROGRAM_ID,
)


def parse_pubkey(text: str) -> Pubkey:
    """
    Parse a base58 address.

    Raises:
        ValueError: not valid base58 or not 32 bytes.
    """
    return Pubkey.from_string(text.strip())


def get_associated_token_address(
    owner: Pubkey, mint: Pubkey, token_program: Pubkey = TOKEN_PROGRAM_ID
) -> Pubkey:
    """The owner's canonical token account for ``mint``."""
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(token_program), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


def derive_position_address(
    nft_mint: Pubkey, program_id: Pubkey = CLMM_PROGRAM_ID
) -> Pubkey:
    """Position account controlled by ``program_id`` for one position NFT mint."""
    address, _bump = Pubkey.find_program_address(
        [POSITION_SEED, bytes(nft_mint)], program_id
    )
    return address
