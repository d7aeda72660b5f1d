"""
Account Layouts — Raydium CLMM PersonalPositionState and jsonParsed token accounts
==================================================================================

Binary layout of the Raydium CLMM ``PersonalPositionState`` account (Anchor,
little-endian) and the subset of the jsonParsed SPL token-account shape this
tool reads.

PersonalPositionState (281 bytes):
  discriminator                 [u8; 8]   sha256("account:PersonalPositionState")[:8]
  bump                          u8
  nft_mint                      Pubkey
  pool_id                       Pubkey
  tick_lower_index              i32
  tick_upper_index              i32
  liquidity                     u128
  fee_growth_inside_0_last_x64  u128
  fee_growth_inside_1_last_x64  u128
  token_fees_owed_0             u64
  token_fees_owed_1             u64
  reward_infos                  [PositionRewardInfo; 3]
  recent_epoch                  u64
  padding                       [u64; 7]

Ref: https://github.com/raydium-io/raydium-clmm/blob/master/programs/amm/src/states/personal_position.rs
"""

from dataclasses import dataclass
from hashlib import sha256
from typing import Any, Dict

from construct import (
    Adapter,
    Array,
    Bytes,
    BytesInteger,
    Const,
    ConstructError,
    Int8ul,
    Int32sl,
    Int64ul,
    Struct,
)
from solders.pubkey import Pubkey


class PubkeyAdapter(Adapter):
    def _decode(self, obj, context, path):
        return Pubkey(obj)

    def _encode(self, obj, context, path):
        return bytes(obj)


PUBKEY = PubkeyAdapter(Bytes(32))
U128 = BytesInteger(16, swapped=True)

PERSONAL_POSITION_DISCRIMINATOR = sha256(b"account:PersonalPositionState").digest()[:8]

POSITION_REWARD_INFO_LAYOUT = Struct(
    "growth_inside_last_x64" / U128,
    "reward_amount_owed" / Int64ul,
)

PERSONAL_POSITION_LAYOUT = Struct(
    "discriminator" / Const(PERSONAL_POSITION_DISCRIMINATOR),
    "bump" / Int8ul,
    "nft_mint" / PUBKEY,
    "pool_id" / PUBKEY,
    "tick_lower_index" / Int32sl,
    "tick_upper_index" / Int32sl,
    "liquidity" / U128,
    "fee_growth_inside_0_last_x64" / U128,
    "fee_growth_inside_1_last_x64" / U128,
    "token_fees_owed_0" / Int64ul,
    "token_fees_owed_1" / Int64ul,
    "reward_infos" / Array(3, POSITION_REWARD_INFO_LAYOUT),
    "recent_epoch" / Int64ul,
    "padding" / Array(7, Int64ul),
)

PERSONAL_POSITION_SIZE = PERSONAL_POSITION_LAYOUT.sizeof()


class AccountDecodeError(ValueError):
    """Account data does not match the expected layout."""


@dataclass(frozen=True)
class PositionRecord:
    """The fields of a personal position needed for valuation."""

    pool_id: Pubkey
    nft_mint: Pubkey
    liquidity: int
    tick_lower_index: int
    tick_upper_index: int
    token_fees_owed_0: int = 0
    token_fees_owed_1: int = 0


def decode_position(data: bytes) -> PositionRecord:
    """
    Decode raw PersonalPositionState account bytes.

    Raises:
        AccountDecodeError: wrong discriminator or truncated data.
    """
    try:
        parsed = PERSONAL_POSITION_LAYOUT.parse(data)
    except ConstructError as exc:
        raise AccountDecodeError(f"Not a CLMM personal position: {exc}") from exc
    return PositionRecord(
        pool_id=parsed.pool_id,
        nft_mint=parsed.nft_mint,
        liquidity=parsed.liquidity,
        tick_lower_index=parsed.tick_lower_index,
        tick_upper_index=parsed.tick_upper_index,
        token_fees_owed_0=parsed.token_fees_owed_0,
        token_fees_owed_1=parsed.token_fees_owed_1,
    )


def encode_position(record: PositionRecord, bump: int = 255) -> bytes:
    """Serialize a PositionRecord (fee growth, rewards and padding zeroed)."""
    return PERSONAL_POSITION_LAYOUT.build(
        {
            "bump": bump,
            "nft_mint": record.nft_mint,
            "pool_id": record.pool_id,
            "tick_lower_index": record.tick_lower_index,
            "tick_upper_index": record.tick_upper_index,
            "liquidity": record.liquidity,
            "fee_growth_inside_0_last_x64": 0,
            "fee_growth_inside_1_last_x64": 0,
            "token_fees_owed_0": record.token_fees_owed_0,
            "token_fees_owed_1": record.token_fees_owed_1,
            "reward_infos": [
                {"growth_inside_last_x64": 0, "reward_amount_owed": 0} for _ in range(3)
            ],
            "recent_epoch": 0,
            "padding": [0] * 7,
        }
    )


# ── jsonParsed token accounts ───────────────────────────────────────────


@dataclass(frozen=True)
class ParsedTokenAccount:
    """One entry of getTokenAccountsByOwner (jsonParsed)."""

    address: Pubkey
    program: str
    mint: Pubkey
    amount: int
    decimals: int

    @property
    def is_nft(self) -> bool:
        return self.decimals == 0 and self.amount == 1


def decode_parsed_token_account(entry: Dict[str, Any]) -> ParsedTokenAccount:
    """
    Decode ``{"pubkey": ..., "account": {"data": {"program", "parsed"}}}``.

    Raises:
        AccountDecodeError: missing keys, non-parsed data or bad values.
    """
    try:
        data = entry["account"]["data"]
        info = data["parsed"]["info"]
        token_amount = info["tokenAmount"]
        return ParsedTokenAccount(
            address=Pubkey.from_string(entry["pubkey"]),
            program=data["program"],
            mint=Pubkey.from_string(info["mint"]),
            amount=int(token_amount["amount"]),
            decimals=int(token_amount["decimals"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise AccountDecodeError(f"Malformed token account: {exc!r}") from exc
