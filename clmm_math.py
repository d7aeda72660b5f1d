#!/usr/bin/env python3
"""
CLMM Math Engine
================

Integer concentrated-liquidity math for Raydium CLMM pools (Uniswap V3
style), in the pool's Q64.64 fixed-point representation.

FORMULA SOURCES:
────────────────
1. Uniswap V3 Core Whitepaper
   https://uniswap.org/whitepaper-v3.pdf
   - §6.1  Tick-Indexed Concentrated Liquidity:  p(i) = 1.0001^i
   - §6.2  Amounts:  Δx = L·(1/√Pa − 1/√Pb),  Δy = L·(√Pb − √Pa)

2. Raydium CLMM tick_math.rs / liquidity_math.rs
   https://github.com/raydium-io/raydium-clmm/tree/master/programs/amm/src/libraries
   - get_sqrt_price_at_tick: bit-decomposition of 1/√1.0001^|i| with
     Q64.64 constants (the Uniswap TickMath scheme at 64-bit precision)
   - get_delta_amount_0_unsigned / get_delta_amount_1_unsigned:
     u64 token amounts, optional round-up, MaxTokenOverflow past u64
"""

from typing import Tuple

# ── Named Constants ──────────────────────────────────────────────────────

MIN_TICK = -443636
MAX_TICK = 443636

# get_sqrt_price_at_tick(MIN_TICK) / (MAX_TICK)
MIN_SQRT_PRICE_X64 = 4295048016
MAX_SQRT_PRICE_X64 = 79226673521066979257578248091

Q64_RESOLUTION = 64
Q64 = 1 << Q64_RESOLUTION
U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1

# 1/√(1.0001^(2^k)) in Q64.64, for k = 1..18 (|tick| < 2^19)
_TICK_ONE_RATIO = 0xfffcb933bd6fb800
_TICK_RATIOS = (
    (0x2, 0xfff97272373d4000),
    (0x4, 0xfff2e50f5f657000),
    (0x8, 0xffe5caca7e10f000),
    (0x10, 0xffcb9843d60f7000),
    (0x20, 0xff973b41fa98e800),
    (0x40, 0xff2ea16466c9b000),
    (0x80, 0xfe5dee046a9a3800),
    (0x100, 0xfcbe86c7900bb000),
    (0x200, 0xf987a7253ac65800),
    (0x400, 0xf3392b0822bb6000),
    (0x800, 0xe7159475a2caf000),
    (0x1000, 0xd097f3bdfd2f2000),
    (0x2000, 0xa9f746462d9f8000),
    (0x4000, 0x70d869a156f31c00),
    (0x8000, 0x31be135f97ed3200),
    (0x10000, 0x9aa508b5b85a500),
    (0x20000, 0x5d6af8dedc582c),
    (0x40000, 0x2216e584f5fa),
)


class TickIndexError(ValueError):
    """Tick index outside [MIN_TICK, MAX_TICK]."""


class AmountOverflowError(OverflowError):
    """Resulting token amount does not fit in u64."""


# ── Tick → Price ─────────────────────────────────────────────────────────


def get_sqrt_price_at_tick(tick: int) -> int:
    """
    √(1.0001^tick) as a Q64.64 integer.

    >>> get_sqrt_price_at_tick(0) == 1 << 64
    True
    """
    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        raise TickIndexError(f"Tick {tick} out of range [{MIN_TICK}, {MAX_TICK}]")

    ratio = _TICK_ONE_RATIO if abs_tick & 0x1 else Q64
    for bit, factor in _TICK_RATIOS:
        if abs_tick & bit:
            ratio = (ratio * factor) >> Q64_RESOLUTION

    # ratio is 1/√p for |tick|; invert for positive ticks
    if tick > 0:
        ratio = U128_MAX // ratio
    return ratio


# ── Token Amounts (Whitepaper §6.2) ─────────────────────────────────────


def _ordered(sqrt_price_a_x64: int, sqrt_price_b_x64: int) -> Tuple[int, int]:
    if sqrt_price_a_x64 > sqrt_price_b_x64:
        return sqrt_price_b_x64, sqrt_price_a_x64
    return sqrt_price_a_x64, sqrt_price_b_x64


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def _check_u64(amount: int) -> int:
    if amount > U64_MAX:
        raise AmountOverflowError(f"Token amount {amount} exceeds u64")
    return amount


def get_delta_amount_0_unsigned(
    sqrt_price_a_x64: int, sqrt_price_b_x64: int, liquidity: int, round_up: bool
) -> int:
    """
    Token 0 for ``liquidity`` between two sqrt prices:

        Δ0 = L · 2^64 · (√Pb − √Pa) / √Pb / √Pa

    Argument order of the prices does not matter.
    """
    lower, upper = _ordered(sqrt_price_a_x64, sqrt_price_b_x64)
    numerator = (liquidity << Q64_RESOLUTION) * (upper - lower)
    if round_up:
        result = _ceil_div(_ceil_div(numerator, upper), lower)
    else:
        result = numerator // upper // lower
    return _check_u64(result)


def get_delta_amount_1_unsigned(
    sqrt_price_a_x64: int, sqrt_price_b_x64: int, liquidity: int, round_up: bool
) -> int:
    """
    Token 1 for ``liquidity`` between two sqrt prices:

        Δ1 = L · (√Pb − √Pa) / 2^64

    Argument order of the prices does not matter.
    """
    lower, upper = _ordered(sqrt_price_a_x64, sqrt_price_b_x64)
    product = liquidity * (upper - lower)
    if round_up:
        result = _ceil_div(product, Q64)
    else:
        result = product >> Q64_RESOLUTION
    return _check_u64(result)


def position_token_amounts(
    tick_lower_index: int, tick_upper_index: int, liquidity: int
) -> Tuple[int, int]:
    """
    (amount_0, amount_1) for a position across its whole tick range, both
    rounded up.
    """
    sqrt_price_lower = get_sqrt_price_at_tick(tick_lower_index)
    sqrt_price_upper = get_sqrt_price_at_tick(tick_upper_index)
    amount_0 = get_delta_amount_0_unsigned(sqrt_price_lower, sqrt_price_upper, liquidity, True)
    amount_1 = get_delta_amount_1_unsigned(sqrt_price_upper, sqrt_price_lower, liquidity, True)
    return amount_0, amount_1
