"""Double-width (256-bit) unsigned integers built from two u128 words.

The swap invariant compares products of two u128 factors. Those products do
not fit in u128, so they are carried as a (hi, lo) word pair and compared
word by word. Multiplication works on 64-bit limbs so every intermediate
stays within u128, the same way a fixed-width host would compute it.
"""

from __future__ import annotations

from dataclasses import dataclass

from amm_engine.safe_int import U64_MAX, U128_MAX, S, U128Overflow

__all__ = [
    "U256",
    "mul_u128",
    "product_ge",
]

_MASK64 = U64_MAX
_SHIFT64 = 64
_SHIFT128 = 128


@dataclass(frozen=True, order=True)
class U256:
    """Unsigned 256-bit value as two u128 words.

    Field order makes the generated comparisons numeric: ``hi`` is compared
    first, then ``lo``.
    """

    hi: int
    lo: int

    def __post_init__(self) -> None:
        if not 0 <= self.hi <= U128_MAX or not 0 <= self.lo <= U128_MAX:
            raise U128Overflow(f"U256 words must be u128: hi={self.hi}, lo={self.lo}")

    @classmethod
    def from_u128(cls, value: int) -> U256:
        return cls(hi=0, lo=S(value).to_u128())

    @classmethod
    def from_int(cls, value: int) -> U256:
        """Split an integer below 2^256 into words."""
        if not 0 <= value < 1 << 256:
            raise U128Overflow(f"Value does not fit in u256: {value}")
        return cls(hi=value >> _SHIFT128, lo=value & U128_MAX)

    def to_int(self) -> int:
        return (self.hi << _SHIFT128) | self.lo


def mul_u128(a: int, b: int) -> U256:
    """Full 256-bit product of two u128 values.

    Raises:
        U128Overflow: If either operand is outside u128
    """
    a = S(a).to_u128()
    b = S(b).to_u128()

    a0, a1 = a & _MASK64, a >> _SHIFT64
    b0, b1 = b & _MASK64, b >> _SHIFT64

    # Each partial product is at most 128 bits
    p00 = a0 * b0
    p01 = a0 * b1
    p10 = a1 * b0
    p11 = a1 * b1

    # Carry column: at most 66 bits
    mid = (p00 >> _SHIFT64) + (p01 & _MASK64) + (p10 & _MASK64)

    lo = ((mid & _MASK64) << _SHIFT64) | (p00 & _MASK64)
    hi = p11 + (p01 >> _SHIFT64) + (p10 >> _SHIFT64) + (mid >> _SHIFT64)
    return U256(hi=hi, lo=lo)


def product_ge(a: int, b: int, c: int, d: int) -> bool:
    """Return ``a * b >= c * d`` for u128 operands without overflow.

    When every operand fits in u64 the products fit in u128 and are compared
    directly. Otherwise both products are widened to U256.
    """
    if max(a, b, c, d) <= U64_MAX and min(a, b, c, d) >= 0:
        return (S(a) * b).to_u128() >= (S(c) * d).to_u128()
    return mul_u128(a, b) >= mul_u128(c, d)
