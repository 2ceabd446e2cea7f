"""
Checked 256-bit unsigned integer.

Python ints never overflow, so this type is where the fixed-width envelope is
enforced: every operation checks its result against [0, 2^256 - 1] and raises
instead of wrapping. Reserve products and StableSwap iterations run through
this type so that a pool which would overflow a 256-bit machine word is
rejected here too.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...core.errors import ArithmeticOverflowError


U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1
U256_MAX = (1 << 256) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True, order=True)
class U256:
    value: int

    def __post_init__(self) -> None:
        _require_int("value", self.value)
        if not (0 <= self.value <= U256_MAX):
            raise ArithmeticOverflowError(f"value out of u256 range: {self.value}")

    # -- construction -------------------------------------------------------

    @classmethod
    def from_u64(cls, value: int) -> "U256":
        _require_int("value", value)
        if not (0 <= value <= U64_MAX):
            raise ArithmeticOverflowError(f"value out of u64 range: {value}")
        return cls(value)

    @classmethod
    def zero(cls) -> "U256":
        return cls(0)

    @classmethod
    def one(cls) -> "U256":
        return cls(1)

    # -- extraction ---------------------------------------------------------

    def as_u64(self) -> int:
        if self.value > U64_MAX:
            raise ArithmeticOverflowError(f"value does not fit in u64: {self.value}")
        return self.value

    def as_u128(self) -> int:
        if self.value > U128_MAX:
            raise ArithmeticOverflowError(f"value does not fit in u128: {self.value}")
        return self.value

    # -- checked arithmetic -------------------------------------------------

    def add(self, other: "U256") -> "U256":
        r = self.value + other.value
        if r > U256_MAX:
            raise ArithmeticOverflowError("u256 add overflow")
        return U256(r)

    def sub(self, other: "U256") -> "U256":
        if other.value > self.value:
            raise ArithmeticOverflowError("u256 sub underflow")
        return U256(self.value - other.value)

    def mul(self, other: "U256") -> "U256":
        r = self.value * other.value
        if r > U256_MAX:
            raise ArithmeticOverflowError("u256 mul overflow")
        return U256(r)

    def div(self, other: "U256") -> "U256":
        """Floor division."""
        if other.value == 0:
            raise ArithmeticOverflowError("u256 division by zero")
        return U256(self.value // other.value)

    def abs_sub(self, other: "U256") -> "U256":
        if self.value >= other.value:
            return U256(self.value - other.value)
        return U256(other.value - self.value)

    def is_zero(self) -> bool:
        return self.value == 0

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __floordiv__ = div

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"U256({self.value})"


def require_u64(name: str, value: int) -> int:
    """Validate that ``value`` is a u64 and return it."""
    _require_int(name, value)
    if not (0 <= value <= U64_MAX):
        raise ArithmeticOverflowError(f"{name} out of u64 range: {value}")
    return value
