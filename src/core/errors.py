"""Exception types for the AMM core.

Every public operation fails with one of these classes instead of clamping.
They all derive from ``ValueError`` so callers that only care about
"rejected input" can catch a single type.
"""

from __future__ import annotations


class AmmError(ValueError):
    """Base class for all AMM failures."""


class InvalidParameterError(AmmError):
    """Zero or malformed input."""


class WrongFeeConfigurationError(AmmError):
    """Fee rates out of range or summing to 100% or more."""


class EmptyReservesError(AmmError):
    """The operation needs non-empty reserves."""


class EmptyShareSupplyError(AmmError):
    """The operation needs a non-zero liquidity-share supply."""


class ArithmeticOverflowError(AmmError):
    """A result does not fit its integer domain (also underflow and divide-by-zero)."""


class ComputationError(AmmError):
    """An invariant or monotonicity check failed.

    Unreachable for well-formed inputs; seeing one means the math engine has a bug.
    """


class PermissionDeniedError(AmmError):
    """Caller is not allowed to perform the operation."""


class InsufficientBalanceError(AmmError):
    """Not enough balance (shares, bank funds, reserves) to cover the request."""


class NotRegisteredError(AmmError):
    """Token has not been registered."""


class FrozenError(AmmError):
    """Pool is frozen."""


class SlippageExceededError(AmmError):
    """Result is below the caller's minimum."""


class NotFoundError(AmmError):
    """Pool or bank does not exist."""


class DuplicateError(AmmError):
    """Token or pool already exists."""


class DeprecatedError(AmmError):
    """Operation is no longer supported."""


class FeatureNotImplementedError(AmmError):
    """Operation is not implemented for this pool kind."""
