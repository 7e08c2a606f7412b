"""AMM engine error classes.

Every error aborts the triggering operation with no partial state change.
Each class carries a stable numeric ``code`` so hosts can map failures
onto their own abort codes.
"""


class AmmError(Exception):
    """Base error for pool engine operations."""

    code: int = 0

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.__class__.__name__)


class AlreadyExists(AmmError):
    """Pool or global config already exists."""

    code = 1


class InvalidAmount(AmmError):
    """Amount is zero, out of range, or does not match the pool ratio."""

    code = 2


class InsufficientAmount(AmmError):
    """Extraction would empty the pool on that side."""

    code = 3


class InsufficientLiquidity(AmmError):
    """Requested output is not strictly below the reserve."""

    code = 4


class InsufficientLiquidityMinted(AmmError):
    """Deposit is too small to mint any LP tokens."""

    code = 5


class InsufficientLiquidityBurned(AmmError):
    """Burn is too small to pay out both assets."""

    code = 6


class InsufficientInputAmount(AmmError):
    """No input arrived on either side of the swap."""

    code = 7


class InsufficientOutputAmount(AmmError):
    """Swap produces no output, or a nonzero residual on the input side."""

    code = 8


class KInvariantViolation(AmmError):
    """Post-trade adjusted balance product fell below the reserve product."""

    code = 9


class NotAdmin(AmmError):
    """Caller is not the admin."""

    code = 10


class NotCreator(AmmError):
    """Caller is not the pool creator."""

    code = 11


class NotFeeRecipient(AmmError):
    """Caller is not the treasury fee recipient."""

    code = 12


class ExcessiveFee(AmmError):
    """Fee exceeds its ceiling."""

    code = 13


class SameAdmin(AmmError):
    """New value equals the current one."""

    code = 14


class SameFee(AmmError):
    """New fee parameters equal the current ones."""

    code = 15


class NoFeeWithdraw(AmmError):
    """Nothing accrued to withdraw."""

    code = 16


class NotInitialized(AmmError):
    """Pool or global config does not exist yet."""

    code = 17


class IdenticalAssets(AmmError):
    """Both sides of a pair are the same asset."""

    code = 18
