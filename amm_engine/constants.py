"""Protocol constants for the AMM pool engine.

Centralizes fee ceilings, fixed-point scales and well-known accounts.
"""

from amm_engine.models.types import normalize_account

# Basis points denominator (1 bps = 1/10000)
BPS_DENOMINATOR = 10_000

# Fixed-point scale used by the swap invariant check
PRECISION = 10_000

# LP units locked forever on pool genesis
MINIMUM_LIQUIDITY = 1_000

# Protocol floor added on top of the configured fee in the invariant check
FEE_FLOOR_BPS = 20

# Ceiling for liquidity + team + rewards fees
MAX_POOL_FEE_BPS = 1_500

# Ceiling for the treasury fee
MAX_TREASURY_FEE_BPS = 10

# Treasury fee assigned to every new pool
DEFAULT_TREASURY_FEE_BPS = 10

# Sink account holding the locked minimum liquidity (frozen on pool creation)
LOCKED_LIQUIDITY_ACCOUNT = normalize_account("0x0")
