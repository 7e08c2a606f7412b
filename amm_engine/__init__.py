"""AMM Engine - constant product liquidity pools."""

from amm_engine.config import EngineConfig, configure_logging
from amm_engine.engine import AddLiquidityResult, AmmEngine, RemoveLiquidityResult
from amm_engine.errors import AmmError
from amm_engine.ledger import InMemoryLedger

__version__ = "0.1.0"
__all__ = [
    "AmmEngine",
    "AddLiquidityResult",
    "RemoveLiquidityResult",
    "AmmError",
    "EngineConfig",
    "InMemoryLedger",
    "configure_logging",
    "__version__",
]
