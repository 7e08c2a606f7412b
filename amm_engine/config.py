"""Engine configuration and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Literal

import structlog

from amm_engine.constants import DEFAULT_TREASURY_FEE_BPS, MAX_TREASURY_FEE_BPS

TreasuryFeeAuthority = Literal["admin", "creator"]


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for the pool engine.

    Attributes:
        default_treasury_fee_bps: Treasury fee assigned to new pools (default: 10)
        treasury_fee_authority: Who may change a pool's treasury fee, the
            global admin or the pool creator (default: admin)
        log_level: Level for configure_logging (default: INFO)
    """

    default_treasury_fee_bps: int = DEFAULT_TREASURY_FEE_BPS
    treasury_fee_authority: TreasuryFeeAuthority = "admin"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not 0 <= self.default_treasury_fee_bps <= MAX_TREASURY_FEE_BPS:
            raise ValueError(
                f"default_treasury_fee_bps must be within 0..{MAX_TREASURY_FEE_BPS}: "
                f"{self.default_treasury_fee_bps}"
            )
        if self.treasury_fee_authority not in ("admin", "creator"):
            raise ValueError(
                f"treasury_fee_authority must be 'admin' or 'creator': "
                f"{self.treasury_fee_authority}"
            )

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from environment variables.

        - AMM_ENGINE_DEFAULT_TREASURY_FEE_BPS (default: 10)
        - AMM_ENGINE_TREASURY_FEE_AUTHORITY: admin or creator (default: admin)
        - AMM_ENGINE_LOG_LEVEL (default: INFO)
        """
        return cls(
            default_treasury_fee_bps=int(
                os.environ.get("AMM_ENGINE_DEFAULT_TREASURY_FEE_BPS", str(DEFAULT_TREASURY_FEE_BPS))
            ),
            treasury_fee_authority=os.environ.get(  # type: ignore[arg-type]
                "AMM_ENGINE_TREASURY_FEE_AUTHORITY", "admin"
            ).lower(),
            log_level=os.environ.get("AMM_ENGINE_LOG_LEVEL", "INFO").upper(),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog for console output at the given level."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
