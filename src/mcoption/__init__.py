"""mcoption package public API."""

from .analytical import black_scholes_price
from .config import EngineConfig
from .core import (
    AggregationError,
    OptionKind,
    PartialStatistics,
    PricingResult,
    SimulationParameters,
    TrialRange,
    ValidationError,
)
from .engine import EuropeanOptionEngine, simulate
from .stats_engine import aggregate, combine
from .utils import z_crit

__all__ = [
    "SimulationParameters",
    "OptionKind",
    "TrialRange",
    "PartialStatistics",
    "PricingResult",
    "ValidationError",
    "AggregationError",
    "EngineConfig",
    "EuropeanOptionEngine",
    "simulate",
    "aggregate",
    "combine",
    "black_scholes_price",
    "z_crit",
]

__version__ = "0.1.0"
