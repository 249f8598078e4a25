"""Core ledger, pricing and valuation for Stake Tracker."""
from .config import TrackerConfig, load_config, configure_logging, get_config_dir
from .forms import StakeValidationError, build_record
from .prices import PriceResolver
from .stake import StakeRecord, YieldKind, FeeUnit
from .store import RecordStore
from .tracker import AppState, StakeTracker
from .valuation import Valuation, RecordValuation, PortfolioSummary, valuate

__all__ = [
    "TrackerConfig",
    "load_config",
    "configure_logging",
    "get_config_dir",
    "StakeValidationError",
    "build_record",
    "PriceResolver",
    "StakeRecord",
    "YieldKind",
    "FeeUnit",
    "RecordStore",
    "AppState",
    "StakeTracker",
    "Valuation",
    "RecordValuation",
    "PortfolioSummary",
    "valuate",
]
