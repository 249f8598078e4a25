"""Refresh pipeline and ledger actions for Stake Tracker."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional
from loguru import logger

from .config import TrackerConfig
from .forms import build_record
from .prices import PriceResolver
from .render import render
from .stake import StakeRecord
from .store import RecordStore
from .valuation import Valuation, valuate

Confirm = Callable[[str], bool]

@dataclass
class AppState:
    """Everything the tracker knows between refreshes."""
    currency: str
    records: List[StakeRecord] = field(default_factory=list)
    prices: Dict[str, float] = field(default_factory=dict)
    valuation: Optional[Valuation] = None
    refreshed_at: Optional[datetime] = None
    view: str = ""

class StakeTracker:
    """Ties the store, price resolver, valuation and rendering together."""

    def __init__(self,
                 store: RecordStore,
                 resolver: PriceResolver,
                 currency: str = "eur",
                 clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.resolver = resolver
        self.clock = clock
        self.state = AppState(currency=currency.lower())

    @classmethod
    def from_config(cls, config: TrackerConfig) -> "StakeTracker":
        """Build a tracker wired to the configured store and price source."""
        store = RecordStore(config.store_path)
        resolver = PriceResolver(
            currency=config.currency,
            base_url=config.api_base_url,
            api_key=config.api_key,
            timeout=config.request_timeout,
        )
        return cls(store, resolver, currency=config.currency)

    async def refresh(self) -> str:
        """Reload stakes, re-fetch every price, revalue and re-render.

        Returns:
            The rendered table and summary
        """
        state = self.state
        state.records = self.store.load()
        state.prices = await self.resolver.fetch_prices(r.price_asset_id for r in state.records)
        state.valuation = valuate(state.records, state.prices, state.currency)
        state.refreshed_at = self.clock()
        state.view = render(state.valuation, state.refreshed_at)
        return state.view

    async def add_stake(self, form: Mapping[str, Any]) -> str:
        """Admit a submitted stake, persist it and refresh.

        Raises:
            StakeValidationError: If the submission is rejected; nothing is stored
        """
        record = build_record(form)
        self.store.load()
        self.store.append(record)
        logger.info(f"Added stake {record.describe()}")
        return await self.refresh()

    async def delete_stake(self, index: int, confirm: Confirm) -> Optional[str]:
        """Delete the stake at 0-based `index` after confirmation.

        Returns:
            The refreshed view, or None if the user declined

        Raises:
            IndexError: If there is no stake at `index`
        """
        records = self.store.load()
        if not 0 <= index < len(records):
            raise IndexError(f"No stake at position {index + 1}")
        record = records[index]
        if not confirm(f"Delete the {record.describe()} stake?"):
            logger.debug("Delete cancelled")
            return None
        self.store.remove(index)
        logger.info(f"Deleted stake {record.describe()}")
        return await self.refresh()

    async def clear_all(self, confirm: Confirm) -> Optional[str]:
        """Erase every stake after confirmation.

        Returns:
            The refreshed (empty) view, or None if the user declined
        """
        if not confirm("Delete ALL stakes? This cannot be undone."):
            logger.debug("Clear cancelled")
            return None
        self.store.clear()
        return await self.refresh()
