"""Portfolio valuation for Stake Tracker."""
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .stake import StakeRecord, FeeUnit

@dataclass
class RecordValuation:
    """Valuation of a single stake at the current prices."""
    record: StakeRecord
    current_price: float
    current_value: float
    estimated_annual_earnings: float
    fee_value: float
    price_available: bool

@dataclass
class PortfolioSummary:
    """Aggregate figures over the whole stake list."""
    currency: str
    record_count: int = 0
    total_value: float = 0.0
    total_fees: float = 0.0
    net_value: float = 0.0
    average_yield: float = 0.0
    total_estimated_annual_earnings: float = 0.0

@dataclass
class Valuation:
    """Per-record rows plus the portfolio summary."""
    summary: PortfolioSummary
    rows: List[RecordValuation] = field(default_factory=list)

    @property
    def unpriced(self) -> List[RecordValuation]:
        return [row for row in self.rows if not row.price_available]

def valuate_record(record: StakeRecord, prices: Dict[str, float]) -> RecordValuation:
    """Value one record; an unknown asset id counts as price 0."""
    price_available = record.price_asset_id in prices
    current_price = prices.get(record.price_asset_id, 0.0)
    current_value = record.staked_quantity * current_price
    if record.fee_unit == FeeUnit.NATIVE:
        fee_value = record.fee_paid * current_price
    else:
        fee_value = record.fee_paid
    return RecordValuation(
        record=record,
        current_price=current_price,
        current_value=current_value,
        estimated_annual_earnings=current_value * (record.yield_rate / 100),
        fee_value=fee_value,
        price_available=price_available,
    )

def valuate(records: Sequence[StakeRecord], prices: Dict[str, float], currency: str) -> Valuation:
    """Compute per-record valuations and the portfolio summary.

    Pure function of its inputs. Missing prices degrade the affected rows to
    zero value instead of dropping them.

    Args:
        records: Stake list in display order
        prices: Asset id to fiat price
        currency: Fiat currency the prices and fiat fees are quoted in

    Returns:
        Rows in the same order as `records`, and the summary
    """
    rows = [valuate_record(record, prices) for record in records]

    summary = PortfolioSummary(currency=currency, record_count=len(rows))
    total_yield = 0.0
    for row in rows:
        summary.total_value += row.current_value
        summary.total_fees += row.fee_value
        summary.total_estimated_annual_earnings += row.estimated_annual_earnings
        total_yield += row.record.yield_rate

    summary.net_value = summary.total_value - summary.total_fees
    summary.average_yield = total_yield / len(rows) if rows else 0.0
    return Valuation(summary=summary, rows=rows)
