"""Text rendering of valuations for the terminal."""
from datetime import datetime
from typing import List, Optional

from .stake import FeeUnit
from .valuation import Valuation, RecordValuation, PortfolioSummary

PRICE_SOURCE = "CoinGecko"
EMPTY_PLACEHOLDER = "No stakes recorded yet. Add one with 'stake-tracker add'."
RULE_WIDTH = 140

COLUMNS = [
    ("#", 4),
    ("Platform", 14),
    ("Staked", 20),
    ("Price", 13),
    ("Value", 16),
    ("LSD", 9),
    ("Fee", 14),
    ("Yield", 8),
    ("Type", 6),
    ("Lockup", 18),
    ("Wallet", 14),
    ("Notes", 0),
]

def _cells(position: int, row: RecordValuation, currency: str) -> List[str]:
    record = row.record
    code = currency.upper()
    price = f"{row.current_price:.2f}" + ("" if row.price_available else "?")
    if record.fee_unit == FeeUnit.NATIVE:
        fee = f"{record.fee_paid:.4f} {record.staked_token}"
    else:
        fee = f"{record.fee_paid:.2f} {code}"
    lockup = record.lockup_status or "-"
    if record.withdrawal_terms:
        lockup += f" ({record.withdrawal_terms})"
    return [
        str(position),
        record.platform,
        f"{record.staked_quantity:.4f} {record.staked_token}",
        price,
        f"{row.current_value:.2f} {code}",
        record.derivative_token or "N/A",
        fee,
        f"{record.yield_rate:.2f}%",
        record.yield_kind.value,
        lockup,
        record.wallet_label,
        record.notes,
    ]

def _line(cells: List[str]) -> str:
    """Join cells into fixed-width columns, cutting long cells so one space always separates them."""
    parts = []
    for (_, width), cell in zip(COLUMNS, cells):
        parts.append(f"{cell[:width - 1]:<{width}}" if width else cell)
    return "".join(parts).rstrip()

def format_table(valuation: Valuation) -> List[str]:
    """Table lines, one row per stake; positions are 1-based."""
    lines = [_line([name for name, _ in COLUMNS]), "-" * RULE_WIDTH]
    if not valuation.rows:
        lines.append(EMPTY_PLACEHOLDER)
        return lines

    currency = valuation.summary.currency
    for position, row in enumerate(valuation.rows, 1):
        lines.append(_line(_cells(position, row, currency)))

    unpriced = valuation.unpriced
    if unpriced:
        ids = sorted({row.record.price_asset_id or "<empty id>" for row in unpriced})
        lines.append("")
        lines.append(f"? No price available for: {', '.join(ids)} (valued at 0)")
    return lines

def format_summary(summary: PortfolioSummary, refreshed_at: Optional[datetime] = None) -> List[str]:
    """Summary panel lines, all figures to two decimals."""
    code = summary.currency.upper()
    lines = [
        "Portfolio Summary:",
        "-" * RULE_WIDTH,
        f"Stakes: {summary.record_count}",
        f"Total Value: {summary.total_value:.2f} {code}",
        f"Total Fees: {summary.total_fees:.2f} {code}",
        f"Net Value: {summary.net_value:.2f} {code}",
        f"Average Yield: {summary.average_yield:.2f}%",
        f"Estimated Annual Earnings: {summary.total_estimated_annual_earnings:.2f} {code}",
    ]
    if refreshed_at is not None:
        lines.append(f"Last price update: {refreshed_at.strftime('%H:%M:%S')} (source: {PRICE_SOURCE})")
    return lines

def render(valuation: Valuation, refreshed_at: Optional[datetime] = None) -> str:
    """Full view: table, blank line, summary."""
    return "\n".join(format_table(valuation) + [""] + format_summary(valuation.summary, refreshed_at))
