"""Stake records tracked by the ledger."""
import time
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

class YieldKind(str, Enum):
    """How the advertised reward rate is quoted."""
    APR = "APR"
    APY = "APY"

class FeeUnit(str, Enum):
    """Unit the paid fee is denominated in."""
    FIAT = "fiat"      # the configured fiat currency
    NATIVE = "native"  # units of the staked token

class StakeRecord(BaseModel):
    """Record of one staked position."""
    platform: str
    staked_token: str
    price_asset_id: str = ""
    staked_quantity: float
    derivative_token: Optional[str] = None
    fee_paid: float = 0.0
    fee_unit: FeeUnit = FeeUnit.FIAT
    yield_rate: float = 0.0
    yield_kind: YieldKind = YieldKind.APR
    lockup_status: str = ""
    withdrawal_terms: str = ""
    wallet_label: str = ""
    notes: str = ""
    created_at: float = Field(default_factory=time.time)

    def describe(self) -> str:
        """Short label used in prompts and log lines."""
        return f"{self.staked_token} on {self.platform}"
