"""Admission of user-entered stakes."""
import math
import re
from typing import Any, Dict, Mapping, Optional
from loguru import logger

from .stake import StakeRecord, YieldKind, FeeUnit

REQUIRED_TEXT_FIELDS = ("platform", "staked_token", "price_asset_id")

class StakeValidationError(ValueError):
    """Raised when a submitted stake fails admission checks."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{name}: {msg}" for name, msg in errors.items()))

def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""

def _optional_text(value: Any) -> Optional[str]:
    text = _text(value)
    return text or None

def normalize_asset_id(value: Any) -> str:
    """Lower-case an asset id and drop any whitespace inside it."""
    return re.sub(r"\s+", "", _text(value)).lower()

def parse_number(value: Any) -> float:
    """Parse a user-entered number, accepting a decimal comma.

    Raises:
        ValueError: If the value is empty or not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _text(value).replace(",", ".")
        if not text:
            raise ValueError("a number is required")
        number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number

def _parse_enum(enum_cls, value: Any, default, errors: Dict[str, str], name: str):
    text = _text(value)
    if not text:
        return default
    for member in enum_cls:
        if text.lower() == member.value.lower():
            return member
    allowed = ", ".join(member.value for member in enum_cls)
    errors[name] = f"must be one of {allowed}"
    return default

def build_record(form: Mapping[str, Any]) -> StakeRecord:
    """Turn a form submission into a stake record ready for the store.

    Strings are trimmed, tickers upper-cased and the asset id normalized.
    Quantity must be positive; yield and fee must not be negative.

    Args:
        form: Field name to raw user input

    Returns:
        The admitted record

    Raises:
        StakeValidationError: With one message per offending field
    """
    errors: Dict[str, str] = {}

    platform = _text(form.get("platform"))
    staked_token = _text(form.get("staked_token")).upper()
    price_asset_id = normalize_asset_id(form.get("price_asset_id"))
    for name, value in zip(REQUIRED_TEXT_FIELDS, (platform, staked_token, price_asset_id)):
        if not value:
            errors[name] = "is required"
    # ids are joined with commas in the price request
    if "," in price_asset_id:
        errors["price_asset_id"] = "must be a single CoinGecko id"

    numbers: Dict[str, float] = {}
    for name, default in (("staked_quantity", None), ("yield_rate", None), ("fee_paid", 0.0)):
        raw = form.get(name)
        if default is not None and _text(raw) == "":
            numbers[name] = default
            continue
        try:
            numbers[name] = parse_number(raw)
        except ValueError:
            errors[name] = "must be a number"

    if "staked_quantity" in numbers and numbers["staked_quantity"] <= 0:
        errors["staked_quantity"] = "must be greater than 0"
    if "yield_rate" in numbers and numbers["yield_rate"] < 0:
        errors["yield_rate"] = "must not be negative"
    if "fee_paid" in numbers and numbers["fee_paid"] < 0:
        errors["fee_paid"] = "must not be negative"

    yield_kind = _parse_enum(YieldKind, form.get("yield_kind"), YieldKind.APR, errors, "yield_kind")
    fee_unit = _parse_enum(FeeUnit, form.get("fee_unit"), FeeUnit.FIAT, errors, "fee_unit")

    if errors:
        logger.debug(f"Rejected stake submission: {errors}")
        raise StakeValidationError(errors)

    return StakeRecord(
        platform=platform,
        staked_token=staked_token,
        price_asset_id=price_asset_id,
        staked_quantity=numbers["staked_quantity"],
        derivative_token=_optional_text(form.get("derivative_token")),
        fee_paid=numbers["fee_paid"],
        fee_unit=fee_unit,
        yield_rate=numbers["yield_rate"],
        yield_kind=yield_kind,
        lockup_status=_text(form.get("lockup_status")),
        withdrawal_terms=_text(form.get("withdrawal_terms")),
        wallet_label=_text(form.get("wallet_label")),
        notes=_text(form.get("notes")),
    )
