"""Unit tests for portfolio valuation."""
import pytest
from stake_tracker.core.stake import StakeRecord, FeeUnit
from stake_tracker.core.valuation import valuate, valuate_record

def make_stake(qty, asset_id, yield_rate, fee=0.0, **kwargs):
    return StakeRecord(
        platform=kwargs.pop("platform", "Test"),
        staked_token=kwargs.pop("staked_token", "TKN"),
        price_asset_id=asset_id,
        staked_quantity=qty,
        yield_rate=yield_rate,
        fee_paid=fee,
        **kwargs,
    )

def test_priced_single_stake():
    """1.5 ETH at 2000 with 3.5% yield."""
    valuation = valuate([make_stake(1.5, "ethereum", 3.5)], {"ethereum": 2000.0}, "eur")

    row = valuation.rows[0]
    assert row.current_price == 2000.0
    assert row.current_value == pytest.approx(3000.0)
    assert row.estimated_annual_earnings == pytest.approx(105.0)
    assert row.price_available

    summary = valuation.summary
    assert summary.total_value == pytest.approx(3000.0)
    assert summary.average_yield == pytest.approx(3.5)
    assert summary.total_estimated_annual_earnings == pytest.approx(105.0)
    assert f"{summary.total_value:.2f}" == "3000.00"
    assert f"{summary.average_yield:.2f}" == "3.50"

def test_missing_price_values_at_zero():
    """1000 USDC with a failed price fetch still counts toward fees and yield."""
    valuation = valuate([make_stake(1000, "usd-coin", 2.15, fee=0.10)], {}, "eur")

    row = valuation.rows[0]
    assert row.current_value == 0.0
    assert not row.price_available
    assert valuation.unpriced == [row]

    summary = valuation.summary
    assert summary.total_value == 0.0
    assert summary.net_value == pytest.approx(-0.10)
    assert summary.average_yield == pytest.approx(2.15)
    assert f"{summary.net_value:.2f}" == "-0.10"

def test_empty_portfolio():
    valuation = valuate([], {"ethereum": 2000.0}, "eur")
    summary = valuation.summary
    assert valuation.rows == []
    assert summary.record_count == 0
    assert summary.total_value == 0
    assert summary.total_fees == 0
    assert summary.average_yield == 0
    assert summary.net_value == 0

@pytest.mark.parametrize("prices", [
    {},
    {"ethereum": 2000.0},
    {"ethereum": 2000.0, "usd-coin": 1.0, "cosmos": 7.5},
])
def test_total_value_is_sum_of_priced_quantities(prices):
    records = [
        make_stake(1.5, "ethereum", 3.5),
        make_stake(1000, "usd-coin", 2.15),
        make_stake(20, "cosmos", 15.0),
        make_stake(3, "", 1.0),
    ]
    expected = sum(r.staked_quantity * prices.get(r.price_asset_id, 0) for r in records)
    assert valuate(records, prices, "eur").summary.total_value == pytest.approx(expected)

def test_net_value_may_go_negative():
    """Fees above value are not clamped."""
    records = [make_stake(1, "ethereum", 4.0, fee=50.0), make_stake(2, "dust", 1.0, fee=5.0)]
    summary = valuate(records, {"ethereum": 10.0, "dust": 0.5}, "eur").summary
    assert summary.total_value == pytest.approx(11.0)
    assert summary.total_fees == pytest.approx(55.0)
    assert summary.net_value == pytest.approx(-44.0)

def test_average_yield_is_unweighted():
    records = [make_stake(1, "ethereum", 3.0), make_stake(1000, "usd-coin", 5.0)]
    assert valuate(records, {}, "eur").summary.average_yield == pytest.approx(4.0)

def test_rows_keep_record_order(eth_stake, usdc_stake):
    valuation = valuate([usdc_stake, eth_stake], {"ethereum": 2000.0, "usd-coin": 0.9}, "eur")
    assert [row.record for row in valuation.rows] == [usdc_stake, eth_stake]

def test_valuation_is_repeatable(eth_stake, usdc_stake):
    """Same inputs, same figures."""
    records = [eth_stake, usdc_stake]
    prices = {"ethereum": 2345.67, "usd-coin": 0.93}
    first = valuate(records, prices, "eur")
    second = valuate(records, prices, "eur")
    assert first.summary == second.summary

def test_native_fee_is_converted_at_current_price():
    record = make_stake(2, "ethereum", 3.0, fee=0.01, fee_unit=FeeUnit.NATIVE)
    row = valuate_record(record, {"ethereum": 2000.0})
    assert row.fee_value == pytest.approx(20.0)

    unpriced = valuate_record(record, {})
    assert unpriced.fee_value == 0.0

def test_summary_currency():
    assert valuate([], {}, "usd").summary.currency == "usd"
