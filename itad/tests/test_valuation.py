from datetime import date
from decimal import Decimal

from itad.services import valuation


def test_round_half_up_rounds_point_five_away_from_zero():
    assert valuation.round_half_up(2.5) == 3
    assert valuation.round_half_up(3.5) == 4
    assert valuation.round_half_up(Decimal("0.5")) == 1
    assert valuation.round_half_up(2.49) == 2


def test_reuse_co2e_sums_category_factors():
    assets = [{"category_id": "laptop", "quantity": 2}, {"category_id": "monitor", "quantity": 3}]
    assert valuation.calculate_reuse_co2e(assets) == 1100.0


def test_buyback_estimate_uses_volume_factor_and_caps():
    assert valuation.calculate_buyback_estimate([{"category_id": "laptop", "quantity": 2}]) == 360.0
    # 10+ units earn the 3% volume uplift
    assert valuation.calculate_buyback_estimate([{"category_id": "laptop", "quantity": 10}]) == 1854.0
    # categories without a buyback baseline contribute nothing
    assert valuation.calculate_buyback_estimate([{"category_id": "monitor", "quantity": 5}]) == 0.0


def test_resale_value_applies_grade_multiplier():
    assert valuation.calculate_resale_value("laptop", "A") == 85
    assert valuation.calculate_resale_value("laptop", "C") == 34
    assert valuation.calculate_resale_value("monitor", "D", quantity=3) == 15
    assert valuation.calculate_resale_value("server", "C", quantity=2) == 200
    assert valuation.calculate_resale_value("laptop", "Recycled") == 0
    assert valuation.calculate_resale_value("unknown", "A") == 0


def test_commission_amount_is_ten_percent_half_up():
    assert valuation.calculate_commission_amount(1000) == 100
    assert valuation.calculate_commission_amount(1005) == 101  # 100.5
    assert valuation.calculate_commission_amount(0) == 0


def test_invoice_lines_spread_buyback_per_unit():
    assets = [{"category_id": "laptop", "quantity": 2}, {"category_id": "monitor", "quantity": 3}]
    lines = valuation.build_invoice_lines(assets, 500)

    assert [line.unit_price for line in lines] == [100, 100]
    assert [line.total for line in lines] == [200, 300]
    assert lines[0].description == "Laptop Collection & Processing (2 units)"
    assert lines[1].description == "Monitor Collection & Processing (3 units)"

    assert valuation.invoice_totals(lines) == {"subtotal": 500, "tax": 100, "total": 600}


def test_invoice_tax_rounds_half_up():
    lines = valuation.build_invoice_lines([{"category_id": "laptop", "quantity": 1}], 2.5)
    # unit price 3, tax 0.6 -> 1
    assert valuation.invoice_totals(lines) == {"subtotal": 3, "tax": 1, "total": 4}


def test_invoice_lines_empty_for_no_units():
    assert valuation.build_invoice_lines([], 500) == []


def test_invoice_due_date_is_thirty_days_out():
    assert valuation.invoice_due_date(date(2026, 1, 15)) == date(2026, 2, 14)
