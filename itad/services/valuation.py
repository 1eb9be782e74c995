"""
Pure valuation helpers: asset catalogue, CO2e and buyback estimates, grading
resale values, commission amounts and invoice lines.

No database access here. Every rounding step uses half-up rounding so that
amounts agree with what clients have been quoted (Python's round() is
banker's rounding and would disagree on .5 values).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

DEFAULT_COMMISSION_PERCENT = 10
VAT_RATE = Decimal("0.20")
INVOICE_DUE_DAYS = 30


@dataclass(frozen=True)
class AssetCategory:
    id: str
    name: str
    co2e_per_unit: float  # kg CO2e saved per reused unit
    avg_weight: float  # kg


ASSET_CATEGORIES: Dict[str, AssetCategory] = {
    c.id: c
    for c in (
        AssetCategory("laptop", "Laptop", 250.0, 2.2),
        AssetCategory("desktop", "Desktop", 400.0, 8.0),
        AssetCategory("monitor", "Monitor", 200.0, 5.5),
        AssetCategory("server", "Server", 1200.0, 25.0),
        AssetCategory("phone", "Smart Phones", 60.0, 0.2),
        AssetCategory("tablet", "Tablets", 100.0, 0.5),
        AssetCategory("printer", "Printer", 150.0, 12.0),
        AssetCategory("network", "Networking", 300.0, 3.0),
        AssetCategory("storage", "Storage", 500.0, 15.0),
    )
}

# Conservative buyback baseline: 3-year-old kit, grade B, bulk volumes.
_CATEGORY_AVG_RRP = {
    "Networking": 2000,
    "Laptop": 1000,
    "Server": 5000,
    "Smart Phones": 700,
    "Desktop": 900,
    "Storage": 6000,
    "Tablets": 600,
}

_CATEGORY_RESIDUAL_LOW = {
    "Networking": 0.15,
    "Laptop": 0.18,
    "Server": 0.08,
    "Smart Phones": 0.17,
    "Desktop": 0.09,
    "Storage": 0.05,
    "Tablets": 0.17,
}

_CATEGORY_FLOOR = {
    "Networking": 30,
    "Laptop": 30,
    "Server": 50,
    "Smart Phones": 10,
    "Desktop": 10,
    "Storage": 50,
    "Tablets": 15,
}

_CATEGORY_CAP = {
    "Networking": 2000,
    "Laptop": 600,
    "Server": 2500,
    "Smart Phones": 450,
    "Desktop": 250,
    "Storage": 3000,
    "Tablets": 400,
}

GRADE_MULTIPLIERS = {
    "A": 1.0,
    "B": 0.7,
    "C": 0.4,
    "D": 0.2,
    "Recycled": 0.0,
}

BASE_RESALE_VALUES = {
    "laptop": 85,
    "desktop": 45,
    "monitor": 25,
    "server": 250,
    "phone": 40,
    "tablet": 55,
    "printer": 15,
    "network": 35,
}


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def get_category(category_id: str) -> Optional[AssetCategory]:
    return ASSET_CATEGORIES.get(category_id)


def _volume_factor(quantity: int) -> float:
    if quantity >= 200:
        return 1.10
    if quantity >= 50:
        return 1.06
    if quantity >= 10:
        return 1.03
    return 1.00


def buyback_per_unit(category_name: str, quantity: int) -> float:
    rrp = _CATEGORY_AVG_RRP.get(category_name, 0)
    residual = _CATEGORY_RESIDUAL_LOW.get(category_name, 0)
    if not rrp or not residual:
        return 0.0

    raw = rrp * residual * _volume_factor(quantity)
    floor = _CATEGORY_FLOOR.get(category_name, 0)
    cap = _CATEGORY_CAP.get(category_name, float("inf"))
    return max(floor, min(cap, raw))


def calculate_reuse_co2e(assets: Iterable) -> float:
    """Sum of kg CO2e saved across ``(category_id, quantity)`` line items."""
    total = 0.0
    for category_id, quantity in _lines(assets):
        category = get_category(category_id)
        if category is not None:
            total += category.co2e_per_unit * quantity
    return total


def calculate_buyback_estimate(assets: Iterable) -> float:
    total = 0.0
    for category_id, quantity in _lines(assets):
        category = get_category(category_id)
        if category is None:
            continue
        total += buyback_per_unit(category.name, quantity) * quantity
    return round(total, 2)


def calculate_resale_value(category: str, grade: str, quantity: int = 1) -> int:
    base_value = BASE_RESALE_VALUES.get(category, 0)
    multiplier = GRADE_MULTIPLIERS.get(grade, 0)
    return round_half_up(base_value * multiplier * quantity)


def calculate_commission_amount(job_value, percent=DEFAULT_COMMISSION_PERCENT) -> int:
    return round_half_up(Decimal(str(job_value)) * Decimal(str(percent)) / Decimal(100))


@dataclass(frozen=True)
class InvoiceLine:
    category_id: str
    description: str
    quantity: int
    unit_price: int
    total: int


def build_invoice_lines(assets: Sequence, estimated_buyback) -> List[InvoiceLine]:
    """One line per booking asset; the buyback is spread evenly per unit."""
    lines = list(_lines(assets))
    total_quantity = sum(q for _, q in lines)
    if total_quantity <= 0:
        return []

    unit_price = round_half_up(Decimal(str(estimated_buyback)) / Decimal(total_quantity))

    result = []
    for category_id, quantity in lines:
        category = get_category(category_id)
        name = category.name if category is not None else category_id
        result.append(
            InvoiceLine(
                category_id=category_id,
                description=f"{name} Collection & Processing ({quantity} units)",
                quantity=quantity,
                unit_price=unit_price,
                total=unit_price * quantity,
            )
        )
    return result


def invoice_totals(lines: Iterable[InvoiceLine]) -> Dict[str, int]:
    subtotal = sum(line.total for line in lines)
    tax = round_half_up(Decimal(subtotal) * VAT_RATE)
    return {"subtotal": subtotal, "tax": tax, "total": subtotal + tax}


def invoice_due_date(issue_date: date) -> date:
    return issue_date + timedelta(days=INVOICE_DUE_DAYS)


def _lines(assets: Iterable):
    # accepts ORM line items or plain dicts
    for asset in assets:
        if isinstance(asset, dict):
            yield str(asset["category_id"]), int(asset["quantity"])
        else:
            yield str(asset.category_id), int(asset.quantity)
