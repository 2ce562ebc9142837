"""
Pytest configuration and shared fixtures for all tests
Record builders and a few canned data sets
"""

from datetime import date, timedelta

import pytest

from food_insights.config.business_config import BusinessConfig
from food_insights.data.records import (
    DailySalesRecord, ProductionRecord, PurchaseRecord,
)


def iso_days(start: str, count: int):
    first = date.fromisoformat(start)
    return [(first + timedelta(days=i)).isoformat() for i in range(count)]


# ===== CONFIG =====

@pytest.fixture
def config():
    """Default business configuration."""
    return BusinessConfig()


@pytest.fixture
def flat_lead_time_config():
    """Lead time 5 days with no lead-time variability."""
    return BusinessConfig(default_lead_time=5, lead_time_std_dev=0)


# ===== RECORD BUILDERS =====

@pytest.fixture
def make_purchase():
    def _make(date, code, qty, price, name=None):
        return PurchaseRecord(
            date=date,
            product_code=code,
            product_name=name or code,
            quantity=qty,
            unit_price=price,
            total=qty * price,
        )
    return _make


@pytest.fixture
def make_daily_purchases(make_purchase):
    """Same quantity and price every day for `days` days."""
    def _make(code, qty, days, price=1000.0, start='2024-01-01', name=None):
        return [make_purchase(d, code, qty, price, name) for d in iso_days(start, days)]
    return _make


@pytest.fixture
def make_production():
    def _make(date, total_qty, waste_qty=0.0, waste_pct=0.0, **categories):
        return ProductionRecord(
            date=date,
            total_qty=total_qty,
            waste_finished_qty=waste_qty,
            waste_finished_pct=waste_pct,
            **categories,
        )
    return _make


@pytest.fixture
def make_sales():
    def _make(date, jasa=0.0, coupang=0.0, kurly=0.0):
        return DailySalesRecord(
            date=date,
            jasa_revenue=jasa,
            coupang_revenue=coupang,
            kurly_revenue=kurly,
            total_revenue=jasa + coupang + kurly,
        )
    return _make


# ===== CANNED DATA =====

@pytest.fixture
def constant_purchases(make_daily_purchases):
    """100 units/day of one material for 30 days at 1,000 KRW."""
    return make_daily_purchases('ZIP_M_ONION', 100, 30, price=1000.0, name='양파')


@pytest.fixture
def month_of_sales(make_sales):
    """30 days of channel revenue (2024-01-01 .. 2024-01-30)."""
    return [
        make_sales(d, jasa=100000, coupang=200000, kurly=50000)
        for d in iso_days('2024-01-01', 30)
    ]
