"""Shared fixtures for the forecast engine tests.

Provides:
- make_deal: keyword-only Deal factory with sensible open-deal defaults
- manufacturers / resellers: small reference-entity name sets
- Settings cache reset so env overrides in one test never leak into another
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from itertools import count

import pytest

from src.bizforecast.config import get_settings
from src.bizforecast.deals.schemas import Deal, DealStatus, Manufacturer, Reseller

_FIXED_NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)

DealFactory = Callable[..., Deal]


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Iterator[None]:
    """Clear the lru_cache around get_settings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_deal() -> DealFactory:
    """Factory building Deal snapshots; ids are sequential per test."""
    ids = count(1)

    def _make(
        *,
        deal_id: str | None = None,
        manufacturer_id: str = "m1",
        reseller_id: str = "r1",
        end_customer: str = "Acme Corp",
        bdm_id: str | None = None,
        sell_usd: float = 1000.0,
        margin_pct: float = 0.2,
        probability: float = 0.5,
        status: DealStatus = DealStatus.QUALIFIED,
        expected_close_month: str = "2025-06",
        notes: str | None = None,
    ) -> Deal:
        return Deal(
            id=deal_id or f"deal-{next(ids)}",
            manufacturer_id=manufacturer_id,
            reseller_id=reseller_id,
            end_customer=end_customer,
            bdm_id=bdm_id,
            sell_usd=sell_usd,
            margin_pct=margin_pct,
            probability=probability,
            status=status,
            expected_close_month=expected_close_month,
            notes=notes,
            created_at=_FIXED_NOW,
            updated_at=_FIXED_NOW,
        )

    return _make


@pytest.fixture
def manufacturers() -> list[Manufacturer]:
    return [
        Manufacturer(id="m1", name="Cisco"),
        Manufacturer(id="m2", name="Fortinet"),
        Manufacturer(id="m3", name="Aruba"),
    ]


@pytest.fixture
def resellers() -> list[Reseller]:
    return [
        Reseller(id="r1", name="NetWorks Ltd"),
        Reseller(id="r2", name="Channel One"),
    ]
