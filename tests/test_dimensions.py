"""Manufacturer / reseller breakdowns: naming fallback and ranking."""

from __future__ import annotations

import pytest

from src.bizforecast.deals.schemas import DealStatus
from src.bizforecast.forecast.dimensions import (
    calculate_forecast_by_dimension,
    calculate_forecast_by_manufacturer,
    calculate_forecast_by_reseller,
)


class TestForecastByManufacturer:
    def test_ranked_by_weighted_margin_descending(self, make_deal, manufacturers) -> None:
        deals = [
            make_deal(manufacturer_id="m1", sell_usd=1000.0, probability=0.1),
            make_deal(manufacturer_id="m2", sell_usd=1000.0, probability=0.9),
            make_deal(manufacturer_id="m3", sell_usd=1000.0, probability=0.5),
        ]

        rows = calculate_forecast_by_manufacturer(deals, manufacturers)

        assert [r.category_name for r in rows] == ["Fortinet", "Aruba", "Cisco"]
        assert rows[0].weighted_margin_usd == pytest.approx(180.0)

    def test_ties_keep_first_seen_order(self, make_deal) -> None:
        deals = [
            make_deal(manufacturer_id="m3"),
            make_deal(manufacturer_id="m1"),
            make_deal(manufacturer_id="m2"),
        ]
        rows = calculate_forecast_by_manufacturer(deals)
        assert [r.category_id for r in rows] == ["m3", "m1", "m2"]

    def test_unknown_id_falls_back(self, make_deal, manufacturers) -> None:
        [row] = calculate_forecast_by_manufacturer([make_deal(manufacturer_id="gone")], manufacturers)
        assert row.category_id == "gone"
        assert row.category_name == "Unknown"

    def test_custom_unknown_label(self, make_deal) -> None:
        [row] = calculate_forecast_by_manufacturer(
            [make_deal(manufacturer_id="gone")], {}, unknown_label="(deleted)"
        )
        assert row.category_name == "(deleted)"

    def test_groups_and_counts(self, make_deal) -> None:
        deals = [
            make_deal(manufacturer_id="m1", sell_usd=1000.0, probability=0.5),
            make_deal(manufacturer_id="m1", sell_usd=3000.0, probability=0.5),
            make_deal(manufacturer_id="m1", status=DealStatus.WON),
        ]
        [row] = calculate_forecast_by_manufacturer(deals, {"m1": "Cisco"})
        assert row.deal_count == 2
        assert row.weighted_revenue_usd == pytest.approx(2000.0)


class TestForecastByReseller:
    def test_groups_by_reseller(self, make_deal, resellers) -> None:
        deals = [
            make_deal(reseller_id="r1", manufacturer_id="m1"),
            make_deal(reseller_id="r1", manufacturer_id="m2"),
            make_deal(reseller_id="r2", manufacturer_id="m1", probability=0.9),
        ]
        rows = calculate_forecast_by_reseller(deals, resellers)
        assert [(r.category_name, r.deal_count) for r in rows] == [
            ("NetWorks Ltd", 2),
            ("Channel One", 1),
        ]


class TestForecastByDimension:
    def test_arbitrary_key(self, make_deal) -> None:
        deals = [make_deal(bdm_id="b1"), make_deal(bdm_id=None)]
        rows = calculate_forecast_by_dimension(
            deals, lambda deal: deal.bdm_id or "unassigned", {"b1": "Dana"}
        )
        assert {r.category_name for r in rows} == {"Dana", "Unknown"}
