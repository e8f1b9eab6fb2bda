"""Pipeline summaries (by manufacturer / reseller / month / quarter) and period drill-down."""

from __future__ import annotations

import pytest

from src.bizforecast.deals.schemas import DealStatus
from src.bizforecast.forecast.pipeline import (
    drill_down_period,
    pipeline_category,
    summarize_pipeline_by_manufacturer,
    summarize_pipeline_by_month,
    summarize_pipeline_by_quarter,
    summarize_pipeline_by_reseller,
)
from src.bizforecast.forecast.schemas import ForecastCategory, PeriodType, ViewMode


class TestPipelineCategory:
    def test_won_counts_as_committed(self, make_deal) -> None:
        assert pipeline_category(make_deal(status=DealStatus.WON)) == ForecastCategory.COMMITTED

    def test_open_deal_uses_categorizer(self, make_deal) -> None:
        deal = make_deal(status=DealStatus.PROSPECT, probability=0.1)
        assert pipeline_category(deal) == ForecastCategory.WORST_CASE


class TestPipelineSummaries:
    def test_manufacturer_summary_figures(self, make_deal, manufacturers) -> None:
        deals = [
            make_deal(manufacturer_id="m1", sell_usd=1000.0, margin_pct=0.2, probability=0.95),
            make_deal(manufacturer_id="m1", sell_usd=2000.0, margin_pct=0.1, probability=0.75),
            make_deal(manufacturer_id="m1", sell_usd=4000.0, margin_pct=0.25, status=DealStatus.WON,
                      probability=1.0),
            make_deal(manufacturer_id="m1", sell_usd=9000.0, status=DealStatus.LOST),
        ]

        [row] = summarize_pipeline_by_manufacturer(deals, manufacturers)

        assert row.key == "m1"
        assert row.name == "Cisco"
        assert row.deal_count == 3
        assert row.total_value_usd == pytest.approx(7000.0)
        assert row.total_margin_usd == pytest.approx(1400.0)
        assert row.average_margin_pct == pytest.approx(0.2)
        # 200*0.95 committed + 1000 won; 200*0.75 best case
        assert row.committed_usd == pytest.approx(1190.0)
        assert row.best_case_usd == pytest.approx(150.0)
        assert row.worst_case_usd == 0.0
        assert row.weighted_margin_usd == pytest.approx(1340.0)

    def test_category_split_sums_to_weighted_margin(self, make_deal) -> None:
        deals = [
            make_deal(reseller_id="r1", probability=p, status=s)
            for p, s in [(0.2, DealStatus.PROSPECT), (0.85, DealStatus.VERBAL),
                         (0.4, DealStatus.PROPOSAL), (1.0, DealStatus.WON)]
        ]
        [row] = summarize_pipeline_by_reseller(deals)
        assert row.committed_usd + row.best_case_usd + row.worst_case_usd == pytest.approx(
            row.weighted_margin_usd
        )
        assert row.name == "Unknown"

    def test_ranked_by_weighted_margin(self, make_deal) -> None:
        deals = [
            make_deal(manufacturer_id="m1", probability=0.1),
            make_deal(manufacturer_id="m2", probability=0.9),
        ]
        rows = summarize_pipeline_by_manufacturer(deals)
        assert [r.key for r in rows] == ["m2", "m1"]

    def test_month_summary_ascending(self, make_deal) -> None:
        deals = [
            make_deal(expected_close_month="2025-09"),
            make_deal(expected_close_month="2025-02"),
            make_deal(expected_close_month="2025-09"),
        ]
        rows = summarize_pipeline_by_month(deals)
        assert [(r.key, r.name, r.deal_count) for r in rows] == [
            ("2025-02", "2025-02", 1),
            ("2025-09", "2025-09", 2),
        ]

    def test_only_lost_deals_yield_no_rows(self, make_deal) -> None:
        assert summarize_pipeline_by_month([make_deal(status=DealStatus.LOST)]) == []


class TestDrillDownPeriod:
    @pytest.fixture
    def deals(self, make_deal):
        return [
            make_deal(manufacturer_id="m1", sell_usd=1000.0, margin_pct=0.5, probability=0.5,
                      expected_close_month="2025-04"),
            make_deal(manufacturer_id="m2", sell_usd=3000.0, margin_pct=0.05, probability=0.5,
                      expected_close_month="2025-05"),
            make_deal(manufacturer_id="m2", sell_usd=500.0, margin_pct=0.2, probability=0.5,
                      expected_close_month="2025-05"),
            make_deal(manufacturer_id="m1", sell_usd=8000.0, status=DealStatus.WON,
                      expected_close_month="2025-05"),
            make_deal(manufacturer_id="m3", sell_usd=100.0, expected_close_month="2025-07"),
        ]

    def test_month_period_inferred(self, deals, manufacturers) -> None:
        result = drill_down_period(deals, "2025-05", manufacturers)

        assert result.period_type == PeriodType.MONTH
        assert result.deal_count == 2
        [m2] = result.manufacturers
        assert m2.manufacturer_name == "Fortinet"
        assert m2.weighted_value_usd == pytest.approx(1750.0)
        assert [d.sell_usd for d in m2.deals] == [3000.0, 500.0]

    def test_quarter_period_revenue_view(self, deals, manufacturers) -> None:
        result = drill_down_period(deals, "2025 Q2", manufacturers)

        assert result.period_type == PeriodType.QUARTER
        assert result.deal_count == 3
        assert [m.manufacturer_id for m in result.manufacturers] == ["m2", "m1"]
        assert result.weighted_revenue_usd == pytest.approx(2250.0)
        assert result.weighted_margin_usd == pytest.approx(375.0)
        assert result.average_margin_pct == pytest.approx(375.0 / 2250.0)

    def test_margin_view_reorders(self, deals) -> None:
        result = drill_down_period(deals, "2025 Q2", view_mode=ViewMode.MARGIN)
        # m1: 500*0.5=250 margin; m2: (150+100)*0.5=125
        assert [m.manufacturer_id for m in result.manufacturers] == ["m1", "m2"]

    def test_empty_period(self, deals) -> None:
        result = drill_down_period(deals, "2024-01")
        assert result.deal_count == 0
        assert result.manufacturers == ()
        assert result.average_margin_pct == 0.0


class TestQuarterlyPipelineSummary:
    @pytest.fixture
    def deals(self, make_deal):
        return [
            make_deal(sell_usd=1000.0, margin_pct=0.2, probability=0.95,
                      expected_close_month="2025-02"),
            make_deal(sell_usd=2000.0, margin_pct=0.1, probability=0.4,
                      status=DealStatus.PROPOSAL, expected_close_month="2025-03"),
            make_deal(sell_usd=500.0, margin_pct=0.2, probability=0.1,
                      expected_close_month="2025-05"),
            make_deal(sell_usd=9000.0, margin_pct=0.5, probability=1.0,
                      status=DealStatus.WON, expected_close_month="2025-01"),
            make_deal(sell_usd=7000.0, status=DealStatus.LOST, expected_close_month="2025-04"),
        ]

    def test_groups_open_deals_by_quarter(self, deals) -> None:
        rows = summarize_pipeline_by_quarter(deals)

        assert [(r.key, r.deal_count) for r in rows] == [("2025 Q1", 2), ("2025 Q2", 1)]
        q1 = rows[0]
        assert q1.total_value_usd == pytest.approx(3000.0)
        assert q1.total_margin_usd == pytest.approx(400.0)
        assert q1.weighted_revenue_usd == pytest.approx(950.0 + 800.0)
        assert q1.committed_usd == pytest.approx(190.0)
        assert q1.best_case_usd == pytest.approx(80.0)

    def test_won_deals_left_out_by_default(self, deals) -> None:
        total = sum(r.total_value_usd for r in summarize_pipeline_by_quarter(deals))
        assert total == pytest.approx(3500.0)

    def test_include_won_counts_them_as_committed(self, deals) -> None:
        q1 = summarize_pipeline_by_quarter(deals, include_won=True)[0]
        assert q1.deal_count == 3
        assert q1.committed_usd == pytest.approx(190.0 + 4500.0)

    def test_category_split_sums_to_weighted_margin(self, deals) -> None:
        for row in summarize_pipeline_by_quarter(deals):
            assert row.committed_usd + row.best_case_usd + row.worst_case_usd == pytest.approx(
                row.weighted_margin_usd
            )

    def test_monthly_summary_open_only(self, deals) -> None:
        rows = summarize_pipeline_by_month(deals, include_won=False)
        assert [r.key for r in rows] == ["2025-02", "2025-03", "2025-05"]

    def test_exported_from_forecast_package(self) -> None:
        from src.bizforecast import forecast

        assert forecast.summarize_pipeline_by_quarter is summarize_pipeline_by_quarter
        assert forecast.drill_down_period is drill_down_period
        assert "build_committed_matrix" in forecast.__all__


class TestConfiguredUnknownLabel:
    def test_summary_uses_settings_label(self, make_deal, monkeypatch) -> None:
        monkeypatch.setenv("BIZFORECAST_UNKNOWN_LABEL", "Unassigned")
        [row] = summarize_pipeline_by_manufacturer([make_deal(manufacturer_id="gone")])
        assert row.name == "Unassigned"

    def test_explicit_label_wins(self, make_deal, monkeypatch) -> None:
        monkeypatch.setenv("BIZFORECAST_UNKNOWN_LABEL", "Unassigned")
        [row] = summarize_pipeline_by_reseller([make_deal(reseller_id="gone")], unknown_label="-")
        assert row.name == "-"
