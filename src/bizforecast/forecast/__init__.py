"""Forecast engine -- categorization, KPIs, and every pipeline aggregation.

Pure, synchronous functions over an in-memory snapshot of Deal records.
Nothing here performs I/O, reads the clock, or mutates its inputs; each call
returns new frozen records from src.bizforecast.forecast.schemas.

Exports:
    categorize_deal: Classify an open deal as committed / best-case / worst-case.
    calculate_kpis: Actual, weighted pipeline, and best-case totals.
    calculate_monthly_forecast / calculate_quarterly_forecast: Time buckets.
    calculate_forecast_by_manufacturer / calculate_forecast_by_reseller:
        Ranked dimensional breakdowns.
    calculate_categorized_forecast: Fixed-order category rows.
    build_manufacturer_month_matrix: Manufacturer x month pivot.
    build_forecast_matrix / build_committed_matrix / build_pipeline_matrix:
        The three export flavours of the pivot.
    summarize_pipeline_by_manufacturer / summarize_pipeline_by_reseller /
    summarize_pipeline_by_month / summarize_pipeline_by_quarter:
        Full and weighted figures split by forecast category.
    drill_down_period: Per-manufacturer breakdown of one month or quarter.
    build_dashboard: All dashboard aggregates in one record.
"""

from __future__ import annotations

from src.bizforecast.forecast.categorization import categorize_deal
from src.bizforecast.forecast.categorized import calculate_categorized_forecast
from src.bizforecast.forecast.dashboard import build_dashboard
from src.bizforecast.forecast.dimensions import (
    calculate_forecast_by_manufacturer,
    calculate_forecast_by_reseller,
)
from src.bizforecast.forecast.kpi import calculate_kpis
from src.bizforecast.forecast.matrix import (
    build_committed_matrix,
    build_forecast_matrix,
    build_manufacturer_month_matrix,
    build_pipeline_matrix,
)
from src.bizforecast.forecast.pipeline import (
    drill_down_period,
    summarize_pipeline_by_manufacturer,
    summarize_pipeline_by_month,
    summarize_pipeline_by_quarter,
    summarize_pipeline_by_reseller,
)
from src.bizforecast.forecast.timeline import (
    calculate_monthly_forecast,
    calculate_quarterly_forecast,
)

__all__ = [
    "build_committed_matrix",
    "build_dashboard",
    "build_forecast_matrix",
    "build_manufacturer_month_matrix",
    "build_pipeline_matrix",
    "calculate_categorized_forecast",
    "calculate_forecast_by_manufacturer",
    "calculate_forecast_by_reseller",
    "calculate_kpis",
    "calculate_monthly_forecast",
    "calculate_quarterly_forecast",
    "categorize_deal",
    "drill_down_period",
    "summarize_pipeline_by_manufacturer",
    "summarize_pipeline_by_month",
    "summarize_pipeline_by_quarter",
    "summarize_pipeline_by_reseller",
]
