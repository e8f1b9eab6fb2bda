"""Pydantic output records for the forecast engine.

Every aggregation returns new, frozen instances of these models; none of
them hold references back into mutable caller state. Deal lists carried by
drill-down records are tuples of (frozen) Deal snapshots.

Groups:
- KPIs: KPIData, StatusCounts
- Time buckets: PeriodForecast
- Dimensions: DimensionForecast, PipelineSummaryRow
- Categories: ForecastCategory, ForecastCategorization, CategorizedForecast
- Matrix pivot: MatrixCell, MatrixRow, ManufacturerMonthMatrix
- Drill-down: ViewMode, ManufacturerBreakdown, PeriodDrillDown
- Composition: ForecastDashboard
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.bizforecast.deals.schemas import Deal


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── KPIs ────────────────────────────────────────────────────────────────────


class KPIData(_FrozenModel):
    """Headline totals for a deal collection.

    Attributes:
        total_revenue: Sum of sell_usd over won deals.
        total_cost: Sum of cost over won deals.
        gross_margin_usd: total_revenue - total_cost.
        gross_margin_pct: gross_margin_usd / total_revenue (0 when no revenue).
        weighted_margin_usd: Probability-weighted margin of open deals.
        weighted_revenue_usd: Probability-weighted revenue of open deals.
        best_case_revenue_usd: Won revenue plus the full value of open deals.
        best_case_margin_usd: Won margin plus the full margin of open deals.
        total_pipeline_value: Sum of sell_usd over open deals.
        total_pipeline_margin: Sum of margin_usd over open deals.
    """

    total_revenue: float = 0.0
    total_cost: float = 0.0
    gross_margin_usd: float = 0.0
    gross_margin_pct: float = 0.0
    weighted_margin_usd: float = 0.0
    weighted_revenue_usd: float = 0.0
    best_case_revenue_usd: float = 0.0
    best_case_margin_usd: float = 0.0
    total_pipeline_value: float = 0.0
    total_pipeline_margin: float = 0.0


class StatusCounts(_FrozenModel):
    """Number of won, open, and lost deals in a collection."""

    won: int = Field(default=0, ge=0)
    open: int = Field(default=0, ge=0)
    lost: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.won + self.open + self.lost


# ── Time Buckets ────────────────────────────────────────────────────────────


class PeriodForecast(_FrozenModel):
    """Weighted totals for one month (``YYYY-MM``) or quarter (``YYYY Qn``)."""

    period: str
    weighted_revenue_usd: float = 0.0
    weighted_margin_usd: float = 0.0
    deal_count: int = Field(default=0, ge=0)


# ── Dimensions ──────────────────────────────────────────────────────────────


class DimensionForecast(_FrozenModel):
    """Weighted totals for one manufacturer or reseller."""

    category_id: str
    category_name: str
    weighted_revenue_usd: float = 0.0
    weighted_margin_usd: float = 0.0
    deal_count: int = Field(default=0, ge=0)


class PipelineSummaryRow(_FrozenModel):
    """Full and weighted pipeline figures for one key, split by forecast category.

    ``key`` is a manufacturer/reseller id or a ``YYYY-MM`` month; ``name`` is
    the resolved display name (the month itself for monthly summaries).
    The committed/best-case/worst-case fields hold weighted margin.
    """

    key: str
    name: str
    deal_count: int = Field(default=0, ge=0)
    total_value_usd: float = 0.0
    total_margin_usd: float = 0.0
    weighted_margin_usd: float = 0.0
    weighted_revenue_usd: float = 0.0
    average_margin_pct: float = 0.0
    committed_usd: float = 0.0
    best_case_usd: float = 0.0
    worst_case_usd: float = 0.0


# ── Categories ──────────────────────────────────────────────────────────────


class ForecastCategory(str, Enum):
    """Forecast bucket for an open deal. Declaration order is display order."""

    COMMITTED = "committed"
    BEST_CASE = "best-case"
    WORST_CASE = "worst-case"


class ForecastCategorization(_FrozenModel):
    """Display metadata for a forecast category."""

    category: ForecastCategory
    label: str


class CategorizedForecast(_FrozenModel):
    """Weighted totals and member deals for one forecast category."""

    category: ForecastCategory
    label: str
    weighted_revenue_usd: float = 0.0
    weighted_margin_usd: float = 0.0
    deal_count: int = Field(default=0, ge=0)
    deals: tuple[Deal, ...] = ()


# ── Matrix Pivot ────────────────────────────────────────────────────────────


class MatrixCell(_FrozenModel):
    """Aggregated contribution of the deals in one (manufacturer, month) cell."""

    deal_count: int = Field(default=0, ge=0)
    revenue_usd: float = 0.0
    margin_usd: float = 0.0
    margin_pct: float = 0.0


class MatrixRow(_FrozenModel):
    """One manufacturer row of the matrix.

    ``cells`` holds an entry for every month of the matrix, empty months
    included (zero cell). ``share_of_total`` is the row's revenue contribution
    as a fraction of the grand total (0 when the grand total is 0).
    """

    manufacturer_id: str
    manufacturer_name: str
    cells: dict[str, MatrixCell]
    total: MatrixCell
    share_of_total: float = 0.0


class ManufacturerMonthMatrix(_FrozenModel):
    """Manufacturer x month pivot with row, column, and grand totals.

    Rows are ordered by descending total revenue contribution; ``months`` is
    ascending.
    """

    months: tuple[str, ...] = ()
    rows: tuple[MatrixRow, ...] = ()
    month_totals: dict[str, MatrixCell] = Field(default_factory=dict)
    grand_total: MatrixCell = Field(default_factory=MatrixCell)


# ── Drill-down ──────────────────────────────────────────────────────────────


class ViewMode(str, Enum):
    """Which weighted figure a presentation ranks by."""

    REVENUE = "revenue"
    MARGIN = "margin"


class PeriodType(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"


class ManufacturerBreakdown(_FrozenModel):
    """Open deals of one manufacturer within a drill-down period."""

    manufacturer_id: str
    manufacturer_name: str
    deal_count: int = Field(default=0, ge=0)
    total_value_usd: float = 0.0
    total_margin_usd: float = 0.0
    weighted_value_usd: float = 0.0
    weighted_margin_usd: float = 0.0
    deals: tuple[Deal, ...] = ()


class PeriodDrillDown(_FrozenModel):
    """Open deals closing in one month or quarter, broken down by manufacturer."""

    period: str
    period_type: PeriodType
    view_mode: ViewMode
    deal_count: int = Field(default=0, ge=0)
    weighted_revenue_usd: float = 0.0
    weighted_margin_usd: float = 0.0
    average_margin_pct: float = 0.0
    manufacturers: tuple[ManufacturerBreakdown, ...] = ()


# ── Composition ─────────────────────────────────────────────────────────────


class ForecastDashboard(_FrozenModel):
    """Every dashboard aggregate computed over one (optionally filtered) snapshot."""

    as_of_month: str | None = None
    kpis: KPIData
    status_counts: StatusCounts
    monthly: tuple[PeriodForecast, ...] = ()
    quarterly: tuple[PeriodForecast, ...] = ()
    by_manufacturer: tuple[DimensionForecast, ...] = ()
    by_reseller: tuple[DimensionForecast, ...] = ()
    categorized: tuple[CategorizedForecast, ...] = ()


__all__ = [
    "CategorizedForecast",
    "DimensionForecast",
    "ForecastCategorization",
    "ForecastCategory",
    "ForecastDashboard",
    "KPIData",
    "ManufacturerBreakdown",
    "ManufacturerMonthMatrix",
    "MatrixCell",
    "MatrixRow",
    "PeriodDrillDown",
    "PeriodForecast",
    "PeriodType",
    "PipelineSummaryRow",
    "StatusCounts",
    "ViewMode",
]
