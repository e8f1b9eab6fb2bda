"""Pipeline summaries and period drill-down.

Summaries carry both full and weighted figures and split weighted margin by
forecast category. By default they cover every non-lost deal (open and won,
as in the CSV exports); the quarterly summary, like the forecast report,
covers open deals only. Won deals have no forecast category of their own
and are counted as committed.

The drill-down looks at open deals closing in one month or quarter and
breaks them down by manufacturer, ranked by the figure the caller's view
mode selects.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from src.bizforecast.deals.lookup import as_lookup
from src.bizforecast.deals.periods import is_valid_month
from src.bizforecast.deals.schemas import Deal, DealStatus, non_lost_deals, open_deals
from src.bizforecast.deals.valuation import (
    deal_weighted_margin,
    deal_weighted_revenue,
    margin_ratio,
)
from src.bizforecast.forecast.accumulators import PipelineTotals, WeightedTotals
from src.bizforecast.forecast.categorization import CATEGORY_ORDER, categorize_deal
from src.bizforecast.forecast.dimensions import NameSource, resolve_name
from src.bizforecast.forecast.schemas import (
    ForecastCategory,
    ManufacturerBreakdown,
    PeriodDrillDown,
    PeriodType,
    PipelineSummaryRow,
    ViewMode,
)
from src.bizforecast.forecast.timeline import month_of, quarter_of


def pipeline_category(deal: Deal) -> ForecastCategory:
    """Forecast category for a non-lost deal; won deals count as committed."""
    if deal.status == DealStatus.WON:
        return ForecastCategory.COMMITTED
    return categorize_deal(deal)


@dataclass
class _SummaryTotals(PipelineTotals):
    by_category: dict[ForecastCategory, float] = field(
        default_factory=lambda: {category: 0.0 for category in CATEGORY_ORDER}
    )

    def add(self, deal: Deal) -> None:
        super().add(deal)
        self.by_category[pipeline_category(deal)] += deal_weighted_margin(deal)

    def to_row(self, key: str, name: str) -> PipelineSummaryRow:
        return PipelineSummaryRow(
            key=key,
            name=name,
            deal_count=self.deal_count,
            total_value_usd=self.total_value,
            total_margin_usd=self.total_margin,
            weighted_margin_usd=self.weighted_margin,
            weighted_revenue_usd=self.weighted_revenue,
            average_margin_pct=margin_ratio(self.total_margin, self.total_value),
            committed_usd=self.by_category[ForecastCategory.COMMITTED],
            best_case_usd=self.by_category[ForecastCategory.BEST_CASE],
            worst_case_usd=self.by_category[ForecastCategory.WORST_CASE],
        )


def _summarize(
    deals: Iterable[Deal], key: Callable[[Deal], str], *, include_won: bool = True
) -> dict[str, _SummaryTotals]:
    selected = non_lost_deals(deals) if include_won else open_deals(deals)
    groups: dict[str, _SummaryTotals] = {}
    for deal in selected:
        groups.setdefault(key(deal), _SummaryTotals()).add(deal)
    return groups


# ── Pipeline Summaries ──────────────────────────────────────────────────────


def summarize_pipeline_by_dimension(
    deals: Iterable[Deal],
    key: Callable[[Deal], str],
    names: NameSource = None,
    *,
    unknown_label: str | None = None,
) -> list[PipelineSummaryRow]:
    """Full/weighted pipeline figures per dimension key, ranked by weighted margin.

    Keys without any non-lost deal are omitted.
    """
    lookup = as_lookup(names)
    rows = [
        totals.to_row(group_key, resolve_name(lookup, group_key, unknown_label))
        for group_key, totals in _summarize(deals, key).items()
    ]
    rows.sort(key=lambda row: row.weighted_margin_usd, reverse=True)
    return rows


def summarize_pipeline_by_manufacturer(
    deals: Iterable[Deal], manufacturers: NameSource = None, *, unknown_label: str | None = None
) -> list[PipelineSummaryRow]:
    return summarize_pipeline_by_dimension(
        deals, lambda deal: deal.manufacturer_id, manufacturers, unknown_label=unknown_label
    )


def summarize_pipeline_by_reseller(
    deals: Iterable[Deal], resellers: NameSource = None, *, unknown_label: str | None = None
) -> list[PipelineSummaryRow]:
    return summarize_pipeline_by_dimension(
        deals, lambda deal: deal.reseller_id, resellers, unknown_label=unknown_label
    )


def _summarize_by_period(
    deals: Iterable[Deal], key: Callable[[Deal], str], include_won: bool
) -> list[PipelineSummaryRow]:
    return [
        totals.to_row(period, period)
        for period, totals in sorted(_summarize(deals, key, include_won=include_won).items())
    ]


def summarize_pipeline_by_month(
    deals: Iterable[Deal], *, include_won: bool = True
) -> list[PipelineSummaryRow]:
    """Full/weighted pipeline figures per close month, ascending by month.

    Won deals are included (as committed) unless ``include_won`` is False,
    which restricts the summary to open deals as in the forecast report.
    """
    return _summarize_by_period(deals, month_of, include_won)


def summarize_pipeline_by_quarter(
    deals: Iterable[Deal], *, include_won: bool = False
) -> list[PipelineSummaryRow]:
    """Full/weighted pipeline figures per quarter (``YYYY Qn``), ascending.

    Covers open deals only by default; pass ``include_won=True`` to count won
    deals as committed, like the monthly pipeline export.
    """
    return _summarize_by_period(deals, quarter_of, include_won)


# ── Drill-down ──────────────────────────────────────────────────────────────


def _period_type_of(period: str) -> PeriodType:
    return PeriodType.MONTH if is_valid_month(period) else PeriodType.QUARTER


def drill_down_period(
    deals: Iterable[Deal],
    period: str,
    manufacturers: NameSource = None,
    *,
    period_type: PeriodType | None = None,
    view_mode: ViewMode = ViewMode.REVENUE,
    unknown_label: str | None = None,
) -> PeriodDrillDown:
    """Break down the open deals of one month or quarter by manufacturer.

    Args:
        deals: Deal snapshot; won and lost deals are skipped.
        period: A month (``YYYY-MM``) or quarter (``YYYY Qn``) key.
        manufacturers: Id -> display name source.
        period_type: Interpretation of ``period``; inferred from its format
            when omitted.
        view_mode: REVENUE ranks manufacturers by weighted value, MARGIN by
            weighted margin.
        unknown_label: Name for ids absent from ``manufacturers``
            (default ``Settings.UNKNOWN_LABEL``).

    Returns:
        PeriodDrillDown with period totals and a ranked manufacturer
        breakdown. Deals within a manufacturer are ordered by weighted
        revenue, highest first.
    """
    period_type = period_type or _period_type_of(period)
    key = month_of if period_type == PeriodType.MONTH else quarter_of
    period_deals = [deal for deal in open_deals(deals) if key(deal) == period]

    lookup = as_lookup(manufacturers)
    period_totals = WeightedTotals()
    groups: dict[str, PipelineTotals] = {}
    for deal in period_deals:
        period_totals.add(deal)
        groups.setdefault(deal.manufacturer_id, PipelineTotals()).add(deal)

    breakdowns = [
        ManufacturerBreakdown(
            manufacturer_id=manufacturer_id,
            manufacturer_name=resolve_name(lookup, manufacturer_id, unknown_label),
            deal_count=totals.deal_count,
            total_value_usd=totals.total_value,
            total_margin_usd=totals.total_margin,
            weighted_value_usd=totals.weighted_revenue,
            weighted_margin_usd=totals.weighted_margin,
            deals=tuple(sorted(totals.deals, key=deal_weighted_revenue, reverse=True)),
        )
        for manufacturer_id, totals in groups.items()
    ]
    if view_mode == ViewMode.MARGIN:
        breakdowns.sort(key=lambda row: row.weighted_margin_usd, reverse=True)
    else:
        breakdowns.sort(key=lambda row: row.weighted_value_usd, reverse=True)

    return PeriodDrillDown(
        period=period,
        period_type=period_type,
        view_mode=view_mode,
        deal_count=period_totals.deal_count,
        weighted_revenue_usd=period_totals.weighted_revenue,
        weighted_margin_usd=period_totals.weighted_margin,
        average_margin_pct=margin_ratio(period_totals.weighted_margin, period_totals.weighted_revenue),
        manufacturers=tuple(breakdowns),
    )


__all__ = [
    "drill_down_period",
    "pipeline_category",
    "summarize_pipeline_by_dimension",
    "summarize_pipeline_by_manufacturer",
    "summarize_pipeline_by_month",
    "summarize_pipeline_by_quarter",
    "summarize_pipeline_by_reseller",
]
