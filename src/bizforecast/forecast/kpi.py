"""Headline KPI aggregation over a mixed-status deal collection.

Pure Python, no I/O. Won deals feed the actual totals, open deals feed the
weighted pipeline and the best-case scenario (every open deal won), lost
deals are ignored. Every ratio is guarded, so an empty collection yields
all-zero KPIs.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.bizforecast.deals.schemas import Deal, DealStatus, open_deals, won_deals
from src.bizforecast.deals.valuation import (
    cost_amount,
    deal_weighted_margin,
    deal_weighted_revenue,
    margin_ratio,
)
from src.bizforecast.forecast.schemas import KPIData, StatusCounts


def calculate_kpis(deals: Iterable[Deal]) -> KPIData:
    """Reduce a deal collection into headline totals.

    Args:
        deals: Any mix of open, won, and lost deals.

    Returns:
        KPIData with actual (won), weighted pipeline (open), and best-case
        figures.
    """
    deals = list(deals)
    pipeline = open_deals(deals)
    won = won_deals(deals)

    # Actuals: closed-won business only
    total_revenue = sum(deal.sell_usd for deal in won)
    total_cost = sum(cost_amount(deal.sell_usd, deal.margin_pct) for deal in won)
    gross_margin_usd = total_revenue - total_cost
    gross_margin_pct = margin_ratio(gross_margin_usd, total_revenue)

    # Weighted pipeline: open deals discounted by probability
    weighted_margin_usd = sum(deal_weighted_margin(deal) for deal in pipeline)
    weighted_revenue_usd = sum(deal_weighted_revenue(deal) for deal in pipeline)

    # Best case: every open deal closes at full value
    total_pipeline_value = sum(deal.sell_usd for deal in pipeline)
    total_pipeline_margin = sum(deal.margin_usd for deal in pipeline)

    return KPIData(
        total_revenue=total_revenue,
        total_cost=total_cost,
        gross_margin_usd=gross_margin_usd,
        gross_margin_pct=gross_margin_pct,
        weighted_margin_usd=weighted_margin_usd,
        weighted_revenue_usd=weighted_revenue_usd,
        best_case_revenue_usd=total_revenue + total_pipeline_value,
        best_case_margin_usd=gross_margin_usd + total_pipeline_margin,
        total_pipeline_value=total_pipeline_value,
        total_pipeline_margin=total_pipeline_margin,
    )


def count_by_status(deals: Iterable[Deal]) -> StatusCounts:
    """Count won, open, and lost deals."""
    won = lost = pipeline = 0
    for deal in deals:
        if deal.status == DealStatus.WON:
            won += 1
        elif deal.status == DealStatus.LOST:
            lost += 1
        else:
            pipeline += 1
    return StatusCounts(won=won, open=pipeline, lost=lost)


__all__ = ["calculate_kpis", "count_by_status"]
