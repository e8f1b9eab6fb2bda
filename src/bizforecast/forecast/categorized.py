"""Forecast grouped by category (committed / best-case / worst-case).

Always returns exactly one row per ForecastCategory in CATEGORY_ORDER, with
zero totals and no deals for empty categories, so consumers never have to
special-case a missing bucket. Member deals are kept for drill-down views.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.bizforecast.deals.schemas import Deal, open_deals
from src.bizforecast.forecast.accumulators import WeightedTotals
from src.bizforecast.forecast.categorization import (
    CATEGORY_ORDER,
    categorize_deal,
    category_label,
)
from src.bizforecast.forecast.schemas import CategorizedForecast


def calculate_categorized_forecast(deals: Iterable[Deal]) -> list[CategorizedForecast]:
    """Weighted totals and member deals per forecast category.

    Args:
        deals: Deal snapshot; won and lost deals are skipped.

    Returns:
        Three CategorizedForecast rows: committed, best-case, worst-case.
    """
    buckets = {category: WeightedTotals() for category in CATEGORY_ORDER}
    for deal in open_deals(deals):
        buckets[categorize_deal(deal)].add(deal)

    return [
        CategorizedForecast(
            category=category,
            label=category_label(category),
            weighted_revenue_usd=totals.weighted_revenue,
            weighted_margin_usd=totals.weighted_margin,
            deal_count=totals.deal_count,
            deals=tuple(totals.deals),
        )
        for category, totals in buckets.items()
    ]


__all__ = ["calculate_categorized_forecast"]
