"""Time-bucketed weighted forecasts (monthly and quarterly).

Only won/lost deals are excluded here. Dropping past months is the caller's
choice, expressed through ``as_of_month`` rather than a clock read.
Output is sorted ascending by period key; both key formats are zero-padded
(``YYYY-MM``, ``YYYY Qn``), so string order is chronological.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable

from src.bizforecast.deals.periods import filter_from_month, quarter_key
from src.bizforecast.deals.schemas import Deal, open_deals
from src.bizforecast.forecast.accumulators import WeightedTotals
from src.bizforecast.forecast.schemas import PeriodForecast


def month_of(deal: Deal) -> str:
    return deal.expected_close_month


def quarter_of(deal: Deal) -> str:
    return quarter_key(deal.expected_close_month)


def bucket_forecast(
    deals: Iterable[Deal],
    key: Callable[[Deal], str],
    *,
    as_of_month: str | None = None,
) -> list[PeriodForecast]:
    """Group open deals by ``key(deal)`` and sum weighted revenue/margin per group.

    Args:
        deals: Deal snapshot; won and lost deals are skipped.
        key: Maps a deal to its period key.
        as_of_month: If set, deals closing before this ``YYYY-MM`` are skipped.

    Returns:
        One PeriodForecast per distinct key, ascending by key.
    """
    buckets: defaultdict[str, WeightedTotals] = defaultdict(WeightedTotals)
    for deal in open_deals(filter_from_month(deals, as_of_month)):
        buckets[key(deal)].add(deal)

    return [
        PeriodForecast(
            period=period,
            weighted_revenue_usd=totals.weighted_revenue,
            weighted_margin_usd=totals.weighted_margin,
            deal_count=totals.deal_count,
        )
        for period, totals in sorted(buckets.items())
    ]


def calculate_monthly_forecast(
    deals: Iterable[Deal], *, as_of_month: str | None = None
) -> list[PeriodForecast]:
    """Weighted forecast per expected close month (``YYYY-MM``)."""
    return bucket_forecast(deals, month_of, as_of_month=as_of_month)


def calculate_quarterly_forecast(
    deals: Iterable[Deal], *, as_of_month: str | None = None
) -> list[PeriodForecast]:
    """Weighted forecast per calendar quarter (``YYYY Qn``)."""
    return bucket_forecast(deals, quarter_of, as_of_month=as_of_month)


__all__ = [
    "bucket_forecast",
    "calculate_monthly_forecast",
    "calculate_quarterly_forecast",
    "month_of",
    "quarter_of",
]
