"""Weighted forecast broken down by a categorical dimension.

Groups open deals by manufacturer id, reseller id, or any other key and
ranks the groups by weighted margin (highest first). Ties keep first-seen
order. Ids missing from the name lookup resolve to the caller's
``unknown_label`` or, when none is given, ``Settings.UNKNOWN_LABEL``;
``resolve_name`` is the only place that fallback is applied.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping

from src.bizforecast.config import get_settings
from src.bizforecast.deals.lookup import NameLookup, as_lookup
from src.bizforecast.deals.schemas import Deal, ReferenceEntity, open_deals
from src.bizforecast.forecast.accumulators import WeightedTotals
from src.bizforecast.forecast.schemas import DimensionForecast

NameSource = NameLookup | Mapping[str, str] | Iterable[ReferenceEntity] | None


def resolve_name(lookup: NameLookup, key: str, fallback: str | None = None) -> str:
    """Display name for ``key``, or ``fallback`` when the lookup has no entry.

    ``fallback`` defaults to ``Settings.UNKNOWN_LABEL``.
    """
    name = lookup.get(key)
    if name is not None:
        return name
    return get_settings().UNKNOWN_LABEL if fallback is None else fallback


def calculate_forecast_by_dimension(
    deals: Iterable[Deal],
    key: Callable[[Deal], str],
    names: NameSource = None,
    *,
    unknown_label: str | None = None,
) -> list[DimensionForecast]:
    """Weighted revenue/margin and deal count per dimension key.

    Args:
        deals: Deal snapshot; won and lost deals are skipped.
        key: Maps a deal to its dimension id.
        names: Id -> display name source (NameLookup, mapping, or entities).
        unknown_label: Name used for ids absent from ``names``; defaults to
            ``Settings.UNKNOWN_LABEL``.

    Returns:
        DimensionForecast rows sorted by weighted margin, descending.
    """
    lookup = as_lookup(names)
    groups: defaultdict[str, WeightedTotals] = defaultdict(WeightedTotals)
    for deal in open_deals(deals):
        groups[key(deal)].add(deal)

    rows = [
        DimensionForecast(
            category_id=category_id,
            category_name=resolve_name(lookup, category_id, unknown_label),
            weighted_revenue_usd=totals.weighted_revenue,
            weighted_margin_usd=totals.weighted_margin,
            deal_count=totals.deal_count,
        )
        for category_id, totals in groups.items()
    ]
    rows.sort(key=lambda row: row.weighted_margin_usd, reverse=True)
    return rows


def calculate_forecast_by_manufacturer(
    deals: Iterable[Deal], manufacturers: NameSource = None, *, unknown_label: str | None = None
) -> list[DimensionForecast]:
    """Weighted forecast per manufacturer, ranked by weighted margin."""
    return calculate_forecast_by_dimension(
        deals, lambda deal: deal.manufacturer_id, manufacturers, unknown_label=unknown_label
    )


def calculate_forecast_by_reseller(
    deals: Iterable[Deal], resellers: NameSource = None, *, unknown_label: str | None = None
) -> list[DimensionForecast]:
    """Weighted forecast per reseller, ranked by weighted margin."""
    return calculate_forecast_by_dimension(
        deals, lambda deal: deal.reseller_id, resellers, unknown_label=unknown_label
    )


__all__ = [
    "NameSource",
    "calculate_forecast_by_dimension",
    "calculate_forecast_by_manufacturer",
    "calculate_forecast_by_reseller",
    "resolve_name",
]
