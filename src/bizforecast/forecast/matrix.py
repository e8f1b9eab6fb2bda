"""Manufacturer x month pivot used by the spreadsheet exports.

One algorithm, parameterized by a per-deal contribution strategy:
    weighted_contribution: (sell_usd * probability, margin_usd * probability)
    full_contribution:     (sell_usd, margin_usd), the undiscounted
                           "committed" view for deals already filtered to a
                           high probability

The pivot does no filtering of its own; pair it with one of the
``select_*`` helpers, which mirror the three export flavours (full forecast,
committed forecast, open pipeline from a month onward). Producing the
numeric table is the whole job here: rendering it into a workbook belongs
to the export formatter.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from src.bizforecast.config import get_settings
from src.bizforecast.deals.lookup import as_lookup
from src.bizforecast.deals.periods import filter_from_month
from src.bizforecast.deals.schemas import Deal, non_lost_deals, open_deals
from src.bizforecast.deals.valuation import deal_weighted_margin, deal_weighted_revenue, safe_ratio
from src.bizforecast.forecast.accumulators import CellTotals
from src.bizforecast.forecast.dimensions import NameSource, resolve_name
from src.bizforecast.forecast.schemas import ManufacturerMonthMatrix, MatrixCell, MatrixRow

logger = structlog.get_logger(__name__)

Contribution = Callable[[Deal], tuple[float, float]]


# ── Contribution Strategies ─────────────────────────────────────────────────


def weighted_contribution(deal: Deal) -> tuple[float, float]:
    """Probability-weighted (revenue, margin) of a deal."""
    return deal_weighted_revenue(deal), deal_weighted_margin(deal)


def full_contribution(deal: Deal) -> tuple[float, float]:
    """Undiscounted (revenue, margin) of a deal."""
    return deal.sell_usd, deal.margin_usd


# ── Deal Selection ──────────────────────────────────────────────────────────


def select_forecast_deals(deals: Iterable[Deal]) -> list[Deal]:
    """Open and won deals (lost excluded), as used by the full forecast export."""
    return non_lost_deals(deals)


def select_committed_deals(
    deals: Iterable[Deal], min_probability: float | None = None
) -> list[Deal]:
    """Non-lost deals at or above ``min_probability``.

    Defaults to ``Settings.COMMITTED_EXPORT_MIN_PROBABILITY`` (0.70).
    """
    if min_probability is None:
        min_probability = get_settings().COMMITTED_EXPORT_MIN_PROBABILITY
    return [deal for deal in non_lost_deals(deals) if deal.probability >= min_probability]


def select_open_deals(deals: Iterable[Deal], as_of_month: str | None = None) -> list[Deal]:
    """Open deals closing in ``as_of_month`` or later (all open deals if None)."""
    return open_deals(filter_from_month(deals, as_of_month))


# ── Pivot ───────────────────────────────────────────────────────────────────


def build_manufacturer_month_matrix(
    deals: Iterable[Deal],
    manufacturers: NameSource = None,
    contribution: Contribution = weighted_contribution,
    *,
    unknown_label: str | None = None,
) -> ManufacturerMonthMatrix:
    """Pivot pre-filtered deals into a manufacturer x month table.

    Args:
        deals: Deals to pivot, already filtered by the caller.
        manufacturers: Id -> display name source for row labels.
        contribution: Per-deal (revenue, margin) strategy.
        unknown_label: Row label for ids absent from ``manufacturers``
            (default ``Settings.UNKNOWN_LABEL``).

    Returns:
        ManufacturerMonthMatrix with a cell for every (row, month) pair, row
        totals, month totals, and a grand total. Rows are sorted by total
        revenue contribution, descending.
    """
    deals = list(deals)
    lookup = as_lookup(manufacturers)
    months = sorted({deal.expected_close_month for deal in deals})

    row_cells: dict[str, dict[str, CellTotals]] = {}
    row_totals: dict[str, CellTotals] = {}
    month_totals = {month: CellTotals() for month in months}
    grand_total = CellTotals()

    for deal in deals:
        revenue, margin = contribution(deal)
        manufacturer_id = deal.manufacturer_id
        month = deal.expected_close_month

        cells = row_cells.setdefault(manufacturer_id, {})
        cells.setdefault(month, CellTotals()).add(revenue, margin)
        row_totals.setdefault(manufacturer_id, CellTotals()).add(revenue, margin)
        month_totals[month].add(revenue, margin)
        grand_total.add(revenue, margin)

    ordered_ids = sorted(row_totals, key=lambda mid: row_totals[mid].revenue, reverse=True)
    empty = MatrixCell()
    rows = tuple(
        MatrixRow(
            manufacturer_id=manufacturer_id,
            manufacturer_name=resolve_name(lookup, manufacturer_id, unknown_label),
            cells={
                month: (
                    row_cells[manufacturer_id][month].freeze()
                    if month in row_cells[manufacturer_id]
                    else empty
                )
                for month in months
            },
            total=row_totals[manufacturer_id].freeze(),
            share_of_total=safe_ratio(row_totals[manufacturer_id].revenue, grand_total.revenue),
        )
        for manufacturer_id in ordered_ids
    )

    logger.debug(
        "matrix_built",
        contribution=getattr(contribution, "__name__", repr(contribution)),
        deal_count=grand_total.deal_count,
        manufacturer_count=len(rows),
        month_count=len(months),
    )

    return ManufacturerMonthMatrix(
        months=tuple(months),
        rows=rows,
        month_totals={month: totals.freeze() for month, totals in month_totals.items()},
        grand_total=grand_total.freeze(),
    )


def build_forecast_matrix(
    deals: Iterable[Deal], manufacturers: NameSource = None, *, unknown_label: str | None = None
) -> ManufacturerMonthMatrix:
    """Weighted matrix over every non-lost deal."""
    return build_manufacturer_month_matrix(
        select_forecast_deals(deals),
        manufacturers,
        weighted_contribution,
        unknown_label=unknown_label,
    )


def build_committed_matrix(
    deals: Iterable[Deal],
    manufacturers: NameSource = None,
    *,
    min_probability: float | None = None,
    unknown_label: str | None = None,
) -> ManufacturerMonthMatrix:
    """Full-value matrix over non-lost deals at or above ``min_probability``."""
    return build_manufacturer_month_matrix(
        select_committed_deals(deals, min_probability),
        manufacturers,
        full_contribution,
        unknown_label=unknown_label,
    )


def build_pipeline_matrix(
    deals: Iterable[Deal],
    manufacturers: NameSource = None,
    *,
    as_of_month: str | None = None,
    unknown_label: str | None = None,
) -> ManufacturerMonthMatrix:
    """Weighted matrix over open deals closing in ``as_of_month`` or later."""
    return build_manufacturer_month_matrix(
        select_open_deals(deals, as_of_month),
        manufacturers,
        weighted_contribution,
        unknown_label=unknown_label,
    )


__all__ = [
    "Contribution",
    "build_committed_matrix",
    "build_forecast_matrix",
    "build_manufacturer_month_matrix",
    "build_pipeline_matrix",
    "full_contribution",
    "select_committed_deals",
    "select_forecast_deals",
    "select_open_deals",
    "weighted_contribution",
]
