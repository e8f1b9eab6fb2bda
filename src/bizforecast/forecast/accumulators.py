"""Mutable running totals used inside a single aggregation call.

These never escape an aggregation function: results are copied into the
frozen records of src.bizforecast.forecast.schemas before being returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.bizforecast.deals.schemas import Deal
from src.bizforecast.deals.valuation import (
    deal_weighted_margin,
    deal_weighted_revenue,
    margin_ratio,
)
from src.bizforecast.forecast.schemas import MatrixCell


@dataclass
class WeightedTotals:
    """Weighted revenue/margin, count, and member deals of one group."""

    weighted_revenue: float = 0.0
    weighted_margin: float = 0.0
    deal_count: int = 0
    deals: list[Deal] = field(default_factory=list)

    def add(self, deal: Deal) -> None:
        self.weighted_revenue += deal_weighted_revenue(deal)
        self.weighted_margin += deal_weighted_margin(deal)
        self.deal_count += 1
        self.deals.append(deal)


@dataclass
class PipelineTotals(WeightedTotals):
    """WeightedTotals plus the undiscounted value and margin of the group."""

    total_value: float = 0.0
    total_margin: float = 0.0

    def add(self, deal: Deal) -> None:
        super().add(deal)
        self.total_value += deal.sell_usd
        self.total_margin += deal.margin_usd


@dataclass(slots=True)
class CellTotals:
    """Revenue/margin contribution and count of one matrix cell, row, or column."""

    deal_count: int = 0
    revenue: float = 0.0
    margin: float = 0.0

    def add(self, revenue: float, margin: float) -> None:
        self.deal_count += 1
        self.revenue += revenue
        self.margin += margin

    def freeze(self) -> MatrixCell:
        return MatrixCell(
            deal_count=self.deal_count,
            revenue_usd=self.revenue,
            margin_usd=self.margin,
            margin_pct=margin_ratio(self.margin, self.revenue),
        )
