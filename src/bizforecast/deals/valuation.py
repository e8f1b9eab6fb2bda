"""Per-deal valuation arithmetic.

Pure Python, no validation: inputs are assumed to be pre-validated numbers
(see ``DealFormData``). ``weighted_*`` values discount a figure by the deal's
win probability and are the building block of every forecast aggregate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.bizforecast.deals.schemas import Deal


def margin_amount(sell_usd: float, margin_pct: float) -> float:
    """Margin in USD earned on a sale: ``sell_usd * margin_pct``."""
    return sell_usd * margin_pct


def cost_amount(sell_usd: float, margin_pct: float) -> float:
    """Cost in USD of a sale: ``sell_usd * (1 - margin_pct)``."""
    return sell_usd * (1 - margin_pct)


def weighted_revenue(sell_usd: float, probability: float) -> float:
    """Probability-weighted revenue: ``sell_usd * probability``."""
    return sell_usd * probability


def weighted_margin(margin_usd: float, probability: float) -> float:
    """Probability-weighted margin: ``margin_usd * probability``."""
    return margin_usd * probability


def deal_weighted_revenue(deal: Deal) -> float:
    return weighted_revenue(deal.sell_usd, deal.probability)


def deal_weighted_margin(deal: Deal) -> float:
    return weighted_margin(deal.margin_usd, deal.probability)


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero."""
    return numerator / denominator if denominator else 0.0


def margin_ratio(margin_usd: float, revenue_usd: float) -> float:
    """Margin as a fraction of revenue, 0.0 when revenue is zero."""
    return safe_ratio(margin_usd, revenue_usd)


__all__ = [
    "cost_amount",
    "deal_weighted_margin",
    "deal_weighted_revenue",
    "margin_amount",
    "margin_ratio",
    "safe_ratio",
    "weighted_margin",
    "weighted_revenue",
]
