"""Deterministic forecast categorization of open deals.

Rules, evaluated in order (first match wins):
    COMMITTED:  probability >= 0.90, or status VERBAL with probability >= 0.80
    BEST_CASE:  probability >= 0.70, or status PROPOSAL
    WORST_CASE: everything else

Won and lost deals have no forecast category. Passing one is a caller bug
and raises TerminalDealError; every aggregation in this package filters
terminal deals out before categorizing.
"""

from __future__ import annotations

from src.bizforecast.deals.schemas import Deal, DealStatus
from src.bizforecast.forecast.schemas import ForecastCategorization, ForecastCategory

COMMITTED_MIN_PROBABILITY = 0.90
VERBAL_COMMITTED_MIN_PROBABILITY = 0.80
BEST_CASE_MIN_PROBABILITY = 0.70

# Business-priority order for categorized output.
CATEGORY_ORDER: tuple[ForecastCategory, ...] = (
    ForecastCategory.COMMITTED,
    ForecastCategory.BEST_CASE,
    ForecastCategory.WORST_CASE,
)

_CATEGORY_LABELS: dict[ForecastCategory, str] = {
    ForecastCategory.COMMITTED: "Committed",
    ForecastCategory.BEST_CASE: "Best Case",
    ForecastCategory.WORST_CASE: "Worst Case",
}


class TerminalDealError(ValueError):
    """Raised when a won or lost deal is passed to the categorizer."""

    def __init__(self, status: DealStatus) -> None:
        self.status = status
        super().__init__(
            f"Cannot categorize a deal with terminal status {status.value}: "
            "only open deals belong to a forecast category"
        )


def categorize(status: DealStatus, probability: float) -> ForecastCategory:
    """Classify an open deal by its status and win probability.

    Raises:
        TerminalDealError: If ``status`` is WON or LOST.
    """
    if status.is_terminal:
        raise TerminalDealError(status)

    if probability >= COMMITTED_MIN_PROBABILITY or (
        status == DealStatus.VERBAL and probability >= VERBAL_COMMITTED_MIN_PROBABILITY
    ):
        return ForecastCategory.COMMITTED

    if probability >= BEST_CASE_MIN_PROBABILITY or status == DealStatus.PROPOSAL:
        return ForecastCategory.BEST_CASE

    return ForecastCategory.WORST_CASE


def categorize_deal(deal: Deal) -> ForecastCategory:
    """Classify an open Deal. See ``categorize``."""
    return categorize(deal.status, deal.probability)


def category_label(category: ForecastCategory) -> str:
    """Human-readable label for a category."""
    return _CATEGORY_LABELS[category]


def get_forecast_categorizations() -> dict[ForecastCategory, ForecastCategorization]:
    """Display metadata for every category, in CATEGORY_ORDER."""
    return {
        category: ForecastCategorization(category=category, label=category_label(category))
        for category in CATEGORY_ORDER
    }


__all__ = [
    "BEST_CASE_MIN_PROBABILITY",
    "CATEGORY_ORDER",
    "COMMITTED_MIN_PROBABILITY",
    "TerminalDealError",
    "VERBAL_COMMITTED_MIN_PROBABILITY",
    "categorize",
    "categorize_deal",
    "category_label",
    "get_forecast_categorizations",
]
