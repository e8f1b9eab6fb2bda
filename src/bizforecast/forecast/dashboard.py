"""Dashboard composition over one deal snapshot.

Filters the snapshot once (optionally dropping deals that close before
``as_of_month``; won deals included, so KPI actuals follow the same window)
and runs every dashboard aggregation over the result.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

import structlog

from src.bizforecast.config import Settings, get_settings
from src.bizforecast.deals.periods import current_month, filter_from_month
from src.bizforecast.deals.schemas import Deal
from src.bizforecast.forecast.categorized import calculate_categorized_forecast
from src.bizforecast.forecast.dimensions import (
    NameSource,
    calculate_forecast_by_manufacturer,
    calculate_forecast_by_reseller,
)
from src.bizforecast.forecast.kpi import calculate_kpis, count_by_status
from src.bizforecast.forecast.schemas import ForecastDashboard
from src.bizforecast.forecast.timeline import (
    calculate_monthly_forecast,
    calculate_quarterly_forecast,
)

logger = structlog.get_logger(__name__)


def default_as_of_month(
    today: date | None = None, settings: Settings | None = None
) -> str | None:
    """Current ``YYYY-MM`` when past months are excluded by configuration, else None."""
    settings = settings or get_settings()
    if not settings.EXCLUDE_PAST_MONTHS:
        return None
    return current_month(today)


def build_dashboard(
    deals: Iterable[Deal],
    manufacturers: NameSource = None,
    resellers: NameSource = None,
    *,
    as_of_month: str | None = None,
    settings: Settings | None = None,
) -> ForecastDashboard:
    """Compute every dashboard aggregate for a deal snapshot.

    Args:
        deals: Full deal snapshot (any status).
        manufacturers: Manufacturer id -> name source.
        resellers: Reseller id -> name source.
        as_of_month: Drop deals closing before this ``YYYY-MM``; None keeps all.
            See ``default_as_of_month`` for the configured default.
        settings: Overrides the cached application settings.

    Returns:
        ForecastDashboard with KPIs, status counts, monthly, quarterly,
        per-manufacturer, per-reseller, and categorized forecasts.
    """
    settings = settings or get_settings()
    snapshot = filter_from_month(deals, as_of_month)

    dashboard = ForecastDashboard(
        as_of_month=as_of_month,
        kpis=calculate_kpis(snapshot),
        status_counts=count_by_status(snapshot),
        monthly=tuple(calculate_monthly_forecast(snapshot)),
        quarterly=tuple(calculate_quarterly_forecast(snapshot)),
        by_manufacturer=tuple(
            calculate_forecast_by_manufacturer(
                snapshot, manufacturers, unknown_label=settings.UNKNOWN_LABEL
            )
        ),
        by_reseller=tuple(
            calculate_forecast_by_reseller(
                snapshot, resellers, unknown_label=settings.UNKNOWN_LABEL
            )
        ),
        categorized=tuple(calculate_categorized_forecast(snapshot)),
    )

    logger.debug(
        "dashboard_built",
        as_of_month=as_of_month,
        deal_count=len(snapshot),
        open_count=dashboard.status_counts.open,
        month_count=len(dashboard.monthly),
    )
    return dashboard


__all__ = ["build_dashboard", "default_as_of_month"]
