"""Pydantic schemas for deal records and reference entities.

Defines the snapshot types the forecast engine consumes:
- Enums: DealStatus
- Reference entities: Manufacturer, Reseller, BDM
- Deals: DealFormData (editable fields, validated at ingestion) and Deal
  (frozen record with a derived margin_usd)

Validation lives here, at the ingestion boundary. The aggregation functions
in src.bizforecast.forecast trust these records and never re-validate them.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from src.bizforecast.deals.periods import MONTH_PATTERN
from src.bizforecast.deals.valuation import margin_amount


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Enums ───────────────────────────────────────────────────────────────────


class DealStatus(str, Enum):
    """Pipeline status of a deal. WON and LOST are terminal."""

    PROSPECT = "prospect"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    VERBAL = "verbal"
    WON = "won"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[DealStatus] = frozenset({DealStatus.WON, DealStatus.LOST})


# ── Reference Entities ──────────────────────────────────────────────────────


class ReferenceEntity(BaseModel):
    """Flat id/name record referenced by id from a Deal."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Manufacturer(ReferenceEntity):
    """Vendor whose products are sold in a deal."""


class Reseller(ReferenceEntity):
    """Channel partner reselling the deal to the end customer."""


class BDM(ReferenceEntity):
    """Business development manager optionally assigned to a deal."""


# ── Deals ───────────────────────────────────────────────────────────────────


class DealFormData(BaseModel):
    """Editable fields of a deal.

    Every write (create or full replacement) goes through this model, so the
    range and format invariants hold for every Deal built from it.
    """

    manufacturer_id: str
    reseller_id: str
    end_customer: str
    bdm_id: str | None = None
    sell_usd: float = Field(ge=0.0)
    margin_pct: float = Field(ge=0.0, le=1.0)
    probability: float = Field(ge=0.0, le=1.0)
    status: DealStatus
    expected_close_month: str = Field(pattern=MONTH_PATTERN)
    notes: str | None = None


class Deal(DealFormData):
    """A persisted deal snapshot.

    ``margin_usd`` is derived from ``sell_usd * margin_pct`` on every access
    and included in serialized output; it cannot be supplied or edited on
    its own. Records are frozen: updates produce a new Deal via
    ``replace_with``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def margin_usd(self) -> float:
        return margin_amount(self.sell_usd, self.margin_pct)

    @property
    def is_open(self) -> bool:
        """True while the deal is still in the pipeline (not won or lost)."""
        return not self.status.is_terminal

    @classmethod
    def from_form(
        cls, deal_id: str, form: DealFormData, now: datetime | None = None
    ) -> Deal:
        """Create a new deal record from validated form data."""
        now = now or _utcnow()
        return cls(id=deal_id, created_at=now, updated_at=now, **_editable_fields(form))

    def replace_with(self, form: DealFormData, now: datetime | None = None) -> Deal:
        """Return a copy with every editable field replaced by ``form``.

        The id and creation timestamp are kept; ``updated_at`` is bumped and
        ``margin_usd`` follows the new sell price and margin fraction.
        """
        return type(self)(
            id=self.id,
            created_at=self.created_at,
            updated_at=now or _utcnow(),
            **_editable_fields(form),
        )

    def to_form(self) -> DealFormData:
        """Extract the editable fields, e.g. to pre-fill an edit form."""
        return DealFormData(**_editable_fields(self))


def _editable_fields(form: DealFormData) -> dict:
    return form.model_dump(include=set(DealFormData.model_fields))


# ── Collection Helpers ──────────────────────────────────────────────────────


def open_deals(deals: Iterable[Deal]) -> list[Deal]:
    """Deals still in the pipeline (status not won/lost), in input order."""
    return [deal for deal in deals if deal.is_open]


def won_deals(deals: Iterable[Deal]) -> list[Deal]:
    """Deals with status WON, in input order."""
    return [deal for deal in deals if deal.status == DealStatus.WON]


def non_lost_deals(deals: Iterable[Deal]) -> list[Deal]:
    """Open and won deals, in input order."""
    return [deal for deal in deals if deal.status != DealStatus.LOST]


__all__ = [
    "BDM",
    "Deal",
    "DealFormData",
    "DealStatus",
    "Manufacturer",
    "Reseller",
    "ReferenceEntity",
    "TERMINAL_STATUSES",
    "non_lost_deals",
    "open_deals",
    "won_deals",
]
