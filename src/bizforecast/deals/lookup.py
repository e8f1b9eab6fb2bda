"""Id -> display-name lookup for manufacturers and resellers.

``NameLookup.get`` returns ``None`` for unknown ids. Substituting a
placeholder label is the caller's decision (see ``resolve_name`` in
src.bizforecast.forecast.dimensions), made in exactly one place.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from src.bizforecast.deals.schemas import ReferenceEntity


class NameLookup(Mapping[str, str]):
    """Read-only mapping of entity id to display name."""

    def __init__(self, names: Mapping[str, str] | None = None) -> None:
        self._names: dict[str, str] = dict(names or {})

    @classmethod
    def from_entities(cls, entities: Iterable[ReferenceEntity]) -> NameLookup:
        """Build a lookup from Manufacturer/Reseller/BDM records."""
        return cls({entity.id: entity.name for entity in entities})

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        return self._names.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self._names[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"NameLookup({self._names!r})"


def as_lookup(
    names: NameLookup | Mapping[str, str] | Iterable[ReferenceEntity] | None,
) -> NameLookup:
    """Coerce a mapping, an entity list, or an existing lookup into a NameLookup."""
    if isinstance(names, NameLookup):
        return names
    if names is None:
        return NameLookup()
    if isinstance(names, Mapping):
        return NameLookup(names)
    return NameLookup.from_entities(names)


__all__ = ["NameLookup", "as_lookup"]
