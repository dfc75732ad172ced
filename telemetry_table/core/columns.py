# telemetry_table/core/columns.py
"""
Column model and the pure functions that derive columns from metadata.

Ordering rule shared by everything here: domain-hinted fields first, then the
rest, each group in declaration order (first occurrence wins when several
objects declare the same key).
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from telemetry_table.core.errors import FieldExtractionError
from telemetry_table.core.formatting import FormatterLookup, TextFormatter, ValueFormatter
from telemetry_table.core.types import Record, TelemetryMetadatum

MetadataSets = Sequence[Sequence[TelemetryMetadatum]]


class Column:
    """One displayable field bound to its formatter."""

    __slots__ = ("metadata", "_title", "_formatter")

    def __init__(
        self,
        metadata: TelemetryMetadatum,
        formatter: ValueFormatter | None = None,
        *,
        title: Optional[str] = None,
    ) -> None:
        self.metadata = metadata
        self._title = title
        self._formatter = formatter or TextFormatter()

    @property
    def key(self) -> str:
        return self.metadata.key

    @property
    def title(self) -> str:
        return self._title if self._title is not None else self.metadata.name

    def get_title(self) -> str:
        return self.title

    def value(self, record: Record) -> Any:
        """Raw value for this column; raises `FieldExtractionError` if absent."""
        try:
            return record[self.key]
        except (KeyError, TypeError) as exc:
            raise FieldExtractionError(self.key, type(exc).__name__) from exc

    def format(self, value: Any) -> str:
        return self._formatter.format(value)

    def __repr__(self) -> str:
        return f"Column(key={self.key!r}, title={self.title!r})"


def _union(metadata_sets: MetadataSets) -> list[TelemetryMetadatum]:
    seen: set[str] = set()
    merged: list[TelemetryMetadatum] = []
    for metadata in metadata_sets:
        for datum in metadata:
            if datum.key in seen:
                continue
            seen.add(datum.key)
            merged.append(datum)
    return merged


def domain_first(metadata: Iterable[TelemetryMetadatum]) -> list[TelemetryMetadatum]:
    """Stable partition: domain-hinted fields ahead of range fields."""
    metadata = list(metadata)
    return [m for m in metadata if m.is_domain] + [m for m in metadata if not m.is_domain]


def common_values_for_hints(
    metadata_sets: MetadataSets,
    hints: Sequence[str],
) -> list[TelemetryMetadatum]:
    """
    Fields across *metadata_sets* carrying every hint in *hints*.

    With no hints this is the full union, domain fields first.
    """
    merged = domain_first(_union(metadata_sets))
    if not hints:
        return merged
    return [m for m in merged if m.has_hints(hints)]


def select_domain_columns(metadata_sets: MetadataSets) -> list[TelemetryMetadatum]:
    """Domain/time fields only; ``[]`` when no object exposes one."""
    return [m for m in _union(metadata_sets) if m.is_domain]


def build_columns(
    metadata_sets: MetadataSets,
    formatter_lookup: FormatterLookup,
) -> tuple[Column, ...]:
    """Full, ordered column set for the given objects' metadata."""
    return tuple(
        Column(datum, formatter_lookup(datum.format))
        for datum in common_values_for_hints(metadata_sets, ())
    )


__all__ = [
    "Column",
    "build_columns",
    "common_values_for_hints",
    "domain_first",
    "select_domain_columns",
]
