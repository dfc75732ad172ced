"""Defines types and dataclasses for the telemetry table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

# Hint tags that mark a field as the independent (time-like) axis.
DOMAIN_HINTS = ("x", "domain")

Record = Mapping[str, Any]


@dataclass(frozen=True)
class DomainObject:
    """A telemetry-producing object as seen by the table.

    Only ``identifier`` takes part in equality and hashing; ``configuration``
    is the object's stored model and may carry persisted table settings.
    """

    identifier: str
    name: str = field(default="", compare=False)
    type: str = field(default="telemetry", compare=False)
    configuration: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def persisted_columns(self) -> Mapping[str, bool]:
        """Return the stored ``{title: visible}`` overrides, if any."""
        table = self.configuration.get("table") or {}
        return table.get("columns") or {}


@dataclass(frozen=True)
class TelemetryMetadatum:
    """One field a provider can emit."""

    key: str
    name: str
    hints: Mapping[str, int] = field(default_factory=dict, hash=False)
    format: Optional[str] = None
    source: Optional[str] = None

    @property
    def is_domain(self) -> bool:
        return any(h in self.hints for h in DOMAIN_HINTS)

    def has_hints(self, hints: tuple[str, ...] | list[str]) -> bool:
        return all(h in self.hints for h in hints)


@dataclass(frozen=True, slots=True)
class TimeBounds:
    start: float
    end: float

    def contains(self, value: float) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True, slots=True)
class TimeSystem:
    """Active time system; ``key`` names the domain field it runs on."""

    key: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class LimitViolation:
    """Returned by a limit evaluator when a value crosses a threshold."""

    css_class: str
    name: str = ""


@dataclass(frozen=True, slots=True)
class Cell:
    """One formatted value in a row."""

    text: str
    value: Any
    css_class: Optional[str] = None
    valid: bool = True


INVALID_CELL = Cell(text="", value=None, css_class="invalid", valid=False)

Row = dict[str, Cell]


@dataclass(frozen=True, slots=True)
class TableSettings:
    """Static options for one table instance."""

    batch_size: int = 1000
    max_rows: int = 100_000
    interleave_history: bool = False
    reload_on_bounds: bool = True

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_rows < 1:
            raise ValueError(f"max_rows must be >= 1, got {self.max_rows}")


@dataclass
class TableState:
    """Everything the presentation layer reads about one table."""

    headers: list[str] = field(default_factory=list)
    time_columns: list[str] = field(default_factory=list)
    default_sort: Optional[str] = None
    loading: bool = False
    auto_scroll: bool = False
    error: Optional[BaseException] = None
