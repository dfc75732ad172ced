"""Column set + visibility configuration for one table instance."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from telemetry_table.core.columns import Column
from telemetry_table.core.formatting import FormatterLookup, FormatterRegistry
from telemetry_table.core.providers import LimitEvaluator
from telemetry_table.core.types import (
    INVALID_CELL,
    Cell,
    DomainObject,
    Record,
    Row,
    TelemetryMetadatum,
)

logger = logging.getLogger(__name__)


class TableConfiguration:
    """
    Owns the ordered `Column` collection of a table.

    Visibility is seeded to ``True`` for every column and then overridden by
    the owning object's persisted ``configuration["table"]["columns"]``,
    matched by title.  Persisted titles with no current column are ignored.
    """

    def __init__(
        self,
        domain_object: DomainObject,
        formatter_lookup: FormatterLookup | None = None,
    ) -> None:
        self.domain_object = domain_object
        self.formatter_lookup = formatter_lookup or FormatterRegistry()
        self.columns: list[Column] = []
        self._visibility: dict[str, bool] = {}

    # ------------------------------------------------------------------ #
    #  Column set
    # ------------------------------------------------------------------ #

    def add_column(self, column: Column, index: Optional[int] = None) -> None:
        """Append *column*, or insert it at *index*."""
        if index is None:
            self.columns.append(column)
        else:
            self.columns.insert(index, column)
        self._visibility = self._build_visibility()

    def populate_columns(self, columns: Iterable[Union[Column, TelemetryMetadatum]]) -> None:
        """Replace the column set; raw metadata is wrapped in new `Column`s."""
        self.columns = [
            c if isinstance(c, Column) else Column(c, self.formatter_lookup(c.format))
            for c in columns
        ]
        self._visibility = self._build_visibility()

    def get_headers(self) -> list[str]:
        return [column.get_title() for column in self.columns]

    # ------------------------------------------------------------------ #
    #  Visibility
    # ------------------------------------------------------------------ #

    def _build_visibility(self) -> dict[str, bool]:
        persisted = self.domain_object.persisted_columns()
        visibility = {title: True for title in self.get_headers()}

        ignored = [title for title in persisted if title not in visibility]
        if ignored:
            logger.debug("Ignoring persisted visibility for unknown columns: %s", ignored)

        for title in visibility:
            if title in persisted:
                visibility[title] = bool(persisted[title])
        return visibility

    def set_domain_object(self, domain_object: DomainObject) -> None:
        """Swap in a newer stored model and re-apply its overrides."""
        self.domain_object = domain_object
        self._visibility = self._build_visibility()

    def build_column_configuration(self) -> dict[str, bool]:
        """Current ``{title: visible}`` mapping."""
        return dict(self._visibility)

    def visible_headers(self) -> list[str]:
        """Visible titles in column order (not mapping order)."""
        return [title for title in self.get_headers() if self._visibility.get(title, True)]

    # ------------------------------------------------------------------ #
    #  Rows
    # ------------------------------------------------------------------ #

    def get_row_values(self, limit_evaluator: LimitEvaluator | None, record: Record) -> Row:
        """
        Convert one record into ``{title: Cell}``.

        Every column is computed, hidden or not.  A failing column yields an
        invalid cell and never aborts the rest of the row.
        """
        row: Row = {}
        for column in self.columns:
            try:
                value = column.value(record)
                css_class = None
                if limit_evaluator is not None:
                    violation = limit_evaluator(record, column.key)
                    if violation is not None:
                        css_class = violation.css_class
                row[column.get_title()] = Cell(
                    text=column.format(value),
                    value=value,
                    css_class=css_class,
                )
            except Exception as exc:  # isolate per cell
                logger.debug("Cell %r left invalid: %s", column.title, exc)
                row[column.get_title()] = INVALID_CELL
        return row
