"""Default sort column selection from the active time system."""

from __future__ import annotations

from typing import Iterable, Optional

from telemetry_table.core.columns import Column
from telemetry_table.core.types import TimeSystem


def select_sort_column(
    time_system: Optional[TimeSystem],
    columns: Iterable[Column],
) -> Optional[str]:
    """Title of the column whose metadata key matches *time_system*, else None."""
    if time_system is None:
        return None
    for column in columns:
        if column.metadata.key == time_system.key:
            return column.get_title()
    return None
