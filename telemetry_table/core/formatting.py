"""Value formatters keyed by metadata ``format`` identifier."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class ValueFormatter(Protocol):
    def format(self, value: Any) -> str: ...


class TextFormatter:
    """Fallback: ``str()`` with floats trimmed to a fixed precision."""

    def __init__(self, precision: int = 6) -> None:
        self._precision = precision

    def format(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, float):
            return f"{value:.{self._precision}g}"
        return str(value)


class UTCTimeFormatter:
    """Milliseconds since the epoch → ISO-8601 UTC string."""

    def format(self, value: Any) -> str:
        stamp = datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
        return stamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3] + "Z"


FormatterLookup = Callable[[Optional[str]], ValueFormatter]


class FormatterRegistry:
    """Maps format identifiers to formatters; unknown ids get the fallback."""

    def __init__(self, default: ValueFormatter | None = None) -> None:
        self._default = default or TextFormatter()
        self._formatters: dict[str, ValueFormatter] = {"utc": UTCTimeFormatter()}

    def register(self, format_id: str, formatter: ValueFormatter) -> None:
        self._formatters[format_id] = formatter

    def __call__(self, format_id: Optional[str]) -> ValueFormatter:
        if format_id is None:
            return self._default
        return self._formatters.get(format_id, self._default)
