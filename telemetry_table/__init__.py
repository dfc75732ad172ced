"""telemetry_table – streaming + historical telemetry into bounded table rows."""

__version__ = "0.1.0"

from telemetry_table.app.controller import TableServices, TelemetryTableController
from telemetry_table.core.types import TableSettings

__all__ = ["TableServices", "TableSettings", "TelemetryTableController"]
