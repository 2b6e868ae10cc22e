"""
Telemetry module for structured logging.

- JSONFormatter for structured JSON log output
- TelemetryService for centralized logging setup and session event logs
"""

from telemetry.service import (
    JSONFormatter,
    TelemetryService,
    get_telemetry_service,
    initialize_telemetry,
)

__all__ = [
    "JSONFormatter",
    "TelemetryService",
    "get_telemetry_service",
    "initialize_telemetry",
]
