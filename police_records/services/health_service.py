"""
police_records/services/health_service.py

Read-only health view over the capability registry.
"""

from __future__ import annotations

from police_records.core.constants import HEALTH_MESSAGE_CONNECTED, HEALTH_MESSAGE_DISCONNECTED
from police_records.core.state import CapabilityRegistry
from police_records.models.health_models import DatabaseStatus, HealthReport


class HealthReporter:
    """Builds a HealthReport from the current registry snapshot. No side effects."""

    def __init__(self, registry: CapabilityRegistry) -> None:
        self._registry = registry

    def report(self) -> HealthReport:
        state = self._registry.snapshot()
        connected = state.database_connected
        return HealthReport(
            status="OK",
            database_status=DatabaseStatus.CONNECTED if connected else DatabaseStatus.DISCONNECTED,
            message=HEALTH_MESSAGE_CONNECTED if connected else HEALTH_MESSAGE_DISCONNECTED,
            capabilities=sorted(c.value for c in state.active_capabilities),
        )
