"""
police_records/core/state.py

Process-wide operational status and the registry that owns it.

The Bootstrap Sequencer is the only writer. Once the listener opens the
registry is frozen and request handlers read immutable snapshots, so no
locking is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Set

from police_records.core.exceptions import DatabaseUnavailableError, RegistryFrozenError


class Mode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class CapabilityName(str, Enum):
    """Fixed set of route groups the service knows how to expose."""

    EVIDENCE = "evidence"
    CUSTODIAL = "custodial"
    RECORDS = "records"          # geofile + custodial documents in MongoDB
    ADDITIONAL = "additional"    # optional extra routes, loaded if present


#: Capabilities that require a live database connection.
DATABASE_BACKED: FrozenSet[CapabilityName] = frozenset({CapabilityName.RECORDS})


@dataclass(frozen=True)
class Environment:
    mode: Mode
    port: int

    @classmethod
    def from_settings(cls, settings) -> "Environment":
        mode = Mode.PRODUCTION if settings.is_production else Mode.DEVELOPMENT
        return cls(mode=mode, port=settings.port)


@dataclass(frozen=True)
class ServiceState:
    """Read-only view of the service's operational status."""

    database_connected: bool
    environment: Environment
    active_capabilities: FrozenSet[CapabilityName] = field(default_factory=frozenset)


class CapabilityRegistry:
    """
    Tracks which optional subsystems are active.

    Invariant: while the database is disconnected no capability in
    ``DATABASE_BACKED`` may be active.
    """

    def __init__(self, environment: Environment) -> None:
        self._environment = environment
        self._database_connected = False
        self._active: Set[CapabilityName] = set()
        self._frozen = False

    # ── Mutation (startup only) ────────────────────────────────────────────────

    def mark_database_connected(self) -> None:
        self._check_mutable()
        self._database_connected = True

    def activate(self, name: CapabilityName) -> None:
        self._check_mutable()
        if name in DATABASE_BACKED and not self._database_connected:
            raise DatabaseUnavailableError(
                f"Cannot activate '{name.value}' without a database connection."
            )
        self._active.add(name)

    def deactivate(self, name: CapabilityName) -> None:
        self._check_mutable()
        self._active.discard(name)

    def freeze(self) -> None:
        """Lock the state; called when the listener is about to open."""
        self._frozen = True

    # ── Queries ────────────────────────────────────────────────────────────────

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def database_connected(self) -> bool:
        return self._database_connected

    def is_active(self, name: CapabilityName) -> bool:
        return name in self._active

    def snapshot(self) -> ServiceState:
        return ServiceState(
            database_connected=self._database_connected,
            environment=self._environment,
            active_capabilities=frozenset(self._active),
        )

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Service state is read-only once the listener is open.")
