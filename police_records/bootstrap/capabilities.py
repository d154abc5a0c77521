"""
police_records/bootstrap/capabilities.py

The fixed table of route groups the service can expose.

Each entry names the module and function that registers the group, so
loading is deferred to the bootstrap sequencer. ``required`` decides
whether a registration failure is fatal; ``needs_database`` whether the
group is activated only with a live MongoDB connection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from police_records.core.constants import CUSTODIAL_RECORDS_PATH, GEOFILES_PATH
from police_records.core.state import DATABASE_BACKED, CapabilityName


@dataclass(frozen=True)
class CapabilitySpec:
    name: CapabilityName
    module: str
    attribute: str
    required: bool = True
    # Paths answered with 503 when a database-backed group is inactive.
    unavailable_paths: Tuple[str, ...] = ()

    @property
    def needs_database(self) -> bool:
        return self.name in DATABASE_BACKED


CAPABILITIES: Tuple[CapabilitySpec, ...] = (
    CapabilitySpec(
        name=CapabilityName.RECORDS,
        module="police_records.api.records_controller",
        attribute="register_records_routes",
        unavailable_paths=(GEOFILES_PATH, CUSTODIAL_RECORDS_PATH),
    ),
    CapabilitySpec(
        name=CapabilityName.EVIDENCE,
        module="police_records.api.evidence_controller",
        attribute="register_evidence_routes",
    ),
    CapabilitySpec(
        name=CapabilityName.CUSTODIAL,
        module="police_records.api.custodial_controller",
        attribute="register_custodial_routes",
    ),
    CapabilitySpec(
        name=CapabilityName.ADDITIONAL,
        module="police_records.api.additional_routes",
        attribute="register_additional_routes",
        required=False,
    ),
)
