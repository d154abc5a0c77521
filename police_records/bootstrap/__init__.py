"""police_records/bootstrap/__init__.py — public API of the bootstrap package."""

from police_records.bootstrap.capabilities import CAPABILITIES, CapabilitySpec
from police_records.bootstrap.sequencer import BootstrapSequencer, RegistrationOutcome, start

__all__ = [
    "BootstrapSequencer",
    "CapabilitySpec",
    "CAPABILITIES",
    "RegistrationOutcome",
    "start",
]
