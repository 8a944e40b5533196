"""
Protocol definitions for RAID topology reconciliation.

This package provides the value types and the controller Protocol shared
by the reconciler and controller client implementations. It has zero
dependencies on other raid-* packages.

Key protocols:
- ControllerClientProtocol: Interface for provisioning controllers

Key types:
- Topology: Declared active/spare membership of an array
- Batch: One mutation call against the controller
- DeviceRef, Role, DeviceKind, RAIDLevel, Phase
- ArrayRef, ArraySummary, Machine
"""

from raid_protocols.controller import ControllerClientProtocol
from raid_protocols.types import (
    BUCKETS,
    ArrayRef,
    ArraySummary,
    Batch,
    DeviceId,
    DeviceKind,
    DeviceRef,
    Machine,
    Phase,
    RAIDLevel,
    Role,
    Topology,
)

__all__ = [
    # Protocols
    "ControllerClientProtocol",
    # Data types
    "ArrayRef",
    "ArraySummary",
    "Batch",
    "BUCKETS",
    "DeviceId",
    "DeviceKind",
    "DeviceRef",
    "Machine",
    "Phase",
    "RAIDLevel",
    "Role",
    "Topology",
]
