"""
MAAS controller implementation for RAID reconciliation.

This package provides the MAAS-specific implementation of the
ControllerClientProtocol defined in raid-protocols. It includes:

- MAASClient: RAID, machine and block-device calls against MAAS API 2.0
- MAASAuth: OAuth PLAINTEXT request signing
- MAAS-specific response types for API parsing
- create_maas_client: factory used by the CLI
"""

from raid_maas.auth import MAASAuth
from raid_maas.client import (
    MAASClient,
    machine_from_maas,
    split_device_types,
    summary_from_maas,
)
from raid_maas.factory import create_maas_client
from raid_maas.types import (
    MAASBlockDevice,
    MAASBootDisk,
    MAASBootInterface,
    MAASFilesystem,
    MAASMachine,
    MAASPartition,
    MAASRAID,
    MAASRAIDDevice,
    MAASVirtualDevice,
)

__all__ = [
    # Client
    "MAASClient",
    "MAASAuth",
    "create_maas_client",
    # Conversions
    "machine_from_maas",
    "split_device_types",
    "summary_from_maas",
    # MAAS API types
    "MAASBlockDevice",
    "MAASBootDisk",
    "MAASBootInterface",
    "MAASFilesystem",
    "MAASMachine",
    "MAASPartition",
    "MAASRAID",
    "MAASRAIDDevice",
    "MAASVirtualDevice",
]
