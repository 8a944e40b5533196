"""
MAAS-specific Pydantic response types.

This module provides Pydantic models for parsing responses from the MAAS
2.0 REST API:
- Machines: system identity, boot disk and block-device/partition graph
- RAIDs: level, active/spare members, virtual block device

These are API response types for external data validation. Internal
types (Topology, Machine, ArraySummary) are dataclasses in raid_protocols.

Notes:
- Ids are integers in the API but opaque strings internally
- RAID levels are reported as "raid-1", declared as "1"
- RAID member "type" is "physical" for block devices, "partition" otherwise
- Fields not listed here are ignored
"""

from pydantic import BaseModel, Field


# =============================================================================
# Machine Types
# =============================================================================
# GET /api/2.0/machines/


class MAASPartition(BaseModel):
    """Partition on a block device."""

    id: int
    path: str = ""


class MAASBlockDevice(BaseModel):
    """
    Block device in a machine's blockdevice_set.

    A device with partitions cannot be a RAID member itself.
    """

    id: int
    name: str = ""
    partitions: list[MAASPartition] = Field(default_factory=list)


class MAASBootDisk(BaseModel):
    """The 'boot_disk' object of a machine (null if undetermined)."""

    id: int
    name: str = ""


class MAASBootInterface(BaseModel):
    """The 'boot_interface' object of a machine."""

    mac_address: str = ""


class MAASMachine(BaseModel):
    """
    Machine entry from GET /machines/.

    Example (abridged):
    {
        "system_id": "abc123",
        "hostname": "node-1",
        "fqdn": "node-1.maas",
        "boot_interface": {"mac_address": "52:54:00:ab:cd:ef"},
        "boot_disk": {"id": 1, "name": "sda"},
        "blockdevice_set": [
            {"id": 1, "name": "sda", "partitions": [{"id": 10}]},
            {"id": 2, "name": "sdb", "partitions": []}
        ]
    }
    """

    system_id: str
    hostname: str = ""
    fqdn: str = ""
    boot_interface: MAASBootInterface | None = None
    boot_disk: MAASBootDisk | None = None
    blockdevice_set: list[MAASBlockDevice] = Field(default_factory=list)

    def matches(self, identifier: str) -> bool:
        """True if identifier is this machine's system id, hostname, FQDN or boot MAC."""
        mac = self.boot_interface.mac_address if self.boot_interface else ""
        return identifier in {self.system_id, self.hostname, self.fqdn} or (
            bool(mac) and identifier.lower() == mac.lower()
        )


# =============================================================================
# RAID Types
# =============================================================================
# GET /api/2.0/nodes/{system_id}/raid/{id}/


class MAASRAIDDevice(BaseModel):
    """Active or spare member of a RAID."""

    id: int
    name: str = ""
    type: str  # "physical" or "partition"


class MAASFilesystem(BaseModel):
    """Filesystem on a block device (null if unformatted)."""

    fstype: str | None = None
    mount_point: str | None = None
    mount_options: str | None = None


class MAASVirtualDevice(BaseModel):
    """The block device assembled from the RAID members."""

    id: int
    system_id: str = ""
    filesystem: MAASFilesystem | None = None


class MAASRAID(BaseModel):
    """
    Response from GET /nodes/{system_id}/raid/{id}/.

    Example (abridged):
    {
        "id": 7,
        "name": "md0",
        "level": "raid-1",
        "system_id": "abc123",
        "size": 1999307276288,
        "devices": [{"id": 2, "name": "sdb", "type": "physical"}],
        "spare_devices": [{"id": 11, "name": "sdc1", "type": "partition"}],
        "virtual_device": {"id": 40, "filesystem": {"fstype": "ext4"}}
    }
    """

    id: int
    name: str
    level: str
    system_id: str
    size: int = 0
    devices: list[MAASRAIDDevice] = Field(default_factory=list)
    spare_devices: list[MAASRAIDDevice] = Field(default_factory=list)
    virtual_device: MAASVirtualDevice | None = None
