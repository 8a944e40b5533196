"""
Declared RAID configuration.

RAIDSpec is the user-facing description of one array: which machine owns
it, its level, its active and spare members, and how its virtual block
device is formatted and mounted. It is loaded from JSON by the CLI and
converted into a Topology for validation and diffing.

Per project patterns:
- Pydantic BaseModel for validation and serialization
- Field() with descriptions for documentation
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from raid_protocols import RAIDLevel, Topology

from raid_core.exceptions import MountConfigError


class RAIDSpec(BaseModel):
    """Declared configuration of one RAID array."""

    name: str = Field(description="The name for the RAID")
    machine: str = Field(
        description="Machine identifier (system ID, hostname, FQDN or boot MAC)"
    )
    level: RAIDLevel = Field(description='RAID level: "0", "1", "5", "6" or "10"')
    block_devices: list[str] = Field(
        default_factory=list,
        description="Block devices used as active members",
    )
    partitions: list[str] = Field(
        default_factory=list,
        description="Partitions used as active members",
    )
    spare_devices: list[str] = Field(
        default_factory=list,
        description="Block devices used as spares",
    )
    spare_partitions: list[str] = Field(
        default_factory=list,
        description="Partitions used as spares",
    )
    fs_type: str | None = Field(
        default=None, description="Filesystem type; unformatted if unset"
    )
    mount_point: str | None = Field(
        default=None, description="Mount point; unmounted if unset"
    )
    mount_options: str | None = Field(
        default=None, description="Comma separated mount options"
    )

    @field_validator("level", mode="before")
    @classmethod
    def _level_as_string(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str) and value.startswith("raid-"):
            return value.replace("raid-", "")
        return value

    @field_validator(
        "block_devices", "partitions", "spare_devices", "spare_partitions", mode="before"
    )
    @classmethod
    def _ids_as_strings(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set)):
            return [str(v) for v in value]
        return value

    def to_topology(self) -> Topology:
        """Candidate topology described by this declaration."""
        return Topology.build(
            level=self.level,
            active_devices=self.block_devices,
            active_partitions=self.partitions,
            spare_devices=self.spare_devices,
            spare_partitions=self.spare_partitions,
        )

    def check_mount_config(self) -> None:
        """
        Ensure mounting is only requested together with a filesystem.

        Raises:
            MountConfigError: If mount_point is set without fs_type.
        """
        if self.mount_point and not self.fs_type:
            raise MountConfigError(self.mount_point)

    @classmethod
    def from_file(cls, path: Path) -> "RAIDSpec":
        """Load a declaration from a JSON file."""
        return cls.model_validate(json.loads(path.read_text()))
