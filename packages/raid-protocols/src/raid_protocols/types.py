"""
Topology value types for RAID reconciliation.

This module defines the data structures shared by the validator, differ,
planner and controller clients:

- Role / DeviceKind: the two axes a RAID member is tagged by
- RAIDLevel: redundancy scheme with its minimum active-member count
- DeviceRef: one physical member (id + kind)
- Topology: declared membership of one array at one point in time
- Batch: one mutation call against the controller
- ArrayRef / Machine / ArraySummary: controller-side identifiers and facts

All types are frozen dataclasses. Topology values are built fresh for
every reconciliation and never mutated in place; use replace_members()
or Batch.apply_to() to derive a new value.
"""

from dataclasses import dataclass, field, replace
from enum import Enum

DeviceId = str
"""Opaque controller identifier for a block device or partition."""


class Role(str, Enum):
    """Role a member plays in the array."""

    ACTIVE = "active"
    SPARE = "spare"

    @property
    def opposite(self) -> "Role":
        return Role.SPARE if self is Role.ACTIVE else Role.ACTIVE


class DeviceKind(str, Enum):
    """
    Kind of physical member.

    Values match the device "type" strings reported by the controller.
    """

    DEVICE = "physical"
    PARTITION = "partition"


class RAIDLevel(str, Enum):
    """Supported redundancy schemes."""

    RAID_0 = "0"
    RAID_1 = "1"
    RAID_5 = "5"
    RAID_6 = "6"
    RAID_10 = "10"

    @property
    def min_active(self) -> int:
        """Minimum number of active members (devices + partitions)."""
        return _MIN_ACTIVE[self]

    @property
    def allows_spares(self) -> bool:
        return self is not RAIDLevel.RAID_0

    @property
    def maas_name(self) -> str:
        """Level name as used by the controller API (e.g. "raid-1")."""
        return f"raid-{self.value}"

    @classmethod
    def from_maas(cls, name: str) -> "RAIDLevel":
        return cls(name.replace("raid-", ""))


_MIN_ACTIVE = {
    RAIDLevel.RAID_0: 2,
    RAIDLevel.RAID_1: 2,
    RAIDLevel.RAID_5: 3,
    RAIDLevel.RAID_6: 4,
    RAIDLevel.RAID_10: 3,
}

# Field names on Topology, keyed by (role, kind)
_BUCKET_FIELDS = {
    (Role.ACTIVE, DeviceKind.DEVICE): "active_devices",
    (Role.ACTIVE, DeviceKind.PARTITION): "active_partitions",
    (Role.SPARE, DeviceKind.DEVICE): "spare_devices",
    (Role.SPARE, DeviceKind.PARTITION): "spare_partitions",
}

BUCKETS: tuple[tuple[Role, DeviceKind], ...] = tuple(_BUCKET_FIELDS)
"""Every (role, kind) bucket in a fixed order."""


@dataclass(frozen=True)
class DeviceRef:
    """
    Identifies one physical member of an array.

    Ids are only unique per kind: the controller numbers block devices
    and partitions independently, so comparisons must include the kind.
    """

    id: DeviceId
    kind: DeviceKind

    def __str__(self) -> str:
        label = "block device" if self.kind is DeviceKind.DEVICE else "partition"
        return f"{label} {self.id}"


@dataclass(frozen=True)
class Topology:
    """
    Declared membership of one array.

    Attributes:
        level: Redundancy scheme of the array.
        active_devices: Whole devices contributing to redundancy.
        active_partitions: Partitions contributing to redundancy.
        spare_devices: Whole devices held in reserve.
        spare_partitions: Partitions held in reserve.
    """

    level: RAIDLevel
    active_devices: frozenset[DeviceId] = frozenset()
    active_partitions: frozenset[DeviceId] = frozenset()
    spare_devices: frozenset[DeviceId] = frozenset()
    spare_partitions: frozenset[DeviceId] = frozenset()

    @classmethod
    def build(
        cls,
        level: RAIDLevel | str,
        active_devices=(),
        active_partitions=(),
        spare_devices=(),
        spare_partitions=(),
    ) -> "Topology":
        """Build a Topology from any iterables of ids."""
        return cls(
            level=RAIDLevel(level),
            active_devices=frozenset(str(i) for i in active_devices),
            active_partitions=frozenset(str(i) for i in active_partitions),
            spare_devices=frozenset(str(i) for i in spare_devices),
            spare_partitions=frozenset(str(i) for i in spare_partitions),
        )

    def members(self, role: Role, kind: DeviceKind) -> frozenset[DeviceId]:
        """Ids in a single (role, kind) bucket."""
        return getattr(self, _BUCKET_FIELDS[(role, kind)])

    def refs(self, role: Role) -> frozenset[DeviceRef]:
        """All members holding a role, as DeviceRefs."""
        return frozenset(
            DeviceRef(id=i, kind=kind)
            for kind in DeviceKind
            for i in self.members(role, kind)
        )

    def replace_members(
        self, role: Role, kind: DeviceKind, ids: frozenset[DeviceId]
    ) -> "Topology":
        """Return a copy with one bucket replaced."""
        return replace(self, **{_BUCKET_FIELDS[(role, kind)]: frozenset(ids)})

    @property
    def active_count(self) -> int:
        return len(self.active_devices) + len(self.active_partitions)

    @property
    def spare_count(self) -> int:
        return len(self.spare_devices) + len(self.spare_partitions)

    @property
    def whole_devices(self) -> frozenset[DeviceId]:
        """Whole-device members regardless of role."""
        return self.active_devices | self.spare_devices

    def collisions(self) -> frozenset[DeviceRef]:
        """Members listed as both active and spare."""
        return self.refs(Role.ACTIVE) & self.refs(Role.SPARE)

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization (ids sorted)."""
        data: dict = {"level": self.level.value}
        for name in _BUCKET_FIELDS.values():
            data[name] = sorted(getattr(self, name))
        return data


class Phase(str, Enum):
    """
    Stages of an update, in execution order.

    Adds always precede the removals that could otherwise lower the
    active count, and a member moving between roles is removed and
    re-added in different phases.
    """

    ADD_NEW = "add_new"
    REMOVE_SPARES = "remove_spares"
    ADD_MOVED_TO_ACTIVE = "add_moved_to_active"
    REMOVE_ACTIVES = "remove_actives"
    ADD_MOVED_TO_SPARE = "add_moved_to_spare"

    @property
    def number(self) -> int:
        return list(Phase).index(self) + 1


@dataclass(frozen=True)
class Batch:
    """
    One mutation call against the controller.

    Field names mirror the controller's update parameters. A batch never
    lists the same member in more than one of its add/remove sets.
    """

    phase: Phase
    add_active_devices: frozenset[DeviceId] = frozenset()
    add_active_partitions: frozenset[DeviceId] = frozenset()
    add_spare_devices: frozenset[DeviceId] = frozenset()
    add_spare_partitions: frozenset[DeviceId] = frozenset()
    remove_active_devices: frozenset[DeviceId] = frozenset()
    remove_active_partitions: frozenset[DeviceId] = frozenset()
    remove_spare_devices: frozenset[DeviceId] = frozenset()
    remove_spare_partitions: frozenset[DeviceId] = frozenset()

    def _refs(self, prefix: str, role: Role) -> list[DeviceRef]:
        devices = getattr(self, f"{prefix}_{role.value}_devices")
        partitions = getattr(self, f"{prefix}_{role.value}_partitions")
        return [DeviceRef(i, DeviceKind.DEVICE) for i in devices] + [
            DeviceRef(i, DeviceKind.PARTITION) for i in partitions
        ]

    def added(self, role: Role) -> frozenset[DeviceRef]:
        return frozenset(self._refs("add", role))

    def removed(self, role: Role) -> frozenset[DeviceRef]:
        return frozenset(self._refs("remove", role))

    @property
    def is_empty(self) -> bool:
        return not any(
            self.added(role) or self.removed(role) for role in Role
        )

    def conflicts(self) -> frozenset[DeviceRef]:
        """Members appearing in more than one add/remove set."""
        seen: set[DeviceRef] = set()
        conflicting: set[DeviceRef] = set()
        for prefix in ("add", "remove"):
            for role in Role:
                for ref in self._refs(prefix, role):
                    if ref in seen:
                        conflicting.add(ref)
                    seen.add(ref)
        return frozenset(conflicting)

    def apply_to(self, topology: Topology) -> Topology:
        """Simulate this batch against a topology (removes, then adds)."""
        result = topology
        for role in Role:
            for kind in DeviceKind:
                removed = {r.id for r in self.removed(role) if r.kind is kind}
                added = {r.id for r in self.added(role) if r.kind is kind}
                current = result.members(role, kind)
                result = result.replace_members(
                    role, kind, frozenset((current - removed) | added)
                )
        return result

    def to_dict(self) -> dict:
        data: dict = {"phase": self.phase.value}
        for prefix in ("add", "remove"):
            for role in Role:
                for kind in ("devices", "partitions"):
                    name = f"{prefix}_{role.value}_{kind}"
                    data[name] = sorted(getattr(self, name))
        return data


@dataclass(frozen=True)
class ArrayRef:
    """Locates one array on the controller."""

    system_id: str
    array_id: int

    def __str__(self) -> str:
        return f"{self.system_id}/raid/{self.array_id}"


@dataclass(frozen=True)
class Machine:
    """
    Facts about the machine owning an array.

    Attributes:
        system_id: Controller system identifier.
        hostname: Machine hostname.
        fqdn: Fully qualified domain name.
        boot_disk_id: Id of the boot disk, if the controller reports one.
        boot_disk_name: Name of the boot disk (for error messages).
        partitioned_device_ids: Whole devices that already carry partitions.
        device_names: Block device id to name, for error messages.
    """

    system_id: str
    hostname: str = ""
    fqdn: str = ""
    boot_disk_id: DeviceId | None = None
    boot_disk_name: str = ""
    partitioned_device_ids: frozenset[DeviceId] = frozenset()
    device_names: dict[DeviceId, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class ArraySummary:
    """
    Observed state of an array as reported by the controller.

    Attributes:
        id: Array id on the controller.
        name: Array name.
        system_id: Owning machine.
        topology: Current active/spare membership and level.
        size_bytes: Size of the virtual block device.
        virtual_device_id: Block device id of the assembled array.
        fs_type: Filesystem on the virtual device, if formatted.
        mount_point: Where the virtual device is mounted, if mounted.
        mount_options: Mount options, if mounted.
    """

    id: int
    name: str
    system_id: str
    topology: Topology
    size_bytes: int = 0
    virtual_device_id: int | None = None
    fs_type: str | None = None
    mount_point: str | None = None
    mount_options: str | None = None

    @property
    def ref(self) -> ArrayRef:
        return ArrayRef(system_id=self.system_id, array_id=self.id)

    @property
    def size_gigabytes(self) -> int:
        return round(self.size_bytes / 1_000_000_000)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "system_id": self.system_id,
            "size_gigabytes": self.size_gigabytes,
            "fs_type": self.fs_type,
            "mount_point": self.mount_point,
            "mount_options": self.mount_options,
            **self.topology.to_dict(),
        }
