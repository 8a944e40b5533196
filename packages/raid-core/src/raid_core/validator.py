"""
Topology validation for RAID declarations.

This module checks a candidate topology against the constraints the
controller enforces (or fails on unhelpfully) before any mutation is
attempted:

- Role collision: a member listed as both active and spare
- Boot disk conflict: the boot disk used as a whole-device member
- Partitioned device: a whole device that carries partitions used as a member
- Insufficient active count: fewer actives than the level requires
- Spares not allowed: level 0 with spares

Checks are independent; validate_topology() runs all of them and returns
every violation found. Atypical but legal layouts produce advisory
warnings, logged and returned, never raised.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from raid_protocols import DeviceId, DeviceKind, DeviceRef, RAIDLevel, Topology

from raid_core.exceptions import TopologyValidationError

logger = logging.getLogger(__name__)


class ViolationKind(str, Enum):
    """Fatal topology violations."""

    ROLE_COLLISION = "role_collision"
    BOOT_DISK_CONFLICT = "boot_disk_conflict"
    PARTITIONED_DEVICE_AS_MEMBER = "partitioned_device_as_member"
    INSUFFICIENT_ACTIVE_COUNT = "insufficient_active_count"
    SPARES_NOT_ALLOWED = "spares_not_allowed"


@dataclass(frozen=True)
class TopologyViolation:
    """
    A single fatal violation.

    Attributes:
        kind: Which constraint was violated
        message: Human-readable description with the corrective action
        device: Offending member, for member-specific violations
    """

    kind: ViolationKind
    message: str
    device: DeviceRef | None = None


@dataclass
class ValidationReport:
    """Outcome of validate_topology()."""

    violations: list[TopologyViolation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def raise_for_violations(self) -> None:
        """Raise TopologyValidationError if any violation was found."""
        if self.violations:
            raise TopologyValidationError(self.violations)


def check_role_collisions(candidate: Topology) -> list[TopologyViolation]:
    """Members listed as both active and spare, devices and partitions separately."""
    violations = []
    for ref in sorted(candidate.collisions(), key=lambda r: (r.kind.value, r.id)):
        violations.append(
            TopologyViolation(
                kind=ViolationKind.ROLE_COLLISION,
                message=(
                    f"cannot include {ref} as both active and spare, "
                    "specify only a single location for the disk"
                ),
                device=ref,
            )
        )
    return violations


def check_boot_disk(
    candidate: Topology,
    boot_disk_id: DeviceId | None,
    boot_disk_name: str = "",
) -> TopologyViolation | None:
    """
    The boot disk may not be a whole-device member.

    Once the boot disk participates the controller partitions every whole
    device in the array, so whole devices and the boot disk cannot coexist.
    A partition on the boot disk is accepted.
    """
    if boot_disk_id is None or boot_disk_id not in candidate.whole_devices:
        return None

    name = f" ({boot_disk_name})" if boot_disk_name else ""
    return TopologyViolation(
        kind=ViolationKind.BOOT_DISK_CONFLICT,
        message=(
            f"cannot construct a RAID with block devices if the boot disk "
            f"{boot_disk_id}{name} is participating. Provide partitions on top "
            "of provided block devices instead"
        ),
        device=DeviceRef(boot_disk_id, DeviceKind.DEVICE),
    )


def check_partitionless_devices(
    candidate: Topology,
    partitioned_device_ids: Iterable[DeviceId],
    device_names: Mapping[DeviceId, str] | None = None,
) -> list[TopologyViolation]:
    """Whole devices that already carry partitions must be used via their partitions."""
    device_names = device_names or {}
    partitioned = set(partitioned_device_ids)
    violations = []
    for device_id in sorted(candidate.whole_devices & partitioned):
        name = device_names.get(device_id, device_id)
        violations.append(
            TopologyViolation(
                kind=ViolationKind.PARTITIONED_DEVICE_AS_MEMBER,
                message=(
                    "cannot create a RAID from a block device with partitions, "
                    f"supply the partitions for {name} instead"
                ),
                device=DeviceRef(device_id, DeviceKind.DEVICE),
            )
        )
    return violations


def check_level(candidate: Topology) -> list[TopologyViolation]:
    """Active count meets the level's minimum; level 0 has no spares."""
    level = candidate.level
    violations = []

    if candidate.active_count < level.min_active:
        if level.min_active == 2:
            message = "RAIDs require at least two active disks"
        else:
            words = {3: "three", 4: "four"}
            message = (
                f"RAID level {level.value} requires at least "
                f"{words[level.min_active]} active disks"
            )
        violations.append(
            TopologyViolation(kind=ViolationKind.INSUFFICIENT_ACTIVE_COUNT, message=message)
        )

    if not level.allows_spares and candidate.spare_count > 0:
        violations.append(
            TopologyViolation(
                kind=ViolationKind.SPARES_NOT_ALLOWED,
                message=(
                    f"RAID level {level.value} cannot use hot spares, "
                    "supply active disks only"
                ),
            )
        )

    return violations


def advisory_warnings(candidate: Topology) -> list[str]:
    """Atypical layouts worth a second look. Never fatal."""
    level = candidate.level
    active = candidate.active_count
    spares = candidate.spare_count
    warnings = []

    if level is RAIDLevel.RAID_1 and spares > 1:
        warnings.append(
            f"RAID level {level.value} with {spares} spares is unusual - "
            "only one spare is used during recovery"
        )

    if level is RAIDLevel.RAID_5 and spares > 1:
        warnings.append(
            f"RAID level {level.value} with {spares} spares might not be the most "
            f"fault tolerant topology - have you considered RAID 6 with "
            f"{spares - 1} spares instead?"
        )

    if spares > active:
        warnings.append(
            f"RAID has more spares ({spares}) than active disks ({active}) - "
            "is this intentional?"
        )

    return warnings


def validate_topology(
    candidate: Topology,
    boot_disk_id: DeviceId | None = None,
    partitioned_device_ids: Iterable[DeviceId] = (),
    device_names: Mapping[DeviceId, str] | None = None,
    boot_disk_name: str = "",
) -> ValidationReport:
    """
    Run every topology check against a candidate.

    Args:
        candidate: Declared topology, including its level.
        boot_disk_id: The machine's boot disk, if any.
        partitioned_device_ids: Whole devices that have partitions.
        device_names: Optional id -> name mapping for messages.
        boot_disk_name: Optional boot disk name for messages.

    Returns:
        ValidationReport with all violations and advisory warnings.
    """
    report = ValidationReport()

    report.violations.extend(check_role_collisions(candidate))

    boot_violation = check_boot_disk(candidate, boot_disk_id, boot_disk_name)
    if boot_violation:
        report.violations.append(boot_violation)

    report.violations.extend(
        check_partitionless_devices(candidate, partitioned_device_ids, device_names)
    )
    report.violations.extend(check_level(candidate))

    report.warnings = advisory_warnings(candidate)
    for warning in report.warnings:
        logger.warning(warning)

    if report.violations:
        logger.debug(f"Topology rejected with {len(report.violations)} violation(s)")

    return report
