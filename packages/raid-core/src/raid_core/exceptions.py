"""
Exception classes for RAID reconciliation.

This module defines the error taxonomy surfaced to callers:
- TopologyValidationError: Declared topology violates a domain constraint
- MountConfigError: Mount point declared without a filesystem type
- LevelChangeError: Requested level differs from the existing array's
- ApplyError: A staged batch failed mid-update
- NotFoundError: Machine, array or device vanished on the controller
- ControllerResponseError: Controller returned data we cannot interpret

Validation errors are raised before any controller call. ApplyError leaves
the array in the state produced by the phases that completed; re-running
reconciliation from the newly observed state is safe. Nothing here is
retried internally; retry policy belongs to the caller.

Per project patterns:
- Store context data in attributes for error handling
- Include descriptive message with relevant details
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from raid_core.validator import TopologyViolation
    from raid_protocols import Phase, RAIDLevel


class ReconcileError(Exception):
    """Base exception for reconciliation errors."""


class TopologyValidationError(ReconcileError):
    """
    Raised when a declared topology violates one or more constraints.

    Attributes:
        violations: Every violation found, in check order.
    """

    def __init__(self, violations: "list[TopologyViolation]") -> None:
        self.violations = list(violations)
        details = "; ".join(v.message for v in self.violations)
        super().__init__(f"Invalid RAID topology: {details}")

    @property
    def kinds(self) -> set[str]:
        """Violation kinds present, as their string values."""
        return {v.kind.value for v in self.violations}


class MountConfigError(ReconcileError):
    """Raised when mount_point is set without fs_type."""

    def __init__(self, mount_point: str) -> None:
        self.mount_point = mount_point
        super().__init__(
            "Invalid block device mount configuration: fs_type must be "
            f"specified when mount_point ({mount_point}) is set"
        )


class LevelChangeError(ReconcileError):
    """
    Raised when an update requests a different RAID level.

    The controller cannot change the level of an existing array; it has
    to be deleted and recreated.

    Attributes:
        current: Level of the existing array
        requested: Level in the declaration
    """

    def __init__(self, current: "RAIDLevel", requested: "RAIDLevel") -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change RAID level from {current.value} to {requested.value} "
            "in place. Delete and recreate the RAID instead."
        )


class ApplyError(ReconcileError):
    """
    Raised when a batch call fails during a staged update.

    Attributes:
        phase: The phase whose batch failed
        last_completed_phase: Last phase that succeeded (None if none did)
        cause: The underlying client error
    """

    def __init__(
        self,
        phase: "Phase",
        last_completed_phase: "Phase | None",
        cause: BaseException,
    ) -> None:
        self.phase = phase
        self.last_completed_phase = last_completed_phase
        self.cause = cause
        completed = (
            f"phase {last_completed_phase.number} ({last_completed_phase.value})"
            if last_completed_phase
            else "no phase"
        )
        super().__init__(
            f"RAID update failed in phase {phase.number} ({phase.value}): {cause}. "
            f"Last completed: {completed}. The array is in an intermediate state; "
            "re-run to continue from the observed state."
        )


class NotFoundError(ReconcileError):
    """
    Raised when a resource does not exist on the controller.

    Attributes:
        resource: Kind of resource ("machine", "raid", "block device")
        identifier: The identifier that was looked up
    """

    def __init__(self, resource: str, identifier: str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} ({identifier}) not found")


class ControllerResponseError(ReconcileError):
    """Raised when the controller reports something we cannot interpret."""
