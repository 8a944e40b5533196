"""
RAID reconciler.

RAIDReconciler drives the full lifecycle of one declared array against a
controller: create, read, update (validate -> diff -> plan -> apply) and
delete. All controller calls are awaited one at a time; nothing runs
concurrently and nothing is retried.

Example:
    client = create_maas_client(config)
    reconciler = RAIDReconciler(client=client)

    spec = RAIDSpec.from_file(Path("raid.json"))
    summary = await reconciler.update(array_id=7, spec=spec)
"""

import logging
from dataclasses import dataclass

from raid_protocols import (
    ArrayRef,
    ArraySummary,
    Batch,
    ControllerClientProtocol,
    Machine,
)

from raid_core.applier import apply_plan
from raid_core.declaration import RAIDSpec
from raid_core.differ import DiffSet, diff_topologies
from raid_core.exceptions import LevelChangeError
from raid_core.planner import plan_batches
from raid_core.validator import ValidationReport, validate_topology

logger = logging.getLogger(__name__)


@dataclass
class UpdatePreview:
    """
    What update() would do, without doing it.

    Attributes:
        current: Array as currently observed on the controller
        diff: Per-bucket changes from current to declared membership
        batches: Planned controller calls, in order
        report: Validation report (warnings only; violations raise)
        rename: New name, if the name changes
    """

    current: ArraySummary
    diff: DiffSet
    batches: list[Batch]
    report: ValidationReport
    rename: str | None = None

    @property
    def is_noop(self) -> bool:
        return not self.batches and self.rename is None


@dataclass
class RAIDReconciler:
    """
    Reconciles declared RAID configuration with the controller.

    Attributes:
        client: Controller client (e.g. MAASClient).
    """

    client: ControllerClientProtocol

    async def _validate(self, spec: RAIDSpec) -> tuple[Machine, ValidationReport]:
        """Resolve the machine and validate the declaration before any mutation."""
        spec.check_mount_config()
        machine = await self.client.get_machine(spec.machine)

        report = validate_topology(
            spec.to_topology(),
            boot_disk_id=machine.boot_disk_id,
            partitioned_device_ids=machine.partitioned_device_ids,
            device_names=machine.device_names,
            boot_disk_name=machine.boot_disk_name,
        )
        report.raise_for_violations()
        return machine, report

    async def _format_and_mount(
        self, summary: ArraySummary, spec: RAIDSpec
    ) -> None:
        """Format/mount the virtual device when the declaration differs from it."""
        if summary.virtual_device_id is None:
            return

        fs_type = spec.fs_type if spec.fs_type and spec.fs_type != summary.fs_type else None
        mount_changed = bool(spec.mount_point) and (
            fs_type is not None
            or spec.mount_point != summary.mount_point
            or (spec.mount_options or "") != (summary.mount_options or "")
        )
        mount_point = spec.mount_point if mount_changed else None

        if fs_type is None and mount_point is None:
            return

        await self.client.format_and_mount(
            summary.system_id,
            summary.virtual_device_id,
            fs_type=fs_type,
            mount_point=mount_point,
            mount_options=spec.mount_options if mount_point else None,
        )

    async def create(self, spec: RAIDSpec) -> ArraySummary:
        """
        Create a new array from a declaration.

        Raises:
            MountConfigError: mount_point without fs_type.
            TopologyValidationError: Declared topology is invalid.
            NotFoundError: Machine does not exist.
        """
        machine, _ = await self._validate(spec)

        summary = await self.client.create_array(
            machine.system_id, spec.name, spec.to_topology()
        )
        logger.info(f"Created RAID {summary.name} ({summary.ref})")

        await self._format_and_mount(summary, spec)
        return await self.client.get_array(summary.ref)

    async def read(self, machine: str, array_id: int) -> ArraySummary:
        """Read an array, resolving the machine identifier first."""
        resolved = await self.client.get_machine(machine)
        return await self.client.get_array(
            ArrayRef(system_id=resolved.system_id, array_id=array_id)
        )

    async def preview(self, array_id: int, spec: RAIDSpec) -> UpdatePreview:
        """
        Validate and plan an update without mutating anything.

        Raises:
            MountConfigError: mount_point without fs_type.
            TopologyValidationError: Declared topology is invalid.
            LevelChangeError: Declared level differs from the array's.
            NotFoundError: Machine or array does not exist.
        """
        machine, report = await self._validate(spec)
        array = ArrayRef(system_id=machine.system_id, array_id=array_id)
        current = await self.client.get_array(array)

        desired = spec.to_topology()
        if current.topology.level != desired.level:
            raise LevelChangeError(current.topology.level, desired.level)

        diff = diff_topologies(current.topology, desired)
        return UpdatePreview(
            current=current,
            diff=diff,
            batches=plan_batches(diff),
            report=report,
            rename=spec.name if spec.name != current.name else None,
        )

    async def update(self, array_id: int, spec: RAIDSpec) -> ArraySummary:
        """
        Bring an existing array in line with a declaration.

        Raises:
            MountConfigError, TopologyValidationError, LevelChangeError:
                Before any mutation.
            ApplyError: A batch failed; completed phases stay applied.
            NotFoundError: Machine or array does not exist.
        """
        preview = await self.preview(array_id, spec)
        array = preview.current.ref

        if preview.rename is not None:
            logger.info(f"Renaming RAID {preview.current.name} to {preview.rename}")
            await self.client.rename_array(array, preview.rename)

        if preview.batches:
            logger.info(f"Updating RAID {array} in {len(preview.batches)} phase(s)")
            await apply_plan(self.client, array, preview.batches)
        else:
            logger.debug(f"RAID {array} membership already up to date")

        await self._format_and_mount(preview.current, spec)
        return await self.client.get_array(array)

    async def delete(self, machine: str, array_id: int) -> None:
        """Delete an array."""
        resolved = await self.client.get_machine(machine)
        array = ArrayRef(system_id=resolved.system_id, array_id=array_id)
        await self.client.delete_array(array)
        logger.info(f"Deleted RAID {array}")
