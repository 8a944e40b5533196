"""
Shared fixtures for raid-core tests.

FakeController is an in-memory ControllerClientProtocol that enforces the
rules the real controller enforces on every batch:
- a member may not appear in more than one add/remove list
- the array may not end a call below its level's minimum active count
- a member may not be both active and spare
"""

from dataclasses import replace

import pytest

from raid_core.exceptions import NotFoundError
from raid_protocols import (
    ArrayRef,
    ArraySummary,
    Batch,
    Machine,
    Topology,
)


class ControllerRejected(Exception):
    """Raised by FakeController when the real controller would reject a call."""


class FakeController:
    """In-memory controller recording every call."""

    def __init__(self) -> None:
        self.machines: dict[str, Machine] = {}
        self.arrays: dict[int, ArraySummary] = {}
        self.calls: list[tuple] = []
        self.history: list[Topology] = []
        self.fail_on_call: int | None = None
        self.closed = False
        self._next_id = 1

    # Seeding helpers

    def add_machine(self, machine: Machine) -> Machine:
        self.machines[machine.system_id] = machine
        return machine

    def add_array(self, system_id: str, name: str, topology: Topology) -> ArraySummary:
        summary = ArraySummary(
            id=self._next_id,
            name=name,
            system_id=system_id,
            topology=topology,
            size_bytes=2_000_000_000_000,
            virtual_device_id=100 + self._next_id,
        )
        self.arrays[summary.id] = summary
        self._next_id += 1
        return summary

    @property
    def batches(self) -> list[Batch]:
        return [call[2] for call in self.calls if call[0] == "apply_batch"]

    def _array(self, array: ArrayRef) -> ArraySummary:
        summary = self.arrays.get(array.array_id)
        if summary is None or summary.system_id != array.system_id:
            raise NotFoundError("raid", str(array))
        return summary

    # ControllerClientProtocol

    async def get_machine(self, identifier: str) -> Machine:
        self.calls.append(("get_machine", identifier))
        for machine in self.machines.values():
            if identifier in {machine.system_id, machine.hostname, machine.fqdn}:
                return machine
        raise NotFoundError("machine", identifier)

    async def get_array(self, array: ArrayRef) -> ArraySummary:
        self.calls.append(("get_array", array))
        return self._array(array)

    async def get_array_members(self, array: ArrayRef) -> Topology:
        self.calls.append(("get_array_members", array))
        return self._array(array).topology

    async def get_boot_disk_id(self, machine: str):
        return (await self.get_machine(machine)).boot_disk_id

    async def get_partitioned_device_ids(self, machine: str):
        return (await self.get_machine(machine)).partitioned_device_ids

    async def create_array(self, system_id: str, name: str, topology: Topology) -> ArraySummary:
        self.calls.append(("create_array", system_id, name, topology))
        return self.add_array(system_id, name, topology)

    async def rename_array(self, array: ArrayRef, name: str) -> ArraySummary:
        self.calls.append(("rename_array", array, name))
        summary = replace(self._array(array), name=name)
        self.arrays[summary.id] = summary
        return summary

    async def apply_batch(self, array: ArrayRef, batch: Batch) -> ArraySummary:
        self.calls.append(("apply_batch", array, batch))
        if self.fail_on_call is not None and len(self.batches) == self.fail_on_call:
            raise ControllerResponseFailure(f"injected failure in {batch.phase.value}")

        summary = self._array(array)
        if batch.conflicts():
            raise ControllerRejected(f"collision: {sorted(map(str, batch.conflicts()))}")

        result = batch.apply_to(summary.topology)
        if result.active_count < result.level.min_active:
            raise ControllerRejected(
                f"{result.active_count} active is below minimum {result.level.min_active}"
            )
        if result.collisions():
            raise ControllerRejected(f"double-booked: {sorted(map(str, result.collisions()))}")

        summary = replace(summary, topology=result)
        self.arrays[summary.id] = summary
        self.history.append(result)
        return summary

    async def delete_array(self, array: ArrayRef) -> None:
        self.calls.append(("delete_array", array))
        self._array(array)
        del self.arrays[array.array_id]

    async def format_and_mount(
        self,
        system_id: str,
        device_id: int,
        fs_type: str | None = None,
        mount_point: str | None = None,
        mount_options: str | None = None,
    ) -> None:
        self.calls.append(("format_and_mount", system_id, device_id, fs_type, mount_point, mount_options))
        for summary in self.arrays.values():
            if summary.system_id == system_id and summary.virtual_device_id == device_id:
                changes = {}
                if fs_type:
                    changes["fs_type"] = fs_type
                if mount_point:
                    changes["mount_point"] = mount_point
                    changes["mount_options"] = mount_options
                self.arrays[summary.id] = replace(summary, **changes)
                return
        raise NotFoundError("block device", f"{system_id}/{device_id}")

    async def aclose(self) -> None:
        self.closed = True


class ControllerResponseFailure(Exception):
    """Injected transport-level failure."""


@pytest.fixture
def controller():
    """Fresh FakeController with one machine (boot disk 1, sda partitioned)."""
    fake = FakeController()
    fake.add_machine(
        Machine(
            system_id="abc123",
            hostname="node-1",
            fqdn="node-1.maas",
            boot_disk_id="1",
            boot_disk_name="sda",
            partitioned_device_ids=frozenset({"1"}),
            device_names={"1": "sda", "2": "sdb", "3": "sdc", "4": "sdd", "5": "sde"},
        )
    )
    return fake
