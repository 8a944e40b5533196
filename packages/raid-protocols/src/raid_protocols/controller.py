"""
Controller client protocol definition.

The ControllerClientProtocol defines the interface the reconciler uses to
read and mutate arrays on a bare-metal provisioning controller. The MAAS
client implements it; tests substitute in-memory fakes.

Every method is a single request/response call. Implementations own the
per-call timeout and surface "resource vanished" conditions as their own
not-found error rather than retrying.
"""

from typing import Protocol, runtime_checkable

from raid_protocols.types import (
    ArrayRef,
    ArraySummary,
    Batch,
    DeviceId,
    Machine,
    Topology,
)


@runtime_checkable
class ControllerClientProtocol(Protocol):
    """
    Protocol for controller clients.

    Read operations:
    - get_machine(): resolve a machine identifier and its block-device facts
    - get_array() / get_array_members(): observed array state
    - get_boot_disk_id() / get_partitioned_device_ids(): validator facts

    Mutations:
    - create_array(), rename_array(), apply_batch(), delete_array()
    - format_and_mount(): post-step on the array's virtual block device
    """

    async def get_machine(self, identifier: str) -> Machine:
        """
        Resolve a machine by system id, hostname, FQDN or boot MAC.

        Raises:
            NotFoundError: If no machine matches.
        """
        ...

    async def get_array(self, array: ArrayRef) -> ArraySummary:
        """Read the current state of an array."""
        ...

    async def get_array_members(self, array: ArrayRef) -> Topology:
        """Read the current active/spare membership of an array."""
        ...

    async def get_boot_disk_id(self, machine: str) -> DeviceId | None:
        """Id of the machine's boot disk, or None if it has none."""
        ...

    async def get_partitioned_device_ids(self, machine: str) -> frozenset[DeviceId]:
        """Ids of whole devices on the machine that carry partitions."""
        ...

    async def create_array(
        self, system_id: str, name: str, topology: Topology
    ) -> ArraySummary:
        """Create an array with the given membership."""
        ...

    async def rename_array(self, array: ArrayRef, name: str) -> ArraySummary:
        """Change the name of an existing array."""
        ...

    async def apply_batch(self, array: ArrayRef, batch: Batch) -> ArraySummary:
        """
        Execute one mutation batch.

        The controller rejects a batch that would take the array below its
        level's minimum active count, or that lists a member in both an
        add and a remove set.
        """
        ...

    async def delete_array(self, array: ArrayRef) -> None:
        """Delete an array."""
        ...

    async def format_and_mount(
        self,
        system_id: str,
        device_id: int,
        fs_type: str | None = None,
        mount_point: str | None = None,
        mount_options: str | None = None,
    ) -> None:
        """Format and/or mount a virtual block device."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the client."""
        ...
