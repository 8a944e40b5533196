"""
MAAS API client for RAID management.

This module provides MAASClient, the ControllerClientProtocol
implementation for the MAAS 2.0 REST API. It resolves machines, reads and
mutates RAIDs, and formats/mounts the RAID's virtual block device.

MAASClient receives an injected httpx.AsyncClient with base_url set to
the versioned API root (".../MAAS/api/2.0/") and MAASAuth installed.
All methods are async, make exactly one request (get_machine and the
validator fact lookups list machines once), and fail loudly:

- HTTP 404 -> NotFoundError
- other HTTP errors -> httpx.HTTPStatusError
- malformed payloads -> pydantic.ValidationError

MAAS API Documentation:
- https://maas.io/docs/api
"""

import logging
from dataclasses import dataclass

import httpx

from raid_core.exceptions import ControllerResponseError, NotFoundError
from raid_protocols import (
    ArrayRef,
    ArraySummary,
    Batch,
    DeviceId,
    DeviceKind,
    Machine,
    RAIDLevel,
    Topology,
)

from raid_maas.types import MAASMachine, MAASRAID, MAASRAIDDevice

logger = logging.getLogger(__name__)

# Batch field -> MAAS update parameter
_UPDATE_PARAMS = {
    "add_active_devices": "add_block_devices",
    "add_active_partitions": "add_partitions",
    "add_spare_devices": "add_spare_devices",
    "add_spare_partitions": "add_spare_partitions",
    "remove_active_devices": "remove_block_devices",
    "remove_active_partitions": "remove_partitions",
    "remove_spare_devices": "remove_spare_devices",
    "remove_spare_partitions": "remove_spare_partitions",
}


def split_device_types(
    devices: list[MAASRAIDDevice],
) -> tuple[list[DeviceId], list[DeviceId]]:
    """
    Split RAID members into block device ids and partition ids.

    Raises:
        ControllerResponseError: A member has an unknown type.
    """
    block_devices: list[DeviceId] = []
    partitions: list[DeviceId] = []

    for device in devices:
        if device.type == DeviceKind.DEVICE.value:
            block_devices.append(str(device.id))
        elif device.type == DeviceKind.PARTITION.value:
            partitions.append(str(device.id))
        else:
            raise ControllerResponseError(
                f"device {device.name} has an unknown type: {device.type}"
            )

    return block_devices, partitions


def summary_from_maas(raid: MAASRAID) -> ArraySummary:
    """Convert a MAAS RAID response to an ArraySummary."""
    devices, partitions = split_device_types(raid.devices)
    spare_devices, spare_partitions = split_device_types(raid.spare_devices)

    filesystem = raid.virtual_device.filesystem if raid.virtual_device else None

    return ArraySummary(
        id=raid.id,
        name=raid.name,
        system_id=raid.system_id,
        topology=Topology.build(
            level=RAIDLevel.from_maas(raid.level),
            active_devices=devices,
            active_partitions=partitions,
            spare_devices=spare_devices,
            spare_partitions=spare_partitions,
        ),
        size_bytes=raid.size,
        virtual_device_id=raid.virtual_device.id if raid.virtual_device else None,
        fs_type=filesystem.fstype if filesystem else None,
        mount_point=filesystem.mount_point if filesystem else None,
        mount_options=filesystem.mount_options if filesystem else None,
    )


def machine_from_maas(machine: MAASMachine) -> Machine:
    """Convert a MAAS machine response to the facts the validator needs."""
    return Machine(
        system_id=machine.system_id,
        hostname=machine.hostname,
        fqdn=machine.fqdn,
        boot_disk_id=str(machine.boot_disk.id) if machine.boot_disk else None,
        boot_disk_name=machine.boot_disk.name if machine.boot_disk else "",
        partitioned_device_ids=frozenset(
            str(bd.id) for bd in machine.blockdevice_set if bd.partitions
        ),
        device_names={str(bd.id): bd.name for bd in machine.blockdevice_set},
    )


def _raise_for_status(response: httpx.Response, resource: str, identifier: str) -> None:
    if response.status_code == 404:
        raise NotFoundError(resource, identifier)
    response.raise_for_status()


@dataclass
class MAASClient:
    """
    MAAS API client with injected httpx client.

    Attributes:
        http: Pre-configured httpx.AsyncClient with base_url set to the
            versioned MAAS API root and MAASAuth installed.

    Example:
        async with httpx.AsyncClient(base_url=config.base_url, auth=auth) as http:
            client = MAASClient(http=http)
            machine = await client.get_machine("node-1")
            raid = await client.get_array(ArrayRef(machine.system_id, 7))
    """

    http: httpx.AsyncClient

    # -------------------------------------------------------------------------
    # Machines
    # -------------------------------------------------------------------------

    async def get_machine(self, identifier: str) -> Machine:
        """
        Resolve a machine by system id, hostname, FQDN or boot MAC.

        Calls GET /machines/ and matches locally.

        Raises:
            NotFoundError: No machine matches the identifier.
            httpx.HTTPStatusError: On other HTTP errors.
        """
        response = await self.http.get("/machines/")
        _raise_for_status(response, "machine", identifier)

        for item in response.json():
            machine = MAASMachine.model_validate(item)
            if machine.matches(identifier):
                return machine_from_maas(machine)

        raise NotFoundError("machine", identifier)

    async def get_boot_disk_id(self, machine: str) -> DeviceId | None:
        return (await self.get_machine(machine)).boot_disk_id

    async def get_partitioned_device_ids(self, machine: str) -> frozenset[DeviceId]:
        return (await self.get_machine(machine)).partitioned_device_ids

    # -------------------------------------------------------------------------
    # RAIDs
    # -------------------------------------------------------------------------

    def _raid_path(self, array: ArrayRef) -> str:
        return f"/nodes/{array.system_id}/raid/{array.array_id}/"

    async def get_array(self, array: ArrayRef) -> ArraySummary:
        """
        Read a RAID.

        Calls GET /nodes/{system_id}/raid/{id}/.

        Raises:
            NotFoundError: The RAID does not exist.
            ControllerResponseError: A member has an unknown type.
        """
        response = await self.http.get(self._raid_path(array))
        _raise_for_status(response, "raid", str(array))

        return summary_from_maas(MAASRAID.model_validate(response.json()))

    async def get_array_members(self, array: ArrayRef) -> Topology:
        return (await self.get_array(array)).topology

    async def create_array(
        self, system_id: str, name: str, topology: Topology
    ) -> ArraySummary:
        """
        Create a RAID.

        Calls POST /nodes/{system_id}/raids/ with every member list.
        """
        data = {
            "name": name,
            "level": topology.level.maas_name,
            "block_devices": sorted(topology.active_devices),
            "partitions": sorted(topology.active_partitions),
            "spare_devices": sorted(topology.spare_devices),
            "spare_partitions": sorted(topology.spare_partitions),
        }
        response = await self.http.post(
            f"/nodes/{system_id}/raids/",
            data={k: v for k, v in data.items() if v},
        )
        _raise_for_status(response, "machine", system_id)

        return summary_from_maas(MAASRAID.model_validate(response.json()))

    async def rename_array(self, array: ArrayRef, name: str) -> ArraySummary:
        """Calls PUT /nodes/{system_id}/raid/{id}/ with the new name."""
        response = await self.http.put(self._raid_path(array), data={"name": name})
        _raise_for_status(response, "raid", str(array))

        return summary_from_maas(MAASRAID.model_validate(response.json()))

    async def apply_batch(self, array: ArrayRef, batch: Batch) -> ArraySummary:
        """
        Execute one mutation batch.

        Calls PUT /nodes/{system_id}/raid/{id}/ with the batch's non-empty
        add/remove lists.

        Raises:
            NotFoundError: The RAID does not exist.
            httpx.HTTPStatusError: MAAS rejected the batch.
        """
        data = {}
        for batch_field, param in _UPDATE_PARAMS.items():
            ids = getattr(batch, batch_field)
            if ids:
                data[param] = sorted(ids)

        logger.debug(f"PUT {self._raid_path(array)} {data}")
        response = await self.http.put(self._raid_path(array), data=data)
        _raise_for_status(response, "raid", str(array))

        return summary_from_maas(MAASRAID.model_validate(response.json()))

    async def delete_array(self, array: ArrayRef) -> None:
        """Calls DELETE /nodes/{system_id}/raid/{id}/."""
        response = await self.http.delete(self._raid_path(array))
        _raise_for_status(response, "raid", str(array))

    # -------------------------------------------------------------------------
    # Block devices
    # -------------------------------------------------------------------------

    async def format_and_mount(
        self,
        system_id: str,
        device_id: int,
        fs_type: str | None = None,
        mount_point: str | None = None,
        mount_options: str | None = None,
    ) -> None:
        """
        Format and/or mount a block device.

        Calls POST /nodes/{system_id}/blockdevices/{id}/?op=format when
        fs_type is given, then ?op=mount when mount_point is given.
        """
        path = f"/nodes/{system_id}/blockdevices/{device_id}/"
        identifier = f"{system_id}/blockdevices/{device_id}"

        if fs_type:
            response = await self.http.post(
                path, params={"op": "format"}, data={"fstype": fs_type}
            )
            _raise_for_status(response, "block device", identifier)

        if mount_point:
            data = {"mount_point": mount_point}
            if mount_options:
                data["mount_options"] = mount_options
            response = await self.http.post(path, params={"op": "mount"}, data=data)
            _raise_for_status(response, "block device", identifier)

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self.http.aclose()
