"""
Tests for RAIDReconciler.

These tests verify the full lifecycle against FakeController:
- create() validates before creating, then formats and mounts
- preview() plans without mutating and rejects level changes
- update() renames, applies staged batches and re-reads the array
- delete() resolves the machine and deletes the array
- Invalid declarations fail before any mutating controller call
"""

import pytest

from raid_core.declaration import RAIDSpec
from raid_core.exceptions import (
    ApplyError,
    LevelChangeError,
    MountConfigError,
    NotFoundError,
    TopologyValidationError,
)
from raid_core.reconciler import RAIDReconciler
from raid_protocols import Phase, Topology

MUTATING = {"create_array", "rename_array", "apply_batch", "delete_array", "format_and_mount"}


def spec(**overrides) -> RAIDSpec:
    data = {
        "name": "md0",
        "machine": "node-1",
        "level": "1",
        "block_devices": ["2", "3"],
    }
    data.update(overrides)
    return RAIDSpec.model_validate(data)


def mutations(controller):
    return [call[0] for call in controller.calls if call[0] in MUTATING]


# =============================================================================
# Create
# =============================================================================


class TestCreate:
    """Tests for RAIDReconciler.create()."""

    @pytest.mark.asyncio
    async def test_create_array(self, controller):
        reconciler = RAIDReconciler(client=controller)

        summary = await reconciler.create(spec(spare_partitions=["10"]))

        assert summary.name == "md0"
        assert summary.system_id == "abc123"
        assert summary.topology == Topology.build(
            "1", active_devices=["2", "3"], spare_partitions=["10"]
        )
        assert mutations(controller) == ["create_array"]

    @pytest.mark.asyncio
    async def test_create_formats_and_mounts(self, controller):
        reconciler = RAIDReconciler(client=controller)

        summary = await reconciler.create(
            spec(fs_type="ext4", mount_point="/srv", mount_options="noatime")
        )

        assert mutations(controller) == ["create_array", "format_and_mount"]
        assert controller.calls[-2] == (
            "format_and_mount", "abc123", summary.virtual_device_id, "ext4", "/srv", "noatime"
        )
        assert summary.fs_type == "ext4"
        assert summary.mount_point == "/srv"

    @pytest.mark.asyncio
    async def test_level_5_with_two_active_rejected_before_any_call(self, controller):
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(TopologyValidationError) as exc_info:
            await reconciler.create(spec(level="5"))

        assert exc_info.value.kinds == {"insufficient_active_count"}
        assert mutations(controller) == []

    @pytest.mark.asyncio
    async def test_boot_disk_rejected(self, controller):
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(TopologyValidationError) as exc_info:
            await reconciler.create(spec(block_devices=["2", "3"], spare_devices=["1"]))

        assert "boot_disk_conflict" in exc_info.value.kinds
        assert "sda" in str(exc_info.value)
        assert mutations(controller) == []

    @pytest.mark.asyncio
    async def test_mount_without_fs_type_rejected_first(self, controller):
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(MountConfigError):
            await reconciler.create(spec(mount_point="/srv"))

        assert controller.calls == []

    @pytest.mark.asyncio
    async def test_unknown_machine(self, controller):
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(NotFoundError, match="machine"):
            await reconciler.create(spec(machine="nope"))


# =============================================================================
# Preview / Update
# =============================================================================


class TestUpdate:
    """Tests for RAIDReconciler.preview() and update()."""

    @pytest.mark.asyncio
    async def test_unchanged_declaration_is_noop(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        preview = await reconciler.preview(existing.id, spec())

        assert preview.is_noop
        assert mutations(controller) == []

    @pytest.mark.asyncio
    async def test_preview_does_not_mutate(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        preview = await reconciler.preview(existing.id, spec(block_devices=["2", "4"]))

        assert [b.phase for b in preview.batches] == [Phase.ADD_NEW, Phase.REMOVE_ACTIVES]
        assert mutations(controller) == []

    @pytest.mark.asyncio
    async def test_update_swaps_roles_in_phases(self, controller):
        existing = controller.add_array(
            "abc123",
            "md0",
            Topology.build("1", active_devices=["2", "3"], spare_devices=["4"]),
        )
        reconciler = RAIDReconciler(client=controller)

        summary = await reconciler.update(
            existing.id, spec(block_devices=["2", "4"], spare_devices=["3"])
        )

        assert summary.topology == Topology.build(
            "1", active_devices=["2", "4"], spare_devices=["3"]
        )
        assert [b.phase for b in controller.batches] == [
            Phase.REMOVE_SPARES,
            Phase.ADD_MOVED_TO_ACTIVE,
            Phase.REMOVE_ACTIVES,
            Phase.ADD_MOVED_TO_SPARE,
        ]
        assert all(state.active_count >= 2 for state in controller.history)

    @pytest.mark.asyncio
    async def test_update_renames(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        summary = await reconciler.update(existing.id, spec(name="data"))

        assert summary.name == "data"
        assert mutations(controller) == ["rename_array"]

    @pytest.mark.asyncio
    async def test_level_change_rejected(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(LevelChangeError) as exc_info:
            await reconciler.update(existing.id, spec(level="5", block_devices=["2", "3", "4"]))

        assert exc_info.value.current.value == "1"
        assert exc_info.value.requested.value == "5"
        assert mutations(controller) == []

    @pytest.mark.asyncio
    async def test_invalid_update_rejected_before_mutation(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(TopologyValidationError):
            await reconciler.update(existing.id, spec(block_devices=["2"]))

        assert mutations(controller) == []

    @pytest.mark.asyncio
    async def test_apply_failure_surfaces(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        controller.fail_on_call = 2
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(ApplyError) as exc_info:
            await reconciler.update(existing.id, spec(block_devices=["4", "5"]))

        assert exc_info.value.phase is Phase.REMOVE_ACTIVES
        assert exc_info.value.last_completed_phase is Phase.ADD_NEW

    @pytest.mark.asyncio
    async def test_format_only_when_changed(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        await reconciler.update(existing.id, spec(fs_type="ext4", mount_point="/srv"))
        await reconciler.update(existing.id, spec(fs_type="ext4", mount_point="/srv"))

        assert mutations(controller) == ["format_and_mount"]

    @pytest.mark.asyncio
    async def test_remount_without_reformat(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        await reconciler.update(existing.id, spec(fs_type="ext4", mount_point="/srv"))
        await reconciler.update(existing.id, spec(fs_type="ext4", mount_point="/data"))

        format_calls = [c for c in controller.calls if c[0] == "format_and_mount"]
        assert format_calls[-1][3:] == (None, "/data", None)

    @pytest.mark.asyncio
    async def test_missing_array(self, controller):
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(NotFoundError, match="raid"):
            await reconciler.update(42, spec())


# =============================================================================
# Read / Delete
# =============================================================================


class TestReadDelete:
    """Tests for RAIDReconciler.read() and delete()."""

    @pytest.mark.asyncio
    async def test_read_by_hostname(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        summary = await reconciler.read("node-1.maas", existing.id)

        assert summary == existing

    @pytest.mark.asyncio
    async def test_delete(self, controller):
        existing = controller.add_array(
            "abc123", "md0", Topology.build("1", active_devices=["2", "3"])
        )
        reconciler = RAIDReconciler(client=controller)

        await reconciler.delete("abc123", existing.id)

        assert existing.id not in controller.arrays

    @pytest.mark.asyncio
    async def test_delete_missing(self, controller):
        reconciler = RAIDReconciler(client=controller)

        with pytest.raises(NotFoundError):
            await reconciler.delete("abc123", 7)
