"""Tests for the shared topology value types."""

import pytest

from raid_protocols import (
    ArrayRef,
    ArraySummary,
    Batch,
    DeviceKind,
    DeviceRef,
    Phase,
    RAIDLevel,
    Role,
    Topology,
)


class TestRAIDLevel:
    """Tests for RAIDLevel properties."""

    @pytest.mark.parametrize(
        "level,minimum",
        [("0", 2), ("1", 2), ("5", 3), ("6", 4), ("10", 3)],
    )
    def test_min_active(self, level, minimum):
        assert RAIDLevel(level).min_active == minimum

    def test_only_level_0_forbids_spares(self):
        assert [lvl for lvl in RAIDLevel if not lvl.allows_spares] == [RAIDLevel.RAID_0]

    def test_maas_names(self):
        assert RAIDLevel.RAID_10.maas_name == "raid-10"
        assert RAIDLevel.from_maas("raid-6") is RAIDLevel.RAID_6


class TestTopology:
    """Tests for Topology helpers."""

    def test_build_coerces_ids(self):
        topology = Topology.build("1", active_devices=[2, 3])

        assert topology.active_devices == {"2", "3"}

    def test_counts_include_both_kinds(self):
        topology = Topology.build(
            "5",
            active_devices=["1", "2"],
            active_partitions=["10"],
            spare_devices=["3"],
            spare_partitions=["11", "12"],
        )

        assert topology.active_count == 3
        assert topology.spare_count == 3
        assert topology.whole_devices == {"1", "2", "3"}

    def test_collisions_respect_kind(self):
        topology = Topology.build(
            "1", active_devices=["5"], spare_partitions=["5"], spare_devices=["6"], active_partitions=["6"]
        )

        assert topology.collisions() == frozenset()

        collided = topology.replace_members(Role.SPARE, DeviceKind.DEVICE, frozenset({"5"}))
        assert collided.collisions() == {DeviceRef("5", DeviceKind.DEVICE)}

    def test_refs(self):
        topology = Topology.build("1", active_devices=["1"], active_partitions=["1"])

        assert topology.refs(Role.ACTIVE) == {
            DeviceRef("1", DeviceKind.DEVICE),
            DeviceRef("1", DeviceKind.PARTITION),
        }

    def test_to_dict_sorted(self):
        topology = Topology.build("1", active_devices=["3", "2"])

        assert topology.to_dict() == {
            "level": "1",
            "active_devices": ["2", "3"],
            "active_partitions": [],
            "spare_devices": [],
            "spare_partitions": [],
        }


class TestBatch:
    """Tests for Batch helpers."""

    def test_empty(self):
        assert Batch(phase=Phase.ADD_NEW).is_empty

    def test_conflicts_across_lists(self):
        batch = Batch(
            phase=Phase.ADD_NEW,
            add_active_devices=frozenset({"1"}),
            add_spare_devices=frozenset({"1"}),
            remove_spare_partitions=frozenset({"1"}),
        )

        assert batch.conflicts() == {DeviceRef("1", DeviceKind.DEVICE)}

    def test_apply_to(self):
        topology = Topology.build("1", active_devices=["1", "2"], spare_devices=["3"])
        batch = Batch(
            phase=Phase.REMOVE_SPARES,
            remove_spare_devices=frozenset({"3"}),
        )

        assert batch.apply_to(topology) == Topology.build("1", active_devices=["1", "2"])

    def test_phase_numbers(self):
        assert [p.number for p in Phase] == [1, 2, 3, 4, 5]


class TestArraySummary:
    def test_ref_and_size(self):
        summary = ArraySummary(
            id=7,
            name="md0",
            system_id="abc123",
            topology=Topology.build("1", active_devices=["1", "2"]),
            size_bytes=1_999_844_147_200,
        )

        assert summary.ref == ArrayRef("abc123", 7)
        assert str(summary.ref) == "abc123/raid/7"
        assert summary.size_gigabytes == 2000
        assert summary.to_dict()["active_devices"] == ["1", "2"]
