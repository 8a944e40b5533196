"""
Topology differ.

Compares the last applied topology with a newly declared one and
classifies every member change per (role, kind) bucket:

- created: new to this role and not coming from the opposite role
- moved: new to this role and present in the opposite role before
- removed: in this role before, absent from it now

A member moving from spare to active therefore appears as "moved" in the
active bucket and as "removed" in the spare bucket. The planner relies on
that to remove it from its old role and add it to the new one in
separate batches.

All functions are pure.
"""

from dataclasses import dataclass, field

from raid_protocols import BUCKETS, DeviceId, DeviceKind, DeviceRef, Role, Topology


@dataclass(frozen=True)
class BucketDiff:
    """Changes to one (role, kind) bucket."""

    created: frozenset[DeviceId] = frozenset()
    moved: frozenset[DeviceId] = frozenset()
    removed: frozenset[DeviceId] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.moved or self.removed)


@dataclass(frozen=True)
class DiffSet:
    """Per-bucket diffs between two topologies."""

    buckets: dict[tuple[Role, DeviceKind], BucketDiff] = field(default_factory=dict)

    def bucket(self, role: Role, kind: DeviceKind) -> BucketDiff:
        return self.buckets.get((role, kind), BucketDiff())

    def _refs(self, role: Role, attr: str) -> frozenset[DeviceRef]:
        return frozenset(
            DeviceRef(i, kind)
            for kind in DeviceKind
            for i in getattr(self.bucket(role, kind), attr)
        )

    def created(self, role: Role) -> frozenset[DeviceRef]:
        return self._refs(role, "created")

    def moved(self, role: Role) -> frozenset[DeviceRef]:
        """Members moved *into* this role."""
        return self._refs(role, "moved")

    def removed(self, role: Role) -> frozenset[DeviceRef]:
        """Members leaving this role, including those moving to the other role."""
        return self._refs(role, "removed")

    @property
    def is_empty(self) -> bool:
        return all(b.is_empty for b in self.buckets.values())

    def to_dict(self) -> dict:
        data = {}
        for (role, kind), diff in self.buckets.items():
            data[f"{role.value}_{kind.value}"] = {
                "created": sorted(diff.created),
                "moved": sorted(diff.moved),
                "removed": sorted(diff.removed),
            }
        return data


def diff_members(
    old: frozenset[DeviceId],
    new: frozenset[DeviceId],
    old_counterpart: frozenset[DeviceId],
) -> BucketDiff:
    """
    Classify changes to one bucket.

    Args:
        old: Previous members of the bucket.
        new: Declared members of the bucket.
        old_counterpart: Previous members of the same kind in the opposite role.
    """
    added = new - old
    moved = added & old_counterpart
    return BucketDiff(
        created=added - moved,
        moved=moved,
        removed=old - new,
    )


def diff_topologies(old: Topology, new: Topology) -> DiffSet:
    """Diff every (role, kind) bucket of two topologies."""
    buckets = {}
    for role, kind in BUCKETS:
        buckets[(role, kind)] = diff_members(
            old=old.members(role, kind),
            new=new.members(role, kind),
            old_counterpart=old.members(role.opposite, kind),
        )
    return DiffSet(buckets=buckets)
