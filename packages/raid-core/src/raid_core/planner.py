"""
Staged update planner.

The controller only offers flat add/remove calls. It rejects a call that
would take the array below its level's minimum active count and misbehaves
when a member appears in both an add and a remove list of one call. A
role swap (active <-> spare) therefore cannot be a single call.

plan_batches() turns a DiffSet into at most five batches, run in order:

1. add new members (active and spare, pure additions)
2. remove stale spares, including spares moving to active
3. add members moved to active
4. remove stale actives, including actives moving to spare
5. add members moved to spare

Spares never count towards the minimum, so removing them early is safe.
Actives are only removed after every incoming active has been added, so
the active count never dips below that of the old or new topology.
Empty phases are skipped.
"""

import logging

from raid_protocols import Batch, DeviceKind, DeviceRef, Phase, Role, Topology

from raid_core.differ import DiffSet, diff_topologies

logger = logging.getLogger(__name__)


def _batch(
    phase: Phase,
    add: dict[Role, frozenset[DeviceRef]] | None = None,
    remove: dict[Role, frozenset[DeviceRef]] | None = None,
) -> Batch:
    """Build a Batch from role -> DeviceRef sets."""
    add = add or {}
    remove = remove or {}
    fields = {}
    for prefix, sets in (("add", add), ("remove", remove)):
        for role in Role:
            refs = sets.get(role, frozenset())
            fields[f"{prefix}_{role.value}_devices"] = frozenset(
                r.id for r in refs if r.kind is DeviceKind.DEVICE
            )
            fields[f"{prefix}_{role.value}_partitions"] = frozenset(
                r.id for r in refs if r.kind is DeviceKind.PARTITION
            )
    return Batch(phase=phase, **fields)


def plan_batches(diff: DiffSet) -> list[Batch]:
    """
    Order a diff into controller batches.

    Args:
        diff: Output of diff_topologies().

    Returns:
        Non-empty batches in execution order. Empty when nothing changed.
    """
    candidates = [
        _batch(
            Phase.ADD_NEW,
            add={role: diff.created(role) for role in Role},
        ),
        _batch(
            Phase.REMOVE_SPARES,
            remove={Role.SPARE: diff.removed(Role.SPARE) | diff.moved(Role.ACTIVE)},
        ),
        _batch(
            Phase.ADD_MOVED_TO_ACTIVE,
            add={Role.ACTIVE: diff.moved(Role.ACTIVE)},
        ),
        _batch(
            Phase.REMOVE_ACTIVES,
            remove={Role.ACTIVE: diff.removed(Role.ACTIVE) | diff.moved(Role.SPARE)},
        ),
        _batch(
            Phase.ADD_MOVED_TO_SPARE,
            add={Role.SPARE: diff.moved(Role.SPARE)},
        ),
    ]

    batches = []
    for batch in candidates:
        if batch.is_empty:
            logger.debug(f"Skipping empty phase {batch.phase.value}")
            continue
        batches.append(batch)
    return batches


def plan_update(old: Topology, new: Topology) -> list[Batch]:
    """Diff two topologies and plan the batches between them."""
    return plan_batches(diff_topologies(old, new))


def simulate(old: Topology, batches: list[Batch]) -> list[Topology]:
    """
    Apply batches to a topology without a controller.

    Returns:
        The topology after each batch, in order.
    """
    states = []
    current = old
    for batch in batches:
        current = batch.apply_to(current)
        states.append(current)
    return states
