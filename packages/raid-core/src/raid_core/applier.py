"""
Staged applier.

Executes a planned batch list against a controller, one call at a time,
strictly in order, then re-reads the array so the caller gets the
observed topology rather than the declared one.

On the first failing call the applier stops and raises ApplyError naming
the failed phase and the last phase that completed. There is no rollback:
every completed prefix of a plan leaves the array above its minimum active
count with no member in two roles, so the caller can re-run from the
observed state.
"""

import logging

from raid_protocols import ArrayRef, Batch, ControllerClientProtocol, Phase, Topology

from raid_core.exceptions import ApplyError, NotFoundError

logger = logging.getLogger(__name__)


async def apply_plan(
    client: ControllerClientProtocol,
    array: ArrayRef,
    batches: list[Batch],
) -> Topology:
    """
    Apply batches to an array and return its refreshed topology.

    Args:
        client: Controller client executing each batch.
        array: Array being updated.
        batches: Output of plan_batches(), in order.

    Returns:
        Topology read back from the controller after the last batch.

    Raises:
        ApplyError: A batch call failed. Earlier batches stay applied.
        NotFoundError: The array vanished (raised as-is, not wrapped).
    """
    last_completed: Phase | None = None

    for batch in batches:
        conflicts = batch.conflicts()
        if conflicts:
            # plan_batches() never produces this; guard hand-built plans
            raise ValueError(
                f"Batch for phase {batch.phase.value} lists "
                f"{', '.join(sorted(str(c) for c in conflicts))} more than once"
            )

        logger.info(
            f"Applying phase {batch.phase.number} ({batch.phase.value}) to {array}"
        )
        try:
            await client.apply_batch(array, batch)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(
                f"Phase {batch.phase.value} failed on {array}; "
                f"last completed: {last_completed.value if last_completed else 'none'}"
            )
            raise ApplyError(
                phase=batch.phase, last_completed_phase=last_completed, cause=e
            ) from e
        last_completed = batch.phase

    return await client.get_array_members(array)
