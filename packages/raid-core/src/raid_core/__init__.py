"""
RAID Core Library

Storage-topology reconciliation for RAID arrays managed by a bare-metal
provisioning controller. This package provides:

- Validator: reject invalid topologies before any mutation
- Differ: classify created/moved/removed members per role and kind
- Planner: order changes into at most five safe controller batches
- Applier: execute batches one at a time and read the result back
- RAIDReconciler: create/read/update/delete orchestration
- CLI infrastructure: Typer-based command structure
"""

__version__ = "0.1.0"

# Re-export public types for convenient imports
from raid_core.applier import apply_plan
from raid_core.config import ControllerConfig
from raid_core.declaration import RAIDSpec
from raid_core.differ import BucketDiff, DiffSet, diff_members, diff_topologies
from raid_core.exceptions import (
    ApplyError,
    ControllerResponseError,
    LevelChangeError,
    MountConfigError,
    NotFoundError,
    ReconcileError,
    TopologyValidationError,
)
from raid_core.planner import plan_batches, plan_update, simulate
from raid_core.reconciler import RAIDReconciler, UpdatePreview
from raid_core.validator import (
    TopologyViolation,
    ValidationReport,
    ViolationKind,
    validate_topology,
)

__all__ = [
    "__version__",
    # Orchestration
    "RAIDReconciler",
    "UpdatePreview",
    "RAIDSpec",
    "ControllerConfig",
    # Pure core
    "validate_topology",
    "ValidationReport",
    "TopologyViolation",
    "ViolationKind",
    "diff_topologies",
    "diff_members",
    "DiffSet",
    "BucketDiff",
    "plan_batches",
    "plan_update",
    "simulate",
    "apply_plan",
    # Errors
    "ReconcileError",
    "TopologyValidationError",
    "MountConfigError",
    "LevelChangeError",
    "ApplyError",
    "NotFoundError",
    "ControllerResponseError",
]
