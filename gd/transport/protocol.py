"""
Protocol definitions for dispatcher <-> worker communication.

Keep this SIMPLE and READABLE.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import pickle


@dataclass
class WorkerCommand:
    """Base class for messages exchanged with workers."""
    seq = 0  # Broadcast number, set by the dispatcher and echoed in WorkerResponse.seq


@dataclass
class RegisterWorker(WorkerCommand):
    """Register a worker with the dispatcher (worker -> dispatcher)."""
    worker_id: str


@dataclass
class WorkerLoadPartitions(WorkerCommand):
    """Store partitions of a dataset on the worker."""
    dataset_id: str
    partitions: Dict[int, list]  # partition index -> records


@dataclass
class WorkerRunJob(WorkerCommand):
    """Run an action through a stage chain on every local partition of a dataset."""
    dataset_id: str
    stages: tuple
    action: Any


@dataclass
class WorkerFreeDataset(WorkerCommand):
    """Drop a dataset's partitions."""
    dataset_id: str


@dataclass
class WorkerGetStats(WorkerCommand):
    """Request statistics from worker."""
    pass


@dataclass
class WorkerShutdown(WorkerCommand):
    """Stop the worker's command loop."""
    pass


@dataclass
class WorkerResponse:
    """Response from worker to dispatcher."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    exception: Optional[BaseException] = None  # Original failure, when it pickles
    seq: int = 0  # seq of the command this answers


# Serialization helpers

def serialize(obj):
    """Serialize object for network transmission."""
    return pickle.dumps(obj)


def deserialize(data):
    """Deserialize object from network transmission."""
    return pickle.loads(data)


def failure_response(exc: BaseException) -> WorkerResponse:
    """Build a failure response, keeping the exception if it survives pickling."""
    try:
        pickle.loads(pickle.dumps(exc))
        shipped = exc
    except Exception:
        shipped = None
    return WorkerResponse(success=False, error=f"{type(exc).__name__}: {exc}", exception=shipped)
