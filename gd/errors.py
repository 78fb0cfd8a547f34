"""
Error types and common error messages for GD.

Consolidates repetitive error handling to reduce code duplication.

Failures raised by Gradient/Updater implementations or by user functions
running inside partition tasks are NOT wrapped: they propagate to the caller
unchanged. The types below cover the optimizer's own preconditions and the
transport layer.
"""


class InvalidArgumentError(ValueError):
    """Raised when an optimizer entry point is called with an unusable argument."""
    pass


class WorkerError(RuntimeError):
    """Raised when the dispatcher or a worker fails outside of user code."""
    pass


def lazy_updater_required_error(updater) -> str:
    """Error when the partition-sequential runner gets a non-lazy updater."""
    return f"Updater should be lazy, got {type(updater).__name__}"


def no_workers_error(num_workers: int = 0):
    """Error when dispatcher has no workers available."""
    return f"No workers available (registered: {num_workers}). Start workers with: python -m gd worker --host <host> -p <port>"


def worker_timeout_error(expected: int, registered: int, timeout: float):
    """Error when workers did not register in time."""
    return f"Timed out after {timeout:.1f}s waiting for {expected} worker(s) (registered: {registered})"


def task_failed_error(worker_id: str, details: str):
    """Error when a job fails on a worker and the original exception is not available."""
    return f"Task failed on worker '{worker_id}': {details}"


def unknown_name_error(kind: str, name: str, available):
    """Error for factory lookups (gradient, updater, backend)."""
    return f"Unknown {kind}: {name} (available: {', '.join(sorted(available))})"
