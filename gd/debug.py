"""
Debug utilities for GD.

Environment variables for debug output:
- GD_VERBOSE: Run summaries (final losses, worker registration, job sizes)
- GD_DEBUG_OPTIMIZER: Per-iteration optimizer prints (loss, regVal, lazy state)
- GD_DEBUG_DATASET: Dataset job prints (stages, partitions, actions)
- GD_DEBUG_DISPATCHER: Dispatcher debug prints
- GD_DEBUG_WORKER: Worker debug prints

By default, GD is completely silent (no framework output). Only errors are shown.
"""

import os


# Debug flags
DEBUG_OPTIMIZER = os.environ.get('GD_DEBUG_OPTIMIZER', '0') == '1'
DEBUG_DATASET = os.environ.get('GD_DEBUG_DATASET', '0') == '1'
DEBUG_DISPATCHER = os.environ.get('GD_DEBUG_DISPATCHER', '0') == '1'
DEBUG_WORKER = os.environ.get('GD_DEBUG_WORKER', '0') == '1'
VERBOSE = os.environ.get('GD_VERBOSE', '0') == '1'


def debug_print_optimizer(*args, **kwargs):
    """Print optimizer debug message if GD_DEBUG_OPTIMIZER=1."""
    if DEBUG_OPTIMIZER:
        print("[OPTIMIZER]", *args, **kwargs)


def debug_print_dataset(*args, **kwargs):
    """Print dataset debug message if GD_DEBUG_DATASET=1."""
    if DEBUG_DATASET:
        print("[DATASET]", *args, **kwargs)


def debug_print_dispatcher(*args, **kwargs):
    """Print dispatcher debug message if GD_DEBUG_DISPATCHER=1."""
    if DEBUG_DISPATCHER:
        print("[DISPATCHER]", *args, **kwargs)


def debug_print_worker(*args, **kwargs):
    """Print worker debug message if GD_DEBUG_WORKER=1."""
    if DEBUG_WORKER:
        print("[WORKER]", *args, **kwargs)


def verbose_print(*args, **kwargs):
    """Print verbose framework message if GD_VERBOSE=1."""
    if VERBOSE:
        print(*args, **kwargs)


def format_losses(losses, last: int = 10) -> str:
    """Format the tail of a loss history for summary prints."""
    return ", ".join(f"{loss:.6g}" for loss in list(losses)[-last:])
