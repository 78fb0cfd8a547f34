"""
Partitioned dataset interface.

A Dataset is a horizontally partitioned collection of records. Transformations
(`sample`, `map_partitions_with_index`) are lazy and return a new Dataset;
actions (`count`, `collect`, `aggregate`, `reduce`) run one job, with one
task per partition, and block until every task has finished.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List

from gd.debug import debug_print_dataset
from gd.dataset.stages import (
    SampleStage, MapPartitionsStage, CountAction, CollectAction, AggregateAction, ReduceAction
)


class Dataset(ABC):
    """Abstract base class for partitioned datasets."""

    def __init__(self, stages=()):
        self.stages = tuple(stages)

    @property
    @abstractmethod
    def num_partitions(self) -> int:
        """Number of partitions."""
        pass

    @abstractmethod
    def _run_job(self, action) -> List[Any]:
        """Run `action` on every partition. Returns results in partition order."""
        pass

    @abstractmethod
    def _with_stage(self, stage) -> 'Dataset':
        """Same partitions, one more stage."""
        pass

    def _action(self, action):
        debug_print_dataset(f"{type(action).__name__} over {self.num_partitions} partition(s), "
                            f"stages={[type(s).__name__ for s in self.stages]}")
        return action.combine(self._run_job(action))

    # Transformations

    def sample(self, with_replacement: bool, fraction: float, seed: int) -> 'Dataset':
        """Random sample with the given expected fraction of each partition."""
        if fraction < 0.0:
            raise ValueError(f"fraction must be >= 0, got {fraction}")
        if not with_replacement and fraction > 1.0:
            raise ValueError(f"fraction must be <= 1 without replacement, got {fraction}")
        return self._with_stage(SampleStage(with_replacement, fraction, seed))

    def map_partitions_with_index(self, fn: Callable, preserves_partitioning: bool = False) -> 'Dataset':
        """Apply fn(partition_index, iterator) -> iterable to every partition."""
        return self._with_stage(MapPartitionsStage(fn, preserves_partitioning))

    # Actions

    def count(self) -> int:
        """Number of records."""
        return self._action(CountAction())

    def collect(self) -> list:
        """All records, in partition order."""
        return self._action(CollectAction())

    def aggregate(self, zero_value, seq_op: Callable, comb_op: Callable):
        """
        Fold each partition with seq_op, then merge the partial results with comb_op.

        zero_value is copied for every partition, so a mutable accumulator
        (e.g. a NumPy array updated in place) is never shared between tasks.
        """
        return self._action(AggregateAction(zero_value, seq_op, comb_op))

    def reduce(self, fn: Callable):
        """Reduce all records with an associative, commutative function."""
        return self._action(ReduceAction(fn))
