"""
Lazy transformation stages and actions for partitioned datasets.

A dataset is a list of partitions plus a chain of stages. Nothing runs until
an action is requested; then every partition is pushed through the stages
and the action, independently, wherever that partition lives (a local thread
or a remote worker). Per-partition results are combined on the driver in
partition-index order.

Everything here is a plain picklable object so the same job can be shipped
to remote workers unchanged.
"""

import copy
from dataclasses import dataclass
from functools import reduce as _reduce
from typing import Any, Callable, Iterable, Iterator, List, Sequence

import numpy as np


# Stages

@dataclass
class SampleStage:
    """Random sample of each partition (Bernoulli, or Poisson with replacement)."""
    with_replacement: bool
    fraction: float
    seed: int

    def apply(self, index: int, iterator: Iterator) -> Iterator:
        # Seeded from (seed, partition) so placement does not change the sample
        rng = np.random.default_rng([self.seed & 0xFFFFFFFFFFFFFFFF, index])
        if self.with_replacement:
            for item in iterator:
                for _ in range(rng.poisson(self.fraction)):
                    yield item
        else:
            for item in iterator:
                if rng.random() < self.fraction:
                    yield item


@dataclass
class MapPartitionsStage:
    """fn(partition_index, iterator) -> iterable."""
    fn: Callable[[int, Iterator], Iterable]
    preserves_partitioning: bool = False

    def apply(self, index: int, iterator: Iterator) -> Iterator:
        return iter(self.fn(index, iterator))


def compute_partition(index: int, records: Sequence, stages: Sequence) -> Iterator:
    """Push one partition's records through the stage chain."""
    iterator = iter(records)
    for stage in stages:
        iterator = stage.apply(index, iterator)
    return iterator


def run_partition(index: int, records: Sequence, stages: Sequence, action) -> Any:
    """Run an action on one partition."""
    return action.run(index, compute_partition(index, records, stages))


# Actions

class CountAction:
    """Number of records."""

    def run(self, index: int, iterator: Iterator) -> int:
        return sum(1 for _ in iterator)

    def combine(self, results: List[int]) -> int:
        return sum(results)


class CollectAction:
    """All records, in partition order."""

    def run(self, index: int, iterator: Iterator) -> list:
        return list(iterator)

    def combine(self, results: List[list]) -> list:
        return [item for part in results for item in part]


class AggregateAction:
    """
    Fold each partition with seq_op from its own copy of zero_value, then merge
    the partition results with comb_op starting from another copy.
    """

    def __init__(self, zero_value, seq_op: Callable, comb_op: Callable):
        self.zero_value = zero_value
        self.seq_op = seq_op
        self.comb_op = comb_op

    def run(self, index: int, iterator: Iterator):
        acc = copy.deepcopy(self.zero_value)
        for item in iterator:
            acc = self.seq_op(acc, item)
        return acc

    def combine(self, results: list):
        acc = copy.deepcopy(self.zero_value)
        for result in results:
            acc = self.comb_op(acc, result)
        return acc


class ReduceAction:
    """Reduce with an associative, commutative function. Empty partitions are skipped."""

    def __init__(self, fn: Callable):
        self.fn = fn

    def run(self, index: int, iterator: Iterator):
        items = list(iterator)
        if not items:
            return (False, None)
        return (True, _reduce(self.fn, items))

    def combine(self, results: list):
        values = [value for has_value, value in results if has_value]
        if not values:
            raise ValueError("reduce() of empty dataset")
        return _reduce(self.fn, values)
