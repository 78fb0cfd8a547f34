"""
In-process dataset: partitions held in memory, one thread per partition task.
"""

import os
import threading
from typing import Any, List, Optional, Sequence

from gd.dataset.base import Dataset
from gd.dataset.stages import run_partition


def split_records(records: Sequence, num_partitions: int) -> List[list]:
    """Split records into contiguous, near-equal slices."""
    records = list(records)
    length = len(records)
    return [records[(i * length) // num_partitions:((i + 1) * length) // num_partitions]
            for i in range(num_partitions)]


def default_parallelism() -> int:
    """Default partition count: GD_PARALLELISM env var, else the CPU count."""
    return int(os.environ.get('GD_PARALLELISM', os.cpu_count() or 1))


class LocalDataset(Dataset):
    """
    Dataset whose partitions live in this process.

    Each job starts one thread per partition and joins all of them before
    the results are combined. If tasks fail, the exception of the lowest
    failing partition index is re-raised unchanged.
    """

    def __init__(self, partitions: List[list], stages=()):
        super().__init__(stages)
        self.partitions = partitions

    @classmethod
    def parallelize(cls, records: Sequence, num_partitions: Optional[int] = None) -> 'LocalDataset':
        """Distribute records over num_partitions partitions."""
        if num_partitions is None:
            num_partitions = default_parallelism()
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        return cls(split_records(records, num_partitions))

    @property
    def num_partitions(self) -> int:
        return len(self.partitions)

    def _with_stage(self, stage) -> 'LocalDataset':
        return LocalDataset(self.partitions, self.stages + (stage,))

    def _run_job(self, action) -> List[Any]:
        results = [None] * self.num_partitions
        errors = [None] * self.num_partitions

        def make_task(index):
            def task():
                try:
                    results[index] = run_partition(index, self.partitions[index], self.stages, action)
                except Exception as e:
                    errors[index] = e
            return task

        threads = [threading.Thread(target=make_task(i), daemon=True) for i in range(self.num_partitions)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for error in errors:
            if error is not None:
                raise error
        return results

    def __repr__(self):
        return f"LocalDataset(num_partitions={self.num_partitions}, stages={len(self.stages)})"
