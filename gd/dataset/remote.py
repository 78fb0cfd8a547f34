"""
Dataset whose partitions live on remote workers (see gd.dispatcher).

The driver only keeps the stage chain; every action ships (stages, action)
to the workers holding the partitions and combines what comes back.
"""

from typing import Any, List, Optional, Sequence

from gd.dataset.base import Dataset
from gd.dataset.local import split_records


class RemoteDataset(Dataset):
    """Dataset backed by partitions loaded on workers through a Dispatcher."""

    def __init__(self, dispatcher, dataset_id: str, num_partitions: int, stages=()):
        super().__init__(stages)
        self.dispatcher = dispatcher
        self.dataset_id = dataset_id
        self._num_partitions = num_partitions

    @classmethod
    def parallelize(cls, dispatcher, records: Sequence, num_partitions: Optional[int] = None) -> 'RemoteDataset':
        """Split records and load the partitions onto the dispatcher's workers."""
        if num_partitions is None:
            num_partitions = max(1, len(dispatcher.workers))
        if num_partitions < 1:
            raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
        partitions = split_records(records, num_partitions)
        dataset_id = dispatcher.load_partitions(partitions)
        return cls(dispatcher, dataset_id, num_partitions)

    @property
    def num_partitions(self) -> int:
        return self._num_partitions

    def _with_stage(self, stage) -> 'RemoteDataset':
        return RemoteDataset(self.dispatcher, self.dataset_id, self._num_partitions, self.stages + (stage,))

    def _run_job(self, action) -> List[Any]:
        by_index = self.dispatcher.run_job(self.dataset_id, self.stages, action)
        return [by_index[i] for i in range(self._num_partitions)]

    def free(self):
        """Drop the partitions from the workers."""
        self.dispatcher.free_dataset(self.dataset_id)

    def __repr__(self):
        return (f"RemoteDataset(id={self.dataset_id}, num_partitions={self._num_partitions}, "
                f"stages={len(self.stages)})")
