"""
Partitioned datasets: the execution engine the optimizers run on.
"""

from .base import Dataset
from .local import LocalDataset, split_records, default_parallelism
from .remote import RemoteDataset
from .io import load_labeled_points


def parallelize(records, num_partitions=None, dispatcher=None) -> Dataset:
    """
    Create a dataset from in-memory records.

    Args:
        records: Sequence of records, e.g. (label, features) pairs
        num_partitions: Partition count (default: GD_PARALLELISM / CPU count locally,
                        number of workers remotely)
        dispatcher: Started Dispatcher with registered workers. None keeps the
                    data in this process.
    """
    if dispatcher is None:
        return LocalDataset.parallelize(records, num_partitions)
    return RemoteDataset.parallelize(dispatcher, records, num_partitions)


__all__ = ['Dataset', 'LocalDataset', 'RemoteDataset', 'parallelize', 'split_records',
           'default_parallelism', 'load_labeled_points']
