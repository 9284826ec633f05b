# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Apportion the global sample ordering to workers as contiguous shards."""

from typing import NamedTuple

from slabloader.constant import BALANCED, DROP_REMAINDER
from slabloader.errors import ConfigurationError

__all__ = ['Shard', 'get_partition', 'algos']


class Shard(NamedTuple):
    """A contiguous window into the global ordering, owned by one worker for one epoch."""
    count: int
    offset: int

    @property
    def stop(self) -> int:
        return self.offset + self.count


def get_partition_drop_remainder(num_samples: int, num_workers: int, worker: int) -> Shard:
    """Give every worker ``num_samples // num_workers`` positions.

    The trailing ``num_samples % num_workers`` positions of the ordering belong to no worker.

    Args:
        num_samples (int): Length of the global ordering.
        num_workers (int): Number of workers.
        worker (int): Which worker.

    Returns:
        Shard: The worker's window.
    """
    count = num_samples // num_workers
    return Shard(count, worker * count)


def get_partition_balanced(num_samples: int, num_workers: int, worker: int) -> Shard:
    """Cover every position, the first ``num_samples % num_workers`` workers taking one extra.

    Args:
        num_samples (int): Length of the global ordering.
        num_workers (int): Number of workers.
        worker (int): Which worker.

    Returns:
        Shard: The worker's window.
    """
    base, extra = divmod(num_samples, num_workers)
    count = base + (worker < extra)
    offset = worker * base + min(worker, extra)
    return Shard(count, offset)


algos = {
    DROP_REMAINDER: get_partition_drop_remainder,
    BALANCED: get_partition_balanced,
}


def get_partition(num_samples: int,
                  num_workers: int,
                  worker: int,
                  algo: str = DROP_REMAINDER) -> Shard:
    """Get the contiguous window of the global ordering that the given worker reads.

    Windows of distinct workers never overlap. Under ``drop_remainder`` all windows have the same
    size and ``num_samples % num_workers`` samples sit out the epoch; under ``balanced`` they cover
    the ordering exactly.

    Args:
        num_samples (int): Length of the global ordering.
        num_workers (int): Number of workers.
        worker (int): Which worker, possibly after rotation.
        algo (str): Partition policy name. Defaults to ``drop_remainder``.

    Returns:
        Shard: The worker's window.
    """
    if num_samples < 0:
        raise ConfigurationError(f'Number of samples must be non-negative, but got: ' +
                                 f'{num_samples}.')

    if num_workers <= 0:
        raise ConfigurationError(f'Number of workers must be positive, but got: {num_workers}.')

    if not 0 <= worker < num_workers:
        raise ConfigurationError(f'Worker must be in [0, {num_workers}), but got: {worker}.')

    if algo not in algos:
        raise ConfigurationError(f'Unknown partition algorithm: {algo}. Must be one of: ' +
                                 f'{sorted(algos)}.')

    get = algos[algo]
    return get(num_samples, num_workers, worker)
