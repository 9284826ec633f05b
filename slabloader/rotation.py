# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Rotate the worker-to-shard assignment across epochs."""

__all__ = ['get_effective_worker']


def get_effective_worker(epoch: int, worker: int, num_workers: int, rank_shift: int) -> int:
    """Get which shard this worker reads in the given epoch.

    The mapping is a shift modulo the number of workers, so for a fixed epoch and shift no two
    workers land on the same shard. A shift of zero keeps every worker on its own shard.

    Args:
        epoch (int): Current epoch.
        worker (int): Physical worker ID.
        num_workers (int): Number of workers.
        rank_shift (int): Shards to advance per epoch.

    Returns:
        int: Effective worker ID to partition with.
    """
    return (worker + epoch * rank_shift) % num_workers
