# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Helper methods to get the distributed attributes and synchronize workers."""

import os
from typing import Optional

import torch
from torch import distributed as dist
from torch.distributed.distributed_c10d import ProcessGroup

__all__ = [
    'get_rank', 'get_world_size', 'any_failed', 'maybe_init_dist', 'maybe_destroy_dist'
]


def get_rank(process_group: Optional[ProcessGroup] = None) -> int:
    """Returns the rank of the current process, which is on ``[0; WORLD_SIZE - 1]``.

    Args:
        process_group (ProcessGroup, optional): the process group used to determine rank

    Returns:
        int: The rank.
    """
    rank = int(os.environ.get('RANK', 0))
    if process_group is not None:
        rank = dist.get_rank(process_group)
    return rank


def get_world_size(process_group: Optional[ProcessGroup] = None) -> int:
    """Returns the world size, which is the number of processes participating in this run.

    Args:
        process_group (ProcessGroup, optional): the process group used to determine world size

    Returns:
        int: The world size.
    """
    world_size = int(os.environ.get('WORLD_SIZE', 1))
    if process_group is not None:
        world_size = dist.get_world_size(process_group)
    return world_size


def any_failed(failed: bool, process_group: Optional[ProcessGroup] = None) -> bool:
    """Exchange a failure flag with every process, returning whether any process failed.

    Every process must call this the same number of times. It doubles as a barrier, so a process
    that hits a fatal error can call it to release its peers instead of leaving them blocked.

    Args:
        failed (bool): Whether this process failed.
        process_group (ProcessGroup, optional): the process group to synchronize

    Returns:
        bool: Whether any process failed.
    """
    if not (dist.is_available() and dist.is_initialized()):
        return failed
    flag = torch.tensor([int(failed)], dtype=torch.int64)
    dist.all_reduce(flag, op=dist.ReduceOp.MAX, group=process_group)
    return bool(flag.item())


def maybe_init_dist(process_group: Optional[ProcessGroup] = None) -> bool:
    """Initialize torch.distributed ourselves, if necessary.

    Args:
        process_group (ProcessGroup, optional): the process group in use

    Returns:
        bool: Whether we initialized dist ourselves.
    """
    if get_world_size() == 1 or not dist.is_available() or dist.is_initialized(
    ) or process_group is not None:
        return False
    dist.init_process_group(backend='gloo', rank=get_rank(), world_size=get_world_size())
    return True


def maybe_destroy_dist(initialized: bool) -> None:
    """Tear down torch.distributed if we were the ones to set it up.

    Args:
        initialized (bool): Return value of :func:`maybe_init_dist`.
    """
    if initialized and dist.is_initialized():
        dist.destroy_process_group()
