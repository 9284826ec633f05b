# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Information about the workers of this run."""

from typing import Any, Dict

from typing_extensions import Self

from slabloader import distributed as dist
from slabloader.errors import ConfigurationError

__all__ = ['World']


class World:
    """Which worker this process is, out of how many.

    There is one worker per rank of the process group. Every worker reads its own shard of each
    epoch, and the leader (worker 0) does the console reporting.

    Args:
        num_workers (int): Number of workers.
        worker (int): This worker's ID.
    """

    def __init__(self, num_workers: int, worker: int) -> None:
        if num_workers <= 0:
            raise ConfigurationError(f'Number of workers must be positive, but got: ' +
                                     f'{num_workers}.')

        if not 0 <= worker < num_workers:
            raise ConfigurationError(f'Worker must be in [0, {num_workers}), but got: {worker}.')

        self.num_workers = num_workers
        self.worker = worker
        self.is_leader = not worker

    def __repr__(self) -> str:
        return f'World(num_workers={self.num_workers}, worker={self.worker})'

    def to_json(self) -> Dict[str, Any]:
        """Get a JSON version of this config.

        Returns:
            Dict[str, Any]: JSON config.
        """
        return dict(self.__dict__)

    @classmethod
    def detect(cls) -> Self:
        """Detect the world state.

        Returns:
            Self: A new World state object according to the process group.
        """
        return cls(dist.get_world_size(), dist.get_rank())
