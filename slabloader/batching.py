# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Cut a worker's shard into fixed-size batches of sorted sample indices."""

from typing import Iterator

import numpy as np
from numpy.typing import NDArray

from slabloader.errors import ConfigurationError
from slabloader.partition import Shard

__all__ = ['ShardBatches']


class ShardBatches:
    """The batches of one shard of the ordering, in shard order.

    Batches are taken contiguously from the shard and any trailing partial batch is dropped. Each
    batch is a sorted copy, which is what lets the selection coalesce neighbouring rows. Iterating
    again starts over from the first batch.

    Args:
        ids (NDArray[np.int64]): The global ordering.
        shard (Shard): This worker's window into the ordering.
        batch_size (int): Samples per batch.
    """

    def __init__(self, ids: NDArray[np.int64], shard: Shard, batch_size: int) -> None:
        if batch_size <= 0:
            raise ConfigurationError(f'Batch size must be positive, but got: {batch_size}.')

        if len(ids) < shard.stop:
            raise ValueError(f'Shard [{shard.offset}, {shard.stop}) runs past the end of the ' +
                             f'ordering ({len(ids)}).')

        self.ids = ids
        self.shard = shard
        self.batch_size = batch_size

    def __len__(self) -> int:
        return self.shard.count // self.batch_size

    def __getitem__(self, index: int) -> NDArray[np.int64]:
        if not 0 <= index < len(self):
            raise IndexError(f'Batch index out of range: 0 <= {index} < {len(self)}.')
        begin = self.shard.offset + index * self.batch_size
        return np.sort(self.ids[begin:begin + self.batch_size])

    def __iter__(self) -> Iterator[NDArray[np.int64]]:
        for index in range(len(self)):
            yield self[index]
