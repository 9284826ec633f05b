# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Drive the epoch loop: shuffle, partition, slice into batches, and read each batch."""

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from time import sleep, time
from typing import Iterator, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from tqdm import tqdm

from slabloader import distributed as dist
from slabloader.batching import ShardBatches
from slabloader.config import ReaderConfig
from slabloader.constant import MB
from slabloader.errors import PeerFailure, StoreReadFailure
from slabloader.ordering import IndexOrdering
from slabloader.partition import get_partition
from slabloader.rotation import get_effective_worker
from slabloader.selection import Selection
from slabloader.store import Store
from slabloader.timing import Timing
from slabloader.world import World

logger = logging.getLogger(__name__)

__all__ = ['EpochState', 'EpochStats', 'EpochDriver']


class EpochState(Enum):
    """Where the driver is in its epoch loop."""
    IDLE = 'idle'
    SHUFFLING = 'shuffling'
    PARTITIONED = 'partitioned'
    READING = 'reading'
    EPOCH_COMPLETE = 'epoch_complete'
    TERMINAL = 'terminal'


@dataclass
class EpochStats:
    """What one worker read in one epoch.

    Args:
        epoch (int): Epoch.
        worker (int): Physical worker ID.
        effective_worker (int): Worker ID the shard was computed for.
        num_workers (int): Number of workers.
        num_batches (int): Batches read.
        num_samples (int): Samples read.
        seconds (float): Wall time spent selecting and reading.
        bytes (int): Bytes read.
    """
    epoch: int
    worker: int
    effective_worker: int
    num_workers: int
    num_batches: int = 0
    num_samples: int = 0
    seconds: float = 0.0
    bytes: int = 0

    @property
    def samples_per_sec(self) -> float:
        """Read rate of all workers together, assuming they all match this one."""
        if not self.seconds:
            return 0.0
        return self.num_workers * self.num_samples / self.seconds

    @property
    def mb_per_sec(self) -> float:
        """Bandwidth of all workers together, assuming they all match this one."""
        if not self.seconds:
            return 0.0
        return self.num_workers * self.bytes / MB / self.seconds


class EpochDriver:
    """Read this worker's batches of every epoch from a store.

    Every worker runs its own driver. Given the same seed and the same epochs, the drivers agree on
    the global ordering and on which shard belongs to whom, without communicating. The ordering of
    epoch ``e`` is the identity shuffled ``e + 1`` times, so epochs may be skipped or revisited and
    still yield the same batches.

    Batches are read into one reusable buffer of shape (batch size, *sample shape), which the next
    read overwrites. To put a node-local cache in front of the backing store, pass a ``Store`` that
    wraps it.

    Args:
        store (Store): Where samples are read from.
        config (ReaderConfig): Run options.
        world (World, optional): Which worker this is. Defaults to detecting it from the process
            group.
        timing (Timing, optional): Interval recorder. Defaults to a fresh one.
    """

    def __init__(self,
                 store: Store,
                 config: ReaderConfig,
                 world: Optional[World] = None,
                 timing: Optional[Timing] = None) -> None:
        self.store = store
        self.config = config
        self.world = world or World.detect()
        self.timing = timing or Timing()
        self.ordering = IndexOrdering(store.num_samples, config.seed)
        self.buffer: Optional[NDArray] = None
        self.state = EpochState.IDLE
        self.stats: Optional[EpochStats] = None
        self._warned_clamp = False
        self._next_epoch = 0

    def _begin_epoch(self, epoch: int) -> Tuple[int, ShardBatches]:
        """Shuffle if enabled, then compute this epoch's shard.

        Args:
            epoch (int): Which epoch.

        Returns:
            Tuple[int, ShardBatches]: Effective worker ID and the batches of its shard.
        """
        if self.state == EpochState.TERMINAL:
            raise RuntimeError('Driver is closed.')

        if epoch < 0:
            raise ValueError(f'Epoch must be non-negative, but got: {epoch}.')

        if self.config.shuffle:
            self.state = EpochState.SHUFFLING
            if epoch < self._next_epoch:
                self.ordering = IndexOrdering(len(self.ordering), self.config.seed)
                self._next_epoch = 0
            for _ in range(self._next_epoch, epoch + 1):
                self.ordering.shuffle()
        self._next_epoch = epoch + 1

        effective = get_effective_worker(epoch, self.world.worker, self.world.num_workers,
                                         self.config.rank_shift)
        shard = get_partition(len(self.ordering), self.world.num_workers, effective,
                              self.config.partition_algo)
        self.state = EpochState.PARTITIONED
        return effective, ShardBatches(self.ordering.ids, shard, self.config.batch_size)

    def _get_num_batches(self, batches: ShardBatches) -> int:
        """Get how many batches to read this epoch."""
        available = len(batches)
        wanted = self.config.num_batches
        if not wanted:
            return available
        if available < wanted and not self._warned_clamp:
            logger.warning(f'Requested {wanted} batches per epoch, but worker ' +
                           f'{self.world.worker} has only {available} full batches of ' +
                           f'{self.config.batch_size} samples. Reading {available}.')
            self._warned_clamp = True
        return min(wanted, available)

    def iter_epoch(self, epoch: int) -> Iterator[Tuple[NDArray[np.int64], NDArray]]:
        """Read this worker's batches of the given epoch.

        Args:
            epoch (int): Which epoch.

        Returns:
            Iterator[Tuple[NDArray[np.int64], NDArray]]: Pairs of (sorted sample indices, batch).
                The batch is a view of the reusable buffer, valid until the next batch is read.
        """
        effective, batches = self._begin_epoch(epoch)
        num_batches = self._get_num_batches(batches)
        stats = EpochStats(epoch, self.world.worker, effective, self.world.num_workers)
        self.stats = stats

        if self.buffer is None:
            self.buffer = np.empty((self.config.batch_size,) + self.store.sample_shape,
                                   self.store.dtype)
        buffer = self.buffer

        show = self.world.is_leader and self.config.show_progress
        progress = tqdm(islice(batches, num_batches),
                        total=num_batches,
                        desc=f'Epoch {epoch}',
                        leave=False,
                        disable=not show)
        for index, ids in enumerate(progress):
            self.state = EpochState.READING
            start = time()
            with self.timing.timed('select'):
                selection = Selection.from_indices(ids, self.store.num_samples,
                                                   self.store.sample_shape)
            try:
                with self.timing.timed('read'):
                    stats.bytes += self.store.read(selection, buffer)
            except StoreReadFailure as err:
                raise StoreReadFailure(f'Epoch {epoch}, batch {index} of worker ' +
                                       f'{self.world.worker}: {err}') from err
            stats.seconds += time() - start
            stats.num_batches += 1
            stats.num_samples += len(ids)

            if self.config.compute:
                sleep(self.config.compute)

            if self.world.is_leader and logger.isEnabledFor(logging.DEBUG):
                if buffer.size:
                    firsts = buffer.reshape(len(ids), -1)[:, 0].tolist()
                    pairs = ' '.join(f'{value}({idx})' for value, idx in zip(firsts, ids))
                else:
                    pairs = ' '.join(f'({idx})' for idx in ids)
                logger.debug(f'Epoch {epoch}, batch {index}: {pairs}')

            yield ids, buffer

        self.state = EpochState.EPOCH_COMPLETE
        if self.world.is_leader:
            logger.info(f'Epoch {epoch}: {stats.seconds:6.2f} (sec) - ' +
                        f'{stats.samples_per_sec:6.2f} (samples/sec) - ' +
                        f'{stats.mb_per_sec:6.2f} (MB/sec)')

    def run_epoch(self, epoch: int) -> EpochStats:
        """Read every batch of the given epoch, discarding the data.

        Args:
            epoch (int): Which epoch.

        Returns:
            EpochStats: What was read.
        """
        for _ in self.iter_epoch(epoch):
            pass
        return self.stats  # pyright: ignore

    def synchronize(self, failed: bool = False) -> None:
        """Wait for every worker at the epoch boundary, if the barrier is enabled.

        A worker that failed still calls this, so that its peers learn of the failure instead of
        waiting for it forever.

        Args:
            failed (bool): Whether this worker hit a fatal error. Defaults to ``False``.
        """
        if not self.config.barrier:
            return
        if dist.any_failed(failed) and not failed:
            raise PeerFailure(f'Worker {self.world.worker} stopping because a peer failed.')

    def run(self) -> List[EpochStats]:
        """Read every configured epoch, then release the buffer.

        Returns:
            List[EpochStats]: What was read in each epoch.
        """
        results = []
        try:
            for epoch in range(self.config.epochs):
                try:
                    stats = self.run_epoch(epoch)
                except Exception:
                    self.synchronize(failed=True)
                    raise
                self.synchronize()
                results.append(stats)
                self.state = EpochState.IDLE
        finally:
            self.close()
        return results

    def close(self) -> None:
        """Release the buffer and log the final status."""
        if self.state == EpochState.TERMINAL:
            return
        completed = self.state in {EpochState.IDLE, EpochState.EPOCH_COMPLETE}
        self.buffer = None
        self.state = EpochState.TERMINAL
        if self.world.is_leader:
            status = 'completed' if completed else 'aborted'
            logger.info(f'Run {status}.')
