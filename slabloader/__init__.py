# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Distributed epoch-based batch sampling and reading of large multidimensional arrays."""

from slabloader._version import __version__
from slabloader.batching import ShardBatches
from slabloader.config import ReaderConfig
from slabloader.driver import EpochDriver, EpochState, EpochStats
from slabloader.errors import ConfigurationError, OutOfRangeIndex, PeerFailure, StoreReadFailure
from slabloader.ordering import IndexOrdering
from slabloader.partition import Shard, get_partition
from slabloader.rotation import get_effective_worker
from slabloader.selection import Selection
from slabloader.store import ArrayStore, H5Store, Store
from slabloader.timing import Timing
from slabloader.world import World

__all__ = [
    '__version__', 'ArrayStore', 'ConfigurationError', 'EpochDriver', 'EpochState', 'EpochStats',
    'H5Store', 'IndexOrdering', 'OutOfRangeIndex', 'PeerFailure', 'ReaderConfig', 'Selection',
    'Shard', 'ShardBatches', 'Store', 'StoreReadFailure', 'Timing', 'World',
    'get_effective_worker', 'get_partition'
]
