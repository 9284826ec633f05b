# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

import numpy as np
import pytest
import torch.distributed as dist

import slabloader.distributed as sl_dist
from slabloader import (ArrayStore, EpochDriver, PeerFailure, ReaderConfig, StoreReadFailure,
                        World)
from tests.common.datasets import FailingStore, make_data
from tests.common.distributed import DistributedTest


class TestWorld(DistributedTest):
    world_size = 3

    def test_detect(self):
        world = World.detect()
        assert world.num_workers == 3
        assert world.worker == dist.get_rank()
        assert world.is_leader == (dist.get_rank() == 0)


class TestAnyFailed(DistributedTest):

    @pytest.mark.world_size(2)
    def test_none_failed(self):
        assert not sl_dist.any_failed(False)

    @pytest.mark.world_size(3)
    def test_one_failed(self):
        assert sl_dist.any_failed(sl_dist.get_rank() == 1)


def test_any_failed_non_dist():
    assert sl_dist.any_failed(True)
    assert not sl_dist.any_failed(False)


class TestDriverBarrier(DistributedTest):
    world_size = 2

    def test_shards_disjoint(self):
        store = ArrayStore(make_data())
        config = ReaderConfig(batch_size=5, num_batches=0, epochs=3, shuffle=True, rank_shift=1,
                              barrier=True, show_progress=False)
        driver = EpochDriver(store, config)
        for epoch in range(config.epochs):
            ids = np.concatenate([batch for batch, _ in driver.iter_epoch(epoch)])
            driver.synchronize()
            gathered = [None] * 2
            dist.all_gather_object(gathered, ids.tolist())
            flat = [i for part in gathered for i in part]
            assert len(flat) == len(set(flat)) == 100
        driver.close()

    def test_failure_releases_peers(self):
        rank = sl_dist.get_rank()
        config = ReaderConfig(batch_size=5, num_batches=4, epochs=3, barrier=True,
                              show_progress=False)
        if rank == 1:
            store = FailingStore(make_data(), fail_at=6)
            driver = EpochDriver(store, config)
            with pytest.raises(StoreReadFailure, match='Epoch 1, batch 2*'):
                driver.run()
        else:
            driver = EpochDriver(ArrayStore(make_data()), config)
            with pytest.raises(PeerFailure):
                driver.run()
