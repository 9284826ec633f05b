# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

import pytest

from slabloader import get_effective_worker


def test_rotation_sequences():
    assert [get_effective_worker(e, 0, 4, 1) for e in range(4)] == [0, 1, 2, 3]
    assert [get_effective_worker(e, 2, 4, 1) for e in range(4)] == [2, 3, 0, 1]


def test_no_shift():
    for epoch in range(5):
        assert [get_effective_worker(epoch, w, 6, 0) for w in range(6)] == list(range(6))


@pytest.mark.parametrize('num_workers', [1, 2, 5, 8])
@pytest.mark.parametrize('rank_shift', [-3, 0, 1, 2, 7])
@pytest.mark.parametrize('epoch', [0, 1, 9])
def test_bijection(num_workers: int, rank_shift: int, epoch: int):
    ids = [get_effective_worker(epoch, w, num_workers, rank_shift) for w in range(num_workers)]
    assert sorted(ids) == list(range(num_workers))
