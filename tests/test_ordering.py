# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

import numpy as np
import pytest

from slabloader import ConfigurationError, IndexOrdering


def test_identity():
    ordering = IndexOrdering(10)
    assert ordering.ids.tolist() == list(range(10))
    assert len(ordering) == 10


@pytest.mark.parametrize('num_samples', [1, 2, 17, 1000])
def test_shuffle_is_permutation(num_samples: int):
    ordering = IndexOrdering(num_samples, seed=7)
    for _ in range(3):
        ids = ordering.shuffle()
        assert sorted(ids.tolist()) == list(range(num_samples))


def test_shuffle_is_in_place():
    ordering = IndexOrdering(50)
    ids = ordering.ids
    ordering.shuffle()
    assert ordering.ids is ids


def test_same_seed_same_sequence():
    a = IndexOrdering(200, seed=3)
    b = IndexOrdering(200, seed=3)
    for _ in range(4):
        assert np.array_equal(a.shuffle(), b.shuffle())


def test_generator_advances():
    ordering = IndexOrdering(200, seed=3)
    first = ordering.shuffle().copy()
    ordering.identity()
    second = ordering.shuffle().copy()
    assert not np.array_equal(first, second)


def test_different_seed_differs():
    a = IndexOrdering(200, seed=1).shuffle()
    b = IndexOrdering(200, seed=2).shuffle()
    assert not np.array_equal(a, b)


def test_identity_resets_order():
    ordering = IndexOrdering(20)
    ordering.shuffle()
    assert ordering.identity().tolist() == list(range(20))


@pytest.mark.parametrize('num_samples', [0, -1])
def test_empty_dataset(num_samples: int):
    with pytest.raises(ConfigurationError):
        IndexOrdering(num_samples)
