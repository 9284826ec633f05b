# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""The global ordering of sample indices, reshuffled in place from a seeded generator."""

import numpy as np
from numpy.typing import NDArray

from slabloader.constant import DEFAULT_SEED
from slabloader.errors import ConfigurationError

__all__ = ['IndexOrdering']


class IndexOrdering:
    """Ordered sequence of every sample index, owned by a single worker.

    Each worker builds its own copy from the same seed, so all workers agree on the ordering of
    every epoch without exchanging it. The generator is created once and advanced by each shuffle,
    never re-seeded, so a run walks a reproducible sequence of distinct permutations.

    Args:
        num_samples (int): Number of samples along the leading axis of the dataset.
        seed (int): Seed of the shuffle generator. Defaults to ``DEFAULT_SEED``.
    """

    def __init__(self, num_samples: int, seed: int = DEFAULT_SEED) -> None:
        if num_samples <= 0:
            raise ConfigurationError(f'Dataset must contain samples, but got: {num_samples}.')

        self.num_samples = num_samples
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.ids: NDArray[np.int64] = np.arange(num_samples, dtype=np.int64)

    def __len__(self) -> int:
        return self.num_samples

    def identity(self) -> NDArray[np.int64]:
        """Reset the ordering to ``[0, 1, ..., N - 1]``.

        The generator state is left alone.

        Returns:
            NDArray[np.int64]: The ordering.
        """
        self.ids[:] = np.arange(self.num_samples, dtype=np.int64)
        return self.ids

    def shuffle(self) -> NDArray[np.int64]:
        """Permute the whole ordering in place, advancing the generator.

        Returns:
            NDArray[np.int64]: The ordering.
        """
        self.rng.shuffle(self.ids)
        return self.ids
