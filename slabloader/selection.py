# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Translate a sorted batch of sample indices into a row selection of the dataset."""

from typing import Iterator, Sequence, Tuple, Union

import numpy as np
from h5py import h5s
from numpy.typing import NDArray
from typing_extensions import Self

from slabloader.errors import OutOfRangeIndex

__all__ = ['Selection']


class Selection:
    """Rows of the dataset to transfer, as half-open ranges, with full extent on other axes.

    Args:
        runs (NDArray[np.int64]): Row ranges of shape (num runs, 2), each ``(start, stop)``.
            Ranges are ascending and never touch or overlap.
        sample_shape (Tuple[int, ...]): Shape of one sample.
    """

    def __init__(self, runs: NDArray[np.int64], sample_shape: Tuple[int, ...]) -> None:
        self.runs = runs
        self.sample_shape = tuple(sample_shape)
        self.num_rows = int((runs[:, 1] - runs[:, 0]).sum())

    @classmethod
    def from_indices(cls, indices: Union[Sequence[int], NDArray[np.int64]], num_samples: int,
                     sample_shape: Tuple[int, ...]) -> Self:
        """Build the selection of exactly the given sample indices.

        Consecutive indices are coalesced into one range.

        Args:
            indices (Sequence[int] | NDArray[np.int64]): Strictly ascending sample indices.
            num_samples (int): Number of samples in the dataset.
            sample_shape (Tuple[int, ...]): Shape of one sample.

        Returns:
            Self: The selection.
        """
        ids = np.asarray(indices, np.int64)
        if ids.ndim != 1:
            raise ValueError(f'Sample indices must be one-dimensional, but got shape: ' +
                             f'{ids.shape}.')

        if not len(ids):
            return cls(np.empty((0, 2), np.int64), sample_shape)

        if ids.min() < 0 or num_samples <= ids.max():
            bad = ids[(ids < 0) | (num_samples <= ids)]
            raise OutOfRangeIndex(f'Sample indices out of range [0, {num_samples}): ' +
                                  f'{bad.tolist()}.')

        steps = np.diff(ids)
        if (steps <= 0).any():
            raise ValueError('Sample indices must be sorted ascending without duplicates.')

        breaks = np.flatnonzero(steps != 1) + 1
        starts = ids[np.concatenate([[0], breaks])]
        stops = ids[np.concatenate([breaks - 1, [len(ids) - 1]])] + 1
        return cls(np.stack([starts, stops], 1), sample_shape)

    @property
    def shape(self) -> Tuple[int, ...]:
        return (self.num_rows,) + self.sample_shape

    def __len__(self) -> int:
        return len(self.runs)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        for start, stop in self.runs.tolist():
            yield start, stop

    def rows(self) -> NDArray[np.int64]:
        """Get every selected row, in order.

        Returns:
            NDArray[np.int64]: Row indices.
        """
        if not len(self.runs):
            return np.empty(0, np.int64)
        return np.concatenate([np.arange(start, stop) for start, stop in self])

    def select(self, space: h5s.SpaceID) -> None:
        """Apply this selection to an HDF5 dataspace of the whole dataset.

        The dataspace selection is replaced by the union of one hyperslab per run.

        Args:
            space (h5s.SpaceID): Dataspace of shape (num samples, *sample shape).
        """
        space.select_none()
        rest = (0,) * len(self.sample_shape)
        for start, stop in self:
            space.select_hyperslab((start,) + rest, (stop - start,) + self.sample_shape,
                                   op=h5s.SELECT_OR)

        expected = self.num_rows * int(np.prod(self.sample_shape, dtype=np.int64))
        selected = space.get_select_npoints()
        if selected != expected:
            raise RuntimeError(f'Internal error: dataspace selects {selected} elements, but ' +
                               f'expected {expected}.')
