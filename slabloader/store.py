# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Backing stores that batches of samples are read from."""

import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Tuple, Type

import h5py
import numpy as np
from h5py import h5fd, h5p, h5s
from numpy.typing import NDArray
from typing_extensions import Self

from slabloader.constant import COLLECTIVE, DEFAULT_DATASET, TRANSFER_MODES
from slabloader.errors import ConfigurationError, StoreReadFailure
from slabloader.selection import Selection
from slabloader.util import get_import_exception_message

logger = logging.getLogger(__name__)

__all__ = ['Store', 'ArrayStore', 'H5Store']


class Store(ABC):
    """A read-only array of shape (num samples, *sample shape), read one selection at a time.

    Stores compose: a node-local read-through cache would be a ``Store`` that wraps another one.
    """

    num_samples: int
    sample_shape: Tuple[int, ...]
    dtype: np.dtype

    @property
    def sample_bytes(self) -> int:
        """Size of one sample in bytes."""
        return int(np.prod(self.sample_shape, dtype=np.int64)) * self.dtype.itemsize

    @abstractmethod
    def read(self, selection: Selection, out: NDArray) -> int:
        """Read the selected rows into the leading rows of ``out``.

        Args:
            selection (Selection): Which rows to read.
            out (NDArray): Destination buffer of shape (at least num rows, *sample shape).

        Returns:
            int: Number of bytes transferred.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release the store."""

    def __enter__(self) -> Self:
        return self

    def __exit__(self, err_type: Optional[Type[BaseException]], err: Optional[BaseException],
                 traceback: Optional[TracebackType]) -> None:
        self.close()

    def _check_out(self, selection: Selection, out: NDArray) -> NDArray:
        """Get the part of the buffer a selection will be read into."""
        if selection.sample_shape != self.sample_shape:
            raise ValueError(f'Selection sample shape {selection.sample_shape} does not match ' +
                             f'the store sample shape {self.sample_shape}.')

        if out.shape[1:] != self.sample_shape or len(out) < selection.num_rows:
            raise ValueError(f'Buffer of shape {out.shape} cannot hold a selection of shape ' +
                             f'{selection.shape}.')

        if not out.flags.c_contiguous:
            raise ValueError('Buffer must be C-contiguous.')

        return out[:selection.num_rows]


class ArrayStore(Store):
    """A store backed by an in-memory array.

    Args:
        data (NDArray): Array of shape (num samples, *sample shape).
    """

    def __init__(self, data: NDArray) -> None:
        if data.ndim < 1:
            raise ConfigurationError('Array store needs at least one dimension.')
        self.data = data
        self.num_samples = data.shape[0]
        self.sample_shape = tuple(data.shape[1:])
        self.dtype = data.dtype

    def read(self, selection: Selection, out: NDArray) -> int:
        dest = self._check_out(selection, out)
        offset = 0
        for start, stop in selection:
            size = stop - start
            dest[offset:offset + size] = self.data[start:stop]
            offset += size
        return dest.nbytes


class H5Store(Store):
    """A store backed by a dataset of an HDF5 file.

    The transfer mode is fixed for the lifetime of the store. With ``collective`` or
    ``independent`` the file is opened through MPI-IO, which needs h5py built against parallel
    HDF5 and mpi4py. In collective mode every worker must issue the same number of reads.

    Args:
        path (str): Path to the HDF5 file.
        dataset (str): Path to the dataset within the file. Defaults to ``DEFAULT_DATASET``.
        transfer_mode (str, optional): ``collective``, ``independent``, or ``None`` for the
            default (serial) driver. Defaults to ``None``.
    """

    def __init__(self,
                 path: str,
                 dataset: str = DEFAULT_DATASET,
                 transfer_mode: Optional[str] = None) -> None:
        if transfer_mode is not None and transfer_mode not in TRANSFER_MODES:
            raise ConfigurationError(f'Unknown transfer mode: {transfer_mode}. Must be one of: ' +
                                     f'{TRANSFER_MODES}.')

        self.path = path
        self.dataset = dataset
        self.transfer_mode = transfer_mode

        if transfer_mode is None:
            self._file = h5py.File(path, 'r')
            self._dxpl = None
        else:
            comm = self._get_comm()
            self._file = h5py.File(path, 'r', driver='mpio', comm=comm)
            self._dxpl = h5p.create(h5p.DATASET_XFER)
            if transfer_mode == COLLECTIVE:
                self._dxpl.set_dxpl_mpio(h5fd.MPIO_COLLECTIVE)
            else:
                self._dxpl.set_dxpl_mpio(h5fd.MPIO_INDEPENDENT)

        obj = self._file.get(dataset)
        if not isinstance(obj, h5py.Dataset):
            self._file.close()
            raise ConfigurationError(f'No dataset {dataset!r} in {path}.')
        if not obj.ndim:
            self._file.close()
            raise ConfigurationError(f'Dataset {dataset!r} in {path} is a scalar.')

        self._dset = obj
        self.num_samples = obj.shape[0]
        self.sample_shape = tuple(obj.shape[1:])
        self.dtype = obj.dtype
        logger.debug(f'Opened {path}:{dataset} of shape {obj.shape} and dtype {obj.dtype}.')

    @staticmethod
    def _get_comm():
        """Get the MPI communicator to open the file over."""
        if not h5py.get_config().mpi:
            raise ConfigurationError('MPI-IO transfer modes need h5py built with parallel HDF5.')

        try:
            from mpi4py import MPI
        except ImportError as e:
            e.msg = get_import_exception_message(e.name, 'mpi')  # pyright: ignore
            raise e

        return MPI.COMM_WORLD

    def read(self, selection: Selection, out: NDArray) -> int:
        dest = self._check_out(selection, out)
        if not selection.num_rows:
            return 0

        fspace = self._dset.id.get_space()
        selection.select(fspace)
        mspace = h5s.create_simple(selection.shape)
        try:
            self._dset.id.read(mspace, fspace, dest, dxpl=self._dxpl)
        except OSError as err:
            raise StoreReadFailure(f'Failed to read {selection.num_rows} samples from ' +
                                   f'{self.path}:{self.dataset}: {err}') from err
        return dest.nbytes

    def close(self) -> None:
        if self._file:
            self._file.close()
