# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Write a synthetic HDF5 dataset in which every element of sample ``i`` equals ``i``."""

import logging
from argparse import ArgumentParser, Namespace
from typing import List, Optional

import h5py
import numpy as np
from tqdm import tqdm

from slabloader.constant import DEFAULT_DATASET
from slabloader.util import get_shape_arg

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> Namespace:
    """Parse command-line arguments.

    Args:
        argv (List[str], optional): Arguments to parse. Defaults to ``sys.argv``.

    Returns:
        Namespace: Command-line arguments.
    """
    args = ArgumentParser()
    args.add_argument('--output', type=str, default='./images.h5', help='Path to the HDF5 file.')
    args.add_argument('--dataset',
                      type=str,
                      default=DEFAULT_DATASET,
                      help='Path to the dataset within the file.')
    args.add_argument('--num_samples', type=int, default=1024, help='Number of samples.')
    args.add_argument('--sample_shape',
                      type=str,
                      default='224,224,3',
                      help='Comma-delimited shape of one sample.')
    args.add_argument('--dtype', type=str, default='float32', help='Element type.')
    args.add_argument('--chunk', type=int, default=256, help='Samples written per step.')
    args.add_argument('--show_progress', type=int, default=1, help='Show progress bar.')
    return args.parse_args(argv)


def main(args: Namespace) -> None:
    """Write the dataset.

    Args:
        args (Namespace): Command-line arguments.
    """
    if args.num_samples <= 0:
        raise ValueError(f'Number of samples must be positive, but got: {args.num_samples}.')

    if args.chunk <= 0:
        raise ValueError(f'Chunk must be positive, but got: {args.chunk}.')

    sample_shape = get_shape_arg(args.sample_shape)
    dtype = np.dtype(args.dtype)
    starts = range(0, args.num_samples, args.chunk)
    with h5py.File(args.output, 'w') as out:
        dset = out.create_dataset(args.dataset, (args.num_samples,) + sample_shape, dtype)
        for start in tqdm(starts, leave=False, disable=not args.show_progress):
            stop = min(start + args.chunk, args.num_samples)
            ids = np.arange(start, stop).astype(dtype)
            col = ids.reshape((-1,) + (1,) * len(sample_shape))
            dset[start:stop] = np.broadcast_to(col, (stop - start,) + sample_shape)
    logger.info(f'Wrote {args.num_samples} samples of shape {sample_shape} to ' +
                f'{args.output}:{args.dataset}.')


def run() -> None:
    """Console script entry point."""
    main(parse_args())


if __name__ == '__main__':
    run()
