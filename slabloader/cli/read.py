# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Read an HDF5 dataset epoch by epoch in batches across workers and report throughput."""

import json
import logging
from argparse import ArgumentParser, Namespace
from typing import List, Optional

from slabloader import distributed as dist
from slabloader.config import ReaderConfig
from slabloader.constant import (COLLECTIVE, DEFAULT_DATASET, DEFAULT_SEED, DROP_REMAINDER,
                                  INDEPENDENT)
from slabloader.driver import EpochDriver, EpochStats
from slabloader.errors import ConfigurationError
from slabloader.partition import algos
from slabloader.store import H5Store
from slabloader.timing import Timing
from slabloader.world import World

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> Namespace:
    """Parse command-line arguments.

    Args:
        argv (List[str], optional): Arguments to parse. Defaults to ``sys.argv``.

    Returns:
        Namespace: Command-line arguments.
    """
    args = ArgumentParser()
    args.add_argument('--input', type=str, default='./images.h5', help='Path to the HDF5 file.')
    args.add_argument('--dataset',
                      type=str,
                      default=DEFAULT_DATASET,
                      help='Path to the dataset within the file.')
    args.add_argument('--num_batches',
                      type=int,
                      default=16,
                      help='Batches per epoch per worker, or 0 for every full batch.')
    args.add_argument('--batch_size', type=int, default=32, help='Samples per batch.')
    args.add_argument('--epochs', type=int, default=4, help='Number of epochs.')
    args.add_argument('--shuffle',
                      action='store_true',
                      help='Reshuffle the samples at the start of every epoch.')
    args.add_argument('--rank_shift',
                      type=int,
                      default=0,
                      help='Shards each worker advances by per epoch.')
    args.add_argument('--compute',
                      type=float,
                      default=0.0,
                      help='Simulated training time per batch, in seconds.')
    args.add_argument('--barrier',
                      action='store_true',
                      help='Synchronize all workers between epochs.')
    args.add_argument('--seed', type=int, default=DEFAULT_SEED, help='Shuffle seed.')
    args.add_argument('--partition_algo',
                      type=str,
                      default=DROP_REMAINDER,
                      choices=sorted(algos),
                      help='How the ordering is split across workers.')
    args.add_argument('--mpio_collective',
                      action='store_true',
                      help='Read through MPI-IO with collective transfers.')
    args.add_argument('--mpio_independent',
                      action='store_true',
                      help='Read through MPI-IO with independent transfers.')
    args.add_argument('--show_progress', type=int, default=1, help='Show progress bar.')
    args.add_argument('--log_level', type=str, default='info', help='Logging level.')
    return args.parse_args(argv)


def get_transfer_mode(args: Namespace) -> Optional[str]:
    """Get the store transfer mode from the MPI-IO flags.

    Args:
        args (Namespace): Command-line arguments.

    Returns:
        Optional[str]: Transfer mode, or ``None`` for serial reads.
    """
    if args.mpio_collective and args.mpio_independent:
        raise ConfigurationError('Choose at most one of --mpio_collective and --mpio_independent.')
    if args.mpio_collective:
        return COLLECTIVE
    if args.mpio_independent:
        return INDEPENDENT
    return None


def log_info(args: Namespace, store: H5Store, config: ReaderConfig, world: World) -> None:
    """Log what is about to be read, and how.

    Args:
        args (Namespace): Command-line arguments.
        store (H5Store): The opened store.
        config (ReaderConfig): Run options.
        world (World): Workers.
    """
    dims = ' '.join(map(str, store.sample_shape))
    logger.info('====== dataset info ======')
    logger.info(f'Dataset file: {args.input}')
    logger.info(f'Dataset name: {args.dataset}')
    logger.info(f'Number of samples in the dataset: {store.num_samples}')
    logger.info(f'Dimension of the sample: {len(store.sample_shape)}')
    logger.info(f'Size in each dimension: {dims}')
    logger.info('====== I/O info ======')
    logger.info(f'Transfer mode: {store.transfer_mode or "serial"}')
    logger.info('====== training info ======')
    logger.info(f'Batch size: {config.batch_size}')
    logger.info(f'Number of batches per epoch: {config.num_batches}')
    logger.info(f'Number of epochs: {config.epochs}')
    logger.info(f'Shuffling the samples: {config.shuffle}')
    logger.info(f'Rank shift: {config.rank_shift}')
    logger.info(f'Partition algorithm: {config.partition_algo}')
    logger.info(f'Number of workers: {world.num_workers}')
    logger.info(f'Training time per batch: {config.compute}')
    logger.debug(f'Run config: {json.dumps(config.to_json(), sort_keys=True)}')
    logger.debug(f'World: {json.dumps(world.to_json(), sort_keys=True)}')


def main(args: Namespace) -> List[EpochStats]:
    """Read the dataset for the configured number of epochs.

    Args:
        args (Namespace): Command-line arguments.

    Returns:
        List[EpochStats]: What this worker read in each epoch.
    """
    logging.basicConfig(level=args.log_level.upper(),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    transfer_mode = get_transfer_mode(args)
    config = ReaderConfig(batch_size=args.batch_size,
                          num_batches=args.num_batches,
                          epochs=args.epochs,
                          shuffle=args.shuffle,
                          rank_shift=args.rank_shift,
                          compute=args.compute,
                          barrier=args.barrier,
                          seed=args.seed,
                          partition_algo=args.partition_algo,
                          show_progress=bool(args.show_progress))

    initialized = dist.maybe_init_dist()
    try:
        world = World.detect()
        timing = Timing()
        with timing.timed('open'):
            store = H5Store(args.input, args.dataset, transfer_mode)
        try:
            if world.is_leader:
                log_info(args, store, config, world)
            driver = EpochDriver(store, config, world, timing)
            results = driver.run()
        finally:
            with timing.timed('close'):
                store.close()
        if world.is_leader:
            timing.report()
    finally:
        dist.maybe_destroy_dist(initialized)
    return results


def run() -> None:
    """Console script entry point."""
    main(parse_args())


if __name__ == '__main__':
    run()
