# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Options of an epoch reading run."""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from slabloader.constant import DEFAULT_SEED, DROP_REMAINDER
from slabloader.errors import ConfigurationError
from slabloader.partition import algos

__all__ = ['ReaderConfig']


@dataclass
class ReaderConfig:
    """Options of an epoch reading run.

    Args:
        batch_size (int): Samples per batch. Defaults to ``32``.
        num_batches (int): Batches to read per epoch, at most what the shard holds. ``0`` means
            every full batch of the shard. Defaults to ``16``.
        epochs (int): Number of epochs. Defaults to ``4``.
        shuffle (bool): Whether to reshuffle the ordering at the start of every epoch. Defaults to
            ``False``.
        rank_shift (int): Shards each worker advances by per epoch. ``0`` disables rotation.
            Defaults to ``0``.
        compute (float): Seconds to sleep after each batch, standing in for a training step.
            Defaults to ``0.0``.
        barrier (bool): Whether to synchronize all workers between epochs. Defaults to ``False``.
        seed (int): Seed of the ordering shuffle. Defaults to ``DEFAULT_SEED``.
        partition_algo (str): Partition policy. Defaults to ``drop_remainder``.
        show_progress (bool): Whether the leader shows a progress bar. Defaults to ``True``.
    """
    batch_size: int = 32
    num_batches: int = 16
    epochs: int = 4
    shuffle: bool = False
    rank_shift: int = 0
    compute: float = 0.0
    barrier: bool = False
    seed: int = DEFAULT_SEED
    partition_algo: str = DROP_REMAINDER
    show_progress: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check the options, raising ``ConfigurationError`` on the first bad one."""
        if self.batch_size <= 0:
            raise ConfigurationError(f'Batch size must be positive, but got: {self.batch_size}.')

        if self.num_batches < 0:
            raise ConfigurationError(f'Number of batches must be non-negative, but got: ' +
                                     f'{self.num_batches}.')

        if self.epochs < 0:
            raise ConfigurationError(f'Number of epochs must be non-negative, but got: ' +
                                     f'{self.epochs}.')

        if self.compute < 0:
            raise ConfigurationError(f'Compute time must be non-negative, but got: ' +
                                     f'{self.compute}.')

        if self.seed < 0:
            raise ConfigurationError(f'Seed must be non-negative, but got: {self.seed}.')

        if self.partition_algo not in algos:
            raise ConfigurationError(f'Unknown partition algorithm: {self.partition_algo}. ' +
                                     f'Must be one of: {sorted(algos)}.')

    def to_json(self) -> Dict[str, Any]:
        """Get a JSON version of this config.

        Returns:
            Dict[str, Any]: JSON config.
        """
        return asdict(self)
