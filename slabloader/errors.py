# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised while sampling and reading batches."""

__all__ = ['ConfigurationError', 'OutOfRangeIndex', 'StoreReadFailure', 'PeerFailure']


class ConfigurationError(ValueError):
    """Invalid run configuration, detected at startup."""


class OutOfRangeIndex(IndexError):
    """A sample index outside ``[0, num_samples)`` reached selection."""


class StoreReadFailure(RuntimeError):
    """The backing store failed to fulfill a read."""


class PeerFailure(RuntimeError):
    """Another worker hit a fatal error and reported it at the epoch barrier."""
