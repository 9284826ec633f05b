# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Constants."""

# Partition policies.
# Every worker gets floor(N / P) samples; the last N % P positions of the ordering are left out.
DROP_REMAINDER = 'drop_remainder'
# Every sample is assigned; shard sizes differ by at most one.
BALANCED = 'balanced'

# Seed of the sample ordering generator, shared by all workers.
DEFAULT_SEED = 100

# Data transfer modes of the HDF5 store.
COLLECTIVE = 'collective'
INDEPENDENT = 'independent'
TRANSFER_MODES = COLLECTIVE, INDEPENDENT

# Path of the dataset inside the HDF5 file.
DEFAULT_DATASET = 'group/dataset'

# Bytes per megabyte, for throughput reporting.
MB = 1 << 20
