# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

import logging
from pathlib import Path

import h5py
import numpy as np
import pytest

from slabloader import ConfigurationError
from slabloader.cli import create, read


def test_create(tmp_path: Path):
    path = str(tmp_path / 'out.h5')
    args = create.parse_args([
        '--output', path, '--num_samples', '10', '--sample_shape', '4,2', '--chunk', '3',
        '--show_progress', '0'
    ])
    create.main(args)
    with h5py.File(path, 'r') as f:
        data = f['group/dataset'][:]
    assert data.shape == (10, 4, 2)
    assert data.dtype == np.float32
    for i in range(10):
        assert (data[i] == i).all()


def test_read(h5_path: str, caplog: pytest.LogCaptureFixture):
    args = read.parse_args([
        '--input', h5_path, '--batch_size', '5', '--num_batches', '3', '--epochs', '2',
        '--shuffle', '--rank_shift', '1', '--show_progress', '0'
    ])
    with caplog.at_level(logging.INFO):
        stats = read.main(args)
    assert [s.num_batches for s in stats] == [3, 3]
    assert [s.num_samples for s in stats] == [15, 15]
    assert 'Number of samples in the dataset: 100' in caplog.text
    assert 'Epoch 1:' in caplog.text
    assert 'Run completed.' in caplog.text
    for name in ['open', 'select', 'read', 'close']:
        assert f'{name}:' in caplog.text


def test_read_both_mpio_modes(h5_path: str):
    args = read.parse_args(['--input', h5_path, '--mpio_collective', '--mpio_independent'])
    with pytest.raises(ConfigurationError):
        read.main(args)


def test_read_bad_batch_size(h5_path: str):
    args = read.parse_args(['--input', h5_path, '--batch_size', '0'])
    with pytest.raises(ConfigurationError):
        read.main(args)


def test_parse_defaults():
    args = read.parse_args([])
    assert args.input == './images.h5'
    assert args.dataset == 'group/dataset'
    assert args.batch_size == 32
    assert args.num_batches == 16
    assert args.epochs == 4
    assert not args.shuffle
    assert args.partition_algo == 'drop_remainder'


def test_read_logs_run_config(h5_path: str, caplog: pytest.LogCaptureFixture):
    args = read.parse_args([
        '--input', h5_path, '--batch_size', '5', '--num_batches', '1', '--epochs', '1', '--seed',
        '7', '--show_progress', '0'
    ])
    with caplog.at_level(logging.DEBUG, logger='slabloader.cli.read'):
        read.main(args)
    assert 'Run config: {"barrier": false, "batch_size": 5,' in caplog.text
    assert '"seed": 7' in caplog.text
    assert 'World: {"is_leader": true, "num_workers": 1, "worker": 0}' in caplog.text
