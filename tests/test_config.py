# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

from typing import Any, Dict

import pytest

from slabloader import ConfigurationError, ReaderConfig, World


def test_defaults():
    config = ReaderConfig()
    assert config.to_json() == {
        'batch_size': 32,
        'num_batches': 16,
        'epochs': 4,
        'shuffle': False,
        'rank_shift': 0,
        'compute': 0.0,
        'barrier': False,
        'seed': 100,
        'partition_algo': 'drop_remainder',
        'show_progress': True,
    }


@pytest.mark.parametrize('kwargs', [
    {'batch_size': 0},
    {'batch_size': -1},
    {'num_batches': -1},
    {'epochs': -1},
    {'compute': -0.5},
    {'seed': -1},
    {'partition_algo': 'round_robin'},
])
def test_invalid(kwargs: Dict[str, Any]):
    with pytest.raises(ConfigurationError):
        ReaderConfig(**kwargs)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        ReaderConfig(batch_size=0)


@pytest.mark.parametrize('num_workers,worker', [(0, 0), (2, 2), (2, -1)])
def test_invalid_world(num_workers: int, worker: int):
    with pytest.raises(ConfigurationError):
        World(num_workers, worker)


def test_world_detect(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv('RANK', '3')
    monkeypatch.setenv('WORLD_SIZE', '4')
    world = World.detect()
    assert world.worker == 3
    assert world.num_workers == 4
    assert not world.is_leader
    assert world.to_json() == {'num_workers': 4, 'worker': 3, 'is_leader': False}


def test_world_detect_single(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv('RANK', raising=False)
    monkeypatch.delenv('WORLD_SIZE', raising=False)
    world = World.detect()
    assert world.worker == 0
    assert world.num_workers == 1
    assert world.is_leader
