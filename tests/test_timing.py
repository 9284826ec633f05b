# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

import logging

import pytest

from slabloader import Timing


def test_timed():
    timing = Timing()
    for _ in range(3):
        with timing.timed('read'):
            pass
    timing.start('open')
    timing.stop('open')

    stats = timing.get_stats()
    assert set(stats) == {'read', 'open'}
    assert stats['read']['count'] == 3
    assert stats['open']['count'] == 1
    assert 0 <= stats['read']['min'] <= stats['read']['mean'] <= stats['read']['max']
    assert stats['read']['total'] >= stats['read']['max']


def test_timed_records_on_error():
    timing = Timing()
    with pytest.raises(KeyError):
        with timing.timed('select'):
            raise KeyError('x')
    assert timing.get_stats()['select']['count'] == 1


def test_bad_nesting():
    timing = Timing()
    timing.start('a')
    with pytest.raises(ValueError):
        timing.start('a')
    with pytest.raises(ValueError):
        timing.stop('b')


def test_report(caplog: pytest.LogCaptureFixture):
    timing = Timing()
    with timing.timed('close'):
        pass
    with caplog.at_level(logging.INFO, logger='slabloader.timing'):
        timing.report()
    assert 'close' in caplog.text
