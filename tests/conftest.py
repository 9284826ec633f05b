# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

from pathlib import Path
from typing import Any

import h5py
import pytest

from tests.common.datasets import DATASET, make_data


@pytest.fixture()
def h5_path(tmp_path: Path) -> str:
    path = str(tmp_path / 'images.h5')
    with h5py.File(path, 'w') as out:
        out.create_dataset(DATASET, data=make_data())
    return path


# Override of pytest "runtest" for DistributedTest class
# This hook is run before the default pytest_runtest_call
@pytest.hookimpl(tryfirst=True)  # pyright: ignore
def pytest_runtest_call(item: Any):
    # Launch a custom function for distributed tests
    if getattr(item.cls, 'is_dist_test', False):
        dist_test_class = item.cls()
        dist_test_class._run_test(item._request)
        item.runtest = lambda: True  # Dummy function so test is not run twice


def pytest_configure(config: Any):
    config.addinivalue_line('markers', 'world_size(n): number of processes of a DistributedTest')
