# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

from typing import List, Tuple

import pytest

from slabloader.util import get_import_exception_message, get_list_arg, get_shape_arg


@pytest.mark.parametrize('text,expected', [('', []), ('a', ['a']), ('a,b', ['a', 'b'])])
def test_get_list_arg(text: str, expected: List[str]):
    assert get_list_arg(text) == expected


@pytest.mark.parametrize('text,expected', [('', ()), ('3', (3,)), ('224,224,3', (224, 224, 3))])
def test_get_shape_arg(text: str, expected: Tuple[int, ...]):
    assert get_shape_arg(text) == expected


@pytest.mark.parametrize('text', ['0', '3,-1', 'a'])
def test_get_shape_arg_invalid(text: str):
    with pytest.raises(ValueError):
        get_shape_arg(text)


def test_import_message():
    msg = get_import_exception_message('mpi4py', 'mpi')
    assert 'slabloader[mpi]' in msg
