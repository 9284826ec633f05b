# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Utility and helper functions."""

from typing import List, Tuple

__all__ = ['get_list_arg', 'get_shape_arg', 'get_import_exception_message']


def get_list_arg(text: str) -> List[str]:
    """Pass a list as a command-line flag.

    Args:
        text (str): Text to split.

    Returns:
        List[str]: Splits, if any.
    """
    return text.split(',') if text else []


def get_shape_arg(text: str) -> Tuple[int, ...]:
    """Pass an array shape as a command-line flag, e.g. ``224,224,3``.

    Args:
        text (str): Comma-delimited dimensions.

    Returns:
        Tuple[int, ...]: The shape. Empty text means a scalar sample.
    """
    shape = tuple(int(dim) for dim in get_list_arg(text))
    for dim in shape:
        if dim <= 0:
            raise ValueError(f'Dimensions must be positive, but got: {text}.')
    return shape


def get_import_exception_message(package_name: str, extra_deps: str) -> str:
    """Get import exception message.

    Args:
        package_name (str): Package name.
        extra_deps (str): Name of the extra that provides it.

    Returns:
        str: Exception message.
    """
    return f'slabloader was installed without {package_name} support. ' + \
            f'To use {package_name} related features with slabloader, run ' + \
            f'`pip install \'slabloader[{extra_deps}]\'`.'
