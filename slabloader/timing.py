# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""Collect named wall-clock intervals and summarize them."""

import logging
from contextlib import contextmanager
from time import time_ns
from typing import Dict, Iterator, List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

__all__ = ['Timing']


class Timing:
    """Named interval recorder.

    Each name collects a list of (start, stop) spans in nanoseconds since the epoch. Purely
    observational: nothing reads it back except the summary.
    """

    def __init__(self) -> None:
        self.spans: Dict[str, List[Tuple[int, int]]] = {}
        self._started: Dict[str, int] = {}

    def start(self, name: str) -> None:
        """Open an interval.

        Args:
            name (str): Interval name.
        """
        if name in self._started:
            raise ValueError(f'Interval is already started: {name}.')
        self._started[name] = time_ns()

    def stop(self, name: str) -> None:
        """Close the open interval of this name.

        Args:
            name (str): Interval name.
        """
        if name not in self._started:
            raise ValueError(f'Interval was never started: {name}.')
        span = self._started.pop(name), time_ns()
        self.spans.setdefault(name, []).append(span)

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        """Record the enclosed block as one interval.

        Args:
            name (str): Interval name.
        """
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)

    def get_stats(self) -> Dict[str, Dict[str, float]]:
        """Calculate duration statistics, in seconds, per interval name.

        Returns:
            Dict[str, Dict[str, float]]: Mapping of name to count, total, mean, min and max.
        """
        obj = {}
        for name, spans in self.spans.items():
            arr = np.asarray(spans, np.int64)
            durs = (arr[:, 1] - arr[:, 0]) / 1e9
            obj[name] = {
                'count': len(durs),
                'total': float(durs.sum()),
                'mean': float(durs.mean()),
                'min': float(durs.min()),
                'max': float(durs.max()),
            }
        return obj

    def report(self) -> None:
        """Log the statistics of every interval."""
        for name, stats in self.get_stats().items():
            logger.info(f'{name:>8}: {stats["count"]:6d} calls - {stats["total"]:10.6f} (sec) ' +
                        f'total - {stats["mean"]:10.6f} (sec) mean')
