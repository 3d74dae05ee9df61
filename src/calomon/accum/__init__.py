"""Histogram accumulators.

- `accumulator.py`: `Accumulator` (fixed-binning histogram) and
  `AccumulatorSet` (named collection of accumulators)
- `monitor.py`: binning of the histograms of the single-particle monitor
"""

from .accumulator import *
from .monitor import *
