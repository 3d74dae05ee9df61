"""Module with fast, Numba-accelerated, compiled math routines.

- `geo.py` includes detector coordinate functions (pseudorapidity,
  azimuthal angle, polar angle, vector length)
"""

from .geo import *
