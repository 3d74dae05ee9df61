"""Energy calibration models.

- `upstream.py`: correction for the energy lost upstream of the calorimeter
"""

from .upstream import *
