"""Detector geometry helpers.

- `layer.py`: cell identifier to layer index decoders
"""

from .layer import *
