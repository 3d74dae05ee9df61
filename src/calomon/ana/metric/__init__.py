"""Reconstruction quality evaluation module.

This submodule is used to evaluate reconstruction quality metrics, such as:
- Single-particle energy and angular resolution
- Cluster multiplicity and duplicate clusters
"""

from .single_particle import *
