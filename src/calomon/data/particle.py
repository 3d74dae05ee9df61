"""Module with a data class object which represents a generated particle."""

from dataclasses import dataclass

import numpy as np

from calomon.math import eta, magnitude, phi

from .base import DataBase

__all__ = ["TrueParticle"]


@dataclass(eq=False)
class TrueParticle(DataBase):
    """Generator-level particle information.

    Attributes
    ----------
    pdg : int
        PDG code of the particle
    vertex : np.ndarray
        (3) Production vertex
    momentum : np.ndarray
        (3) Momentum vector (px, py, pz) in GeV
    mass : float
        Mass of the particle in GeV
    label : str
        Energy scale label of the sample the particle was generated in
    """

    pdg: int = -1
    vertex: np.ndarray = None
    momentum: np.ndarray = None
    mass: float = 0.0
    label: str = ""

    # Fixed-length attributes
    _fixed_length_attrs = (("vertex", 3), ("momentum", 3))

    # Attributes specifying coordinates
    _pos_attrs = ("vertex",)

    # Attributes specifying vector components
    _vec_attrs = ("momentum",)

    # String attributes
    _str_attrs = ("label",)

    def __str__(self):
        """Human-readable string representation of the particle."""
        return (
            f"Particle at {', '.join(f'{v:g}' for v in self.vertex)} with "
            f"momentum {', '.join(f'{v:g}' for v in self.momentum)} "
            f"and mass {self.mass:g} GeV"
        )

    @property
    def p(self):
        """Momentum magnitude in GeV."""
        return magnitude(self.momentum)

    @property
    def energy(self):
        """Total energy in GeV."""
        return np.sqrt(self.p**2 + self.mass**2)

    @property
    def eta(self):
        """Pseudorapidity of the momentum direction."""
        return eta(self.momentum)

    @property
    def phi(self):
        """Azimuthal angle of the momentum direction."""
        return phi(self.momentum)
