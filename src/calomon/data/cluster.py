"""Module with a data class object which represents a calorimeter cluster."""

from dataclasses import dataclass

import numpy as np

from calomon.math import eta, phi

from .base import DataBase

__all__ = ["CaloCluster"]


@dataclass(eq=False)
class CaloCluster(DataBase):
    """Reconstructed calorimeter cluster.

    Attributes
    ----------
    position : np.ndarray
        (3) Barycenter of the cluster
    energy : float
        Reconstructed energy in GeV
    """

    position: np.ndarray = None
    energy: float = 0.0

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)

    # Attributes specifying coordinates
    _pos_attrs = ("position",)

    def __str__(self):
        """Human-readable string representation of the cluster."""
        return (
            "Cluster reconstructed at "
            f"{', '.join(f'{v:g}' for v in self.position)} "
            f"with energy {self.energy:g} GeV"
        )

    @property
    def eta(self):
        """Pseudorapidity of the cluster barycenter."""
        return eta(self.position)

    @property
    def phi(self):
        """Azimuthal angle of the cluster barycenter."""
        return phi(self.position)
