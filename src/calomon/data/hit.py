"""Module with a data class object which represents a calorimeter cell hit."""

from dataclasses import dataclass

import numpy as np

from .base import DataBase

__all__ = ["CaloHit"]


@dataclass(eq=False)
class CaloHit(DataBase):
    """Energy deposited in one calorimeter cell.

    Attributes
    ----------
    cell_id : int
        Encoded detector cell identifier
    energy : float
        Deposited energy in GeV
    position : np.ndarray
        (3) Position of the cell, if known
    """

    cell_id: int = -1
    energy: float = 0.0
    position: np.ndarray = None

    # Fixed-length attributes
    _fixed_length_attrs = (("position", 3),)

    # Attributes specifying coordinates
    _pos_attrs = ("position",)
