"""Correction for the energy lost upstream of the calorimeter.

Particles lose part of their energy before they reach the active volume of
the calorimeter (tracker, cryostat, ...). That loss is estimated from the
energy deposited in the first calorimeter layer, with a linear model whose
parameters depend on the reconstructed energy:

.. math::

    E_{up} = P_0(E) + P_1(E) E_{first}

    P_0(E) = p_{00} + p_{01} E

    P_1(E) = p_{00} + p_{01} / \\sqrt{E}

Note that the slope :math:`P_1` is evaluated with the :math:`P_0` fit
parameters; the :math:`p_{10}` and :math:`p_{11}` parameters are stored
but do not enter the correction.

TODO: check with the authors of the upstream fits whether the slope should
read :math:`p_{10} + p_{11} / \\sqrt{E}` instead.
"""

from typing import Sequence

import numpy as np

__all__ = ["UpstreamCorrection"]


class UpstreamCorrection:
    """Two-parameter empirical model of the energy lost upstream.

    Attributes
    ----------
    p0p0 : float
        Constant term of the offset parameter
    p0p1 : float
        Energy-dependent term of the offset parameter
    p1p0 : float
        Constant term of the slope parameter (unused)
    p1p1 : float
        Energy-dependent term of the slope parameter (unused)
    """

    def __init__(self, p0p0: float, p0p1: float, p1p0: float, p1p1: float):
        """Initialize the correction model.

        Parameters
        ----------
        p0p0 : float
            Constant term of the offset parameter
        p0p1 : float
            Energy-dependent term of the offset parameter
        p1p0 : float
            Constant term of the slope parameter
        p1p1 : float
            Energy-dependent term of the slope parameter
        """
        self.p0p0 = float(p0p0)
        self.p0p1 = float(p0p1)
        self.p1p0 = float(p1p0)
        self.p1p1 = float(p1p1)

    @classmethod
    def from_params(cls, params: Sequence[float]) -> "UpstreamCorrection":
        """Builds the model from a sequence of four fit parameters.

        Parameters
        ----------
        params : Sequence[float]
            (p0p0, p0p1, p1p0, p1p1) fit parameters

        Returns
        -------
        UpstreamCorrection
            Correction model
        """
        if len(params) != 4:
            raise ValueError(
                "The upstream correction takes exactly 4 fit parameters "
                f"(p0p0, p0p1, p1p0, p1p1), got {len(params)}."
            )

        return cls(*params)

    def __repr__(self):
        """String representation of the model."""
        return (
            f"UpstreamCorrection(p0p0={self.p0p0}, p0p1={self.p0p1}, "
            f"p1p0={self.p1p0}, p1p1={self.p1p1})"
        )

    @property
    def params(self):
        """Fit parameters as a (p0p0, p0p1, p1p0, p1p1) tuple."""
        return (self.p0p0, self.p0p1, self.p1p0, self.p1p1)

    def upstream_energy(self, energy: float, first_layer_energy: float) -> float:
        """Estimates the energy lost upstream of the calorimeter.

        Parameters
        ----------
        energy : float
            Reconstructed energy in GeV, must be positive
        first_layer_energy : float
            Energy deposited in the first calorimeter layer in GeV

        Returns
        -------
        float
            Energy lost upstream in GeV
        """
        if energy <= 0:
            raise ValueError(
                f"The reconstructed energy must be positive, got {energy}."
            )
        p0 = self.p0p0 + self.p0p1 * energy
        p1 = self.p0p0 + self.p0p1 / np.sqrt(energy)

        return p0 + p1 * first_layer_energy

    def correct(self, energy: float, first_layer_energy: float) -> float:
        """Adds the estimated upstream energy to a reconstructed energy.

        Parameters
        ----------
        energy : float
            Reconstructed energy in GeV, must be positive
        first_layer_energy : float
            Energy deposited in the first calorimeter layer in GeV

        Returns
        -------
        float
            Corrected energy in GeV
        """
        return energy + self.upstream_energy(energy, first_layer_energy)

    __call__ = correct
