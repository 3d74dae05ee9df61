"""Numba JIT compiled detector-geometry coordinate functions.

All functions take a single three-vector, given as a numpy array or a tuple
of (x, y, z) components, and return a scalar.
"""

import numba as nb
import numpy as np

__all__ = ["eta", "phi", "theta", "magnitude", "ETA_LIMIT"]

# Pseudorapidity assigned to vectors along the beam axis
ETA_LIMIT = 10e10


@nb.njit(cache=True)
def magnitude(vector: nb.float64[:]) -> nb.float64:
    """Euclidean norm of a three-vector.

    Parameters
    ----------
    vector : np.ndarray
        (3) Vector components

    Returns
    -------
    float
        Length of the vector
    """
    x, y, z = float(vector[0]), float(vector[1]), float(vector[2])
    return np.sqrt(x * x + y * y + z * z)


@nb.njit(cache=True)
def theta(vector: nb.float64[:]) -> nb.float64:
    """Polar angle of a three-vector with respect to the z axis.

    Parameters
    ----------
    vector : np.ndarray
        (3) Vector components

    Returns
    -------
    float
        Polar angle in [0, pi]
    """
    x, y, z = float(vector[0]), float(vector[1]), float(vector[2])
    if x == 0.0 and y == 0.0 and z == 0.0:
        return 0.0

    return np.arctan2(np.sqrt(x * x + y * y), z)


@nb.njit(cache=True)
def eta(vector: nb.float64[:]) -> nb.float64:
    """Pseudorapidity of a three-vector, -ln(tan(theta/2)).

    Computed as asinh(z/rho), which is stable for all polar angles. Vectors
    along the z axis, for which the pseudorapidity is infinite, are given
    a value of +/- `ETA_LIMIT` and the null vector a value of 0.

    Parameters
    ----------
    vector : np.ndarray
        (3) Vector components

    Returns
    -------
    float
        Pseudorapidity
    """
    x, y, z = float(vector[0]), float(vector[1]), float(vector[2])
    rho = np.sqrt(x * x + y * y)
    if rho > 0.0:
        return np.arcsinh(z / rho)

    if z == 0.0:
        return 0.0
    elif z > 0.0:
        return ETA_LIMIT
    else:
        return -ETA_LIMIT


@nb.njit(cache=True)
def phi(vector: nb.float64[:]) -> nb.float64:
    """Azimuthal angle of a three-vector in the transverse plane.

    Parameters
    ----------
    vector : np.ndarray
        (3) Vector components

    Returns
    -------
    float
        Azimuthal angle in (-pi, pi]
    """
    value = np.arctan2(float(vector[1]), float(vector[0]))
    if value <= -np.pi:
        return np.pi

    return value
