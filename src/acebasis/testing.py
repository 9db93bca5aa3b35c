"""
Helpers for testing bases: random environments, random rotations and
finite-difference gradients.

"""

from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

__author__ = "The acebasis developers"
__date__ = "2024-05-02"


def rand_environment(nR: int, species: Sequence = (0,),
                     rmin: float = 0.9, rmax: float = 2.9,
                     rng: Optional[np.random.Generator] = None
                     ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Random neighbour environment with distances in [rmin, rmax].

    Args:
      nR: number of neighbours
      species: atomic numbers to draw the neighbour species from
      rmin, rmax: range of neighbour distances
      rng: random number generator (default: np.random.default_rng())

    Returns:
      (Rs, Zs) with Rs of shape (nR, 3) and Zs of shape (nR,)

    """
    if rng is None:
        rng = np.random.default_rng()
    directions = rng.normal(size=(nR, 3))
    directions /= np.linalg.norm(directions, axis=1)[:, np.newaxis]
    radii = rmin + (rmax - rmin) * rng.random(nR)
    Rs = directions * radii[:, np.newaxis]
    Zs = rng.choice(np.asarray(species, dtype=np.intp), size=nR)
    return Rs, Zs


def rand_rotation(rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Uniformly distributed random rotation matrix, shape (3, 3)."""
    return Rotation.random(None, rng).as_matrix()


def rand_reflection(rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Random improper rotation (rotation followed by inversion)."""
    return -rand_rotation(rng)


def fd_gradient(f, Rs: np.ndarray, h: float = 1.0e-5) -> np.ndarray:
    """
    Central finite-difference gradient of a vector valued function of
    the neighbour positions.

    Args:
      f: callable mapping an (nR, 3) array to a 1-d array
      Rs: (nR, 3) positions
      h: step size

    Returns:
      array of shape (len(f(Rs)), nR, 3)

    """
    Rs = np.array(Rs, dtype=np.float64)
    f0 = np.asarray(f(Rs))
    grad = np.zeros((len(f0),) + Rs.shape)
    for j in range(Rs.shape[0]):
        for a in range(3):
            Rp = Rs.copy()
            Rp[j, a] += h
            Rm = Rs.copy()
            Rm[j, a] -= h
            grad[:, j, a] = (np.asarray(f(Rp)) - np.asarray(f(Rm))) / (2 * h)
    return grad
