"""
Simple ways to construct an RPI basis.

"""

import warnings

from .config import BasisConfig
from .degree import SparsePSHDegree
from .onep import BasicPSH1pBasis
from .radial import ChebyshevRadialBasis
from .rpi import RPIBasis

__author__ = "The acebasis developers"
__date__ = "2024-05-02"

__all__ = ["rpi_basis", "ace_basis", "descriptor", "rpi_basis_from_config"]


def rpi_basis(species="X", N=3,
              # transform parameters
              r0=2.5,
              # degree parameters
              wL=1.5, D=None, maxdeg=8,
              # radial basis parameters
              rcut=5.0, rin=None, pcut=2, pin=2, maxn=None, rbasis=None,
              # one-particle basis parameters
              maxL=None, rotc=None, warn=True):
    """
    Construct an RPI basis with a Chebyshev radial basis.

    Args:
      species: chemical symbol(s) or atomic number(s)
      N (int): maximum correlation order
      r0 (float): typical nearest-neighbour distance
      wL (float): angular weight of the default degree
      D: degree functional (default: SparsePSHDegree(wL=wL))
      maxdeg: degree bound, or {order: bound}
      rcut (float): outer cutoff radius
      rin (float): inner radius (default: 0.5 * r0)
      pcut (int), pin (int): envelope powers of the radial basis
      maxn (int): number of radial functions (default: from maxdeg)
      rbasis: radial basis to use instead of the default one
      maxL (int): largest angular momentum (default: from maxdeg)
      rotc: coupling-coefficient oracle whose caches are reused
      warn (bool): warn about unusual envelope powers

    Returns:
      RPIBasis

    """
    if D is None:
        D = SparsePSHDegree(wL=wL)
    if rin is None:
        rin = 0.5 * r0

    if rbasis is None:
        if (pcut < 2) and warn:
            warnings.warn("`pcut` should normally be >= 2.")
        if (pin < 2) and (pin != 0) and warn:
            warnings.warn("`pin` should normally be >= 2 or 0.")
        if maxn is None:
            maxn = max(1, D.get_maxn(maxdeg))
        rbasis = ChebyshevRadialBasis(maxn, rcut, rin=rin,
                                      pcut=pcut, pin=pin)
    if maxL is None:
        maxL = D.get_maxL(maxdeg)

    basis1p = BasicPSH1pBasis(rbasis, maxL, species=species)
    return RPIBasis(basis1p, N, D, maxdeg, rotc=rotc)


descriptor = rpi_basis
ace_basis = rpi_basis


def rpi_basis_from_config(config: BasisConfig, **kwargs):
    """
    Construct an RPI basis from a BasisConfig; keyword arguments (e.g.,
    rotc, warn) are passed on to rpi_basis().

    """
    return rpi_basis(species=config.species, N=config.N, r0=config.r0,
                     wL=config.wL, maxdeg=config.maxdeg, rcut=config.rcut,
                     rin=config.rin, pcut=config.pcut, pin=config.pin,
                     maxn=config.maxn, maxL=config.maxL, **kwargs)
