"""
Rotation- and permutation-invariant bases of the Atomic Cluster
Expansion (ACE) for machine-learning interatomic potentials.

"""

from .coupling import Rot3DCoeffs, clebsch_gordan
from .degree import SparsePSHDegree
from .exceptions import ConfigurationError, DomainError, UnknownSpeciesError
from .onep import BasicPSH1pBasis, PSH1pBasisFcn
from .pibasis import PIBasis, PIBasisFcn
from .radial import ChebyshevRadialBasis
from .rpi import RPIBasis, rpi_filter
from .sphericalharmonics import SphericalHarmonics
from .utils import ace_basis, descriptor, rpi_basis, rpi_basis_from_config

__all__ = [
    "BasicPSH1pBasis",
    "ChebyshevRadialBasis",
    "ConfigurationError",
    "DomainError",
    "PIBasis",
    "PIBasisFcn",
    "PSH1pBasisFcn",
    "RPIBasis",
    "Rot3DCoeffs",
    "SparsePSHDegree",
    "SphericalHarmonics",
    "UnknownSpeciesError",
    "ace_basis",
    "clebsch_gordan",
    "descriptor",
    "rpi_basis",
    "rpi_basis_from_config",
    "rpi_filter",
]
