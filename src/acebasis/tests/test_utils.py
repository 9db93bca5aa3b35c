"""
Tests for the convenience constructors.
"""

import warnings

import numpy as np
import pytest

from ..config import BasisConfig
from ..coupling import Rot3DCoeffs
from ..degree import SparsePSHDegree
from ..exceptions import ConfigurationError
from ..radial import ChebyshevRadialBasis
from ..rpi import RPIBasis
from ..utils import ace_basis, descriptor, rpi_basis, rpi_basis_from_config


@pytest.fixture(scope="module")
def rotc():
    return Rot3DCoeffs()


def test_defaults_derived_from_degree(rotc):
    basis = rpi_basis(N=2, maxdeg=7, wL=2.0, rotc=rotc)
    assert isinstance(basis, RPIBasis)
    basis1p = basis.pibasis.basis1p
    assert len(basis1p.J) == 7
    assert basis1p.maxL == 3
    assert basis1p.J.rin == pytest.approx(1.25)
    assert basis.pibasis.D == SparsePSHDegree(wL=2.0)


def test_explicit_parameters(rotc):
    rb = ChebyshevRadialBasis(maxn=3, rcut=4.0, rin=0.0)
    basis = rpi_basis(species=["Si", "O"], N=2, maxdeg=6, rbasis=rb,
                      maxL=2, rotc=rotc)
    assert basis.pibasis.basis1p.J is rb
    assert basis.pibasis.basis1p.maxL == 2
    assert basis.species == (14, 8)


def test_aliases():
    assert ace_basis is rpi_basis
    assert descriptor is rpi_basis


def test_envelope_warnings(rotc):
    with pytest.warns(UserWarning, match="pcut"):
        rpi_basis(N=1, maxdeg=3, pcut=1, rotc=rotc)
    with pytest.warns(UserWarning, match="pin"):
        rpi_basis(N=1, maxdeg=3, pin=1, rotc=rotc)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        rpi_basis(N=1, maxdeg=3, pin=0, rotc=rotc)
        rpi_basis(N=1, maxdeg=3, pcut=1, warn=False, rotc=rotc)


def test_from_config(rotc):
    cfg = BasisConfig(species=["Si"], N=2, maxdeg=5, rcut=4.0, maxL=1)
    basis = rpi_basis_from_config(cfg, rotc=rotc)
    other = rpi_basis(species="Si", N=2, maxdeg=5, rcut=4.0, maxL=1,
                      rotc=rotc)
    assert len(basis) == len(other)
    assert basis.pibasis.basis1p.maxL == 1
    Rs = np.array([[1.0, 0.2, -0.4], [-0.3, 1.5, 0.8]])
    assert np.array_equal(basis.evaluate(Rs, [14, 14], "Si"),
                          other.evaluate(Rs, [14, 14], "Si"))


def test_invalid_parameters(rotc):
    with pytest.raises(ConfigurationError):
        rpi_basis(N=2, maxdeg=-1, rotc=rotc)
    with pytest.raises(ConfigurationError):
        rpi_basis(N=2, maxdeg=5, rcut=1.0, rotc=rotc)
    with pytest.raises(ConfigurationError):
        rpi_basis(species=[], N=2, maxdeg=5, rotc=rotc)
