"""
Tests for the complex spherical harmonics and their gradients.
"""

import numpy as np
import pytest
from scipy import special

from ..sphericalharmonics import SphericalHarmonics, lm_index
from ..testing import fd_gradient


def random_vectors(n, seed=0):
    rng = np.random.default_rng(seed)
    return rng.normal(size=(n, 3)) * 2.0


class TestSphericalHarmonics:

    def test_flat_index(self):
        idx = [lm_index(l, m) for l in range(4) for m in range(-l, l + 1)]
        assert idx == list(range(16))

    def test_compare_scipy(self):
        """Values agree with scipy's harmonics (Condon-Shortley phase)."""
        maxL = 6
        sh = SphericalHarmonics(maxL)
        R = random_vectors(20)
        r = np.linalg.norm(R, axis=1)
        polar = np.arccos(R[:, 2] / r)
        azimuth = np.arctan2(R[:, 1], R[:, 0])
        Y = sh.evaluate(R)
        assert Y.shape == (20, (maxL + 1)**2)
        for l in range(maxL + 1):
            for m in range(-l, l + 1):
                Y_ref = special.sph_harm_y(l, m, polar, azimuth)
                assert np.allclose(Y[:, lm_index(l, m)], Y_ref, atol=1e-12)

    def test_addition_theorem(self):
        """sum_m |Y_lm|^2 = (2l+1)/(4 pi) for every direction."""
        sh = SphericalHarmonics(5)
        Y = sh.evaluate(random_vectors(10, seed=1))
        for l in range(6):
            block = Y[:, lm_index(l, -l):lm_index(l, l) + 1]
            assert np.allclose(np.sum(np.abs(block)**2, axis=1),
                               (2 * l + 1) / (4 * np.pi))

    def test_independent_of_length(self):
        sh = SphericalHarmonics(4)
        R = random_vectors(5, seed=2)
        assert np.allclose(sh.evaluate(R), sh.evaluate(3.7 * R))

    def test_gradient_finite_difference(self):
        sh = SphericalHarmonics(4)
        R = random_vectors(6, seed=3)
        Y, dY = sh.evaluate_d(R)
        assert np.allclose(Y, sh.evaluate(R))
        assert dY.shape == (6, 25, 3)
        for i in range(len(R)):
            Ri = R[i:i + 1]
            grad_re = fd_gradient(lambda x: sh.evaluate(x)[0].real, Ri)
            grad_im = fd_gradient(lambda x: sh.evaluate(x)[0].imag, Ri)
            assert np.allclose(dY[i].real, grad_re[:, 0, :], atol=1e-7)
            assert np.allclose(dY[i].imag, grad_im[:, 0, :], atol=1e-7)

    def test_gradient_orthogonal_to_radius(self):
        """Y depends on the direction only, so dY . R = 0."""
        sh = SphericalHarmonics(3)
        R = random_vectors(8, seed=4)
        _, dY = sh.evaluate_d(R)
        assert np.allclose(np.einsum('ika,ia->ik', dY, R), 0.0, atol=1e-12)

    @pytest.mark.parametrize("R", [[0.0, 0.0, 1.0], [0.0, 0.0, -2.0]])
    def test_poles(self, R):
        sh = SphericalHarmonics(4)
        Y, dY = sh.evaluate_d(np.array([R]))
        assert np.all(np.isfinite(Y))
        assert np.all(np.isfinite(dY))
        # only m = 0 survives on the z axis
        for l in range(5):
            for m in range(-l, l + 1):
                if m != 0:
                    assert abs(Y[0, lm_index(l, m)]) < 1e-14
