import unittest

import numpy as np

from hjbvi import TwoAssetModel
from hjbvi.switching import adjustment_cost, adjustment_foc


class TestAdjustment(unittest.TestCase):
    def test_foc(self):
        # inaction band |pa/pb - 1| <= chi0
        self.assertAlmostEqual(adjustment_foc(1.1, 1., 2., 0.03, 2.), 0.07)
        self.assertAlmostEqual(adjustment_foc(0.9, 1., 2., 0.03, 2.), -0.07)
        self.assertEqual(adjustment_foc(1.02, 1., 2., 0.03, 2.), 0)
        self.assertEqual(adjustment_foc(2., 1., 0., 0.03, 2.), 0)

    def test_cost(self):
        self.assertAlmostEqual(adjustment_cost(0.07, 2., 0.03, 2.), 0.03*0.07 + 0.07**2/2)
        self.assertAlmostEqual(adjustment_cost(-0.07, 2., 0.03, 2.), adjustment_cost(0.07, 2., 0.03, 2.))
        self.assertAlmostEqual(adjustment_cost(0.1, 0., 0., 2.), 0.01/1e-5)


class TestKernels(unittest.TestCase):
    def setUp(self):
        kwargs = dict(I=20, J=10)
        self.vec, self.cells = TwoAssetModel(kernel='vectorized', **kwargs), TwoAssetModel(kernel='cells', **kwargs)
        self.v = self.vec.v0

    def test_same_policy(self):
        pol_v, pol_c = self.vec.policy(self.v), self.cells.policy(self.v)
        self.assertEqual(set(pol_v), set(pol_c))
        for key in pol_v:
            np.testing.assert_allclose(np.asarray(pol_c[key], dtype=float), np.asarray(pol_v[key], dtype=float),
                                       rtol=1e-12, atol=1e-14, err_msg=key)

    def test_boundary_rules(self):
        pol = self.vec.policy(self.v)
        self.assertTrue(np.all(pol['Id_B'][..., -1]))
        self.assertFalse(np.any(pol['Id_F'][..., -1]))
        self.assertFalse(np.any(pol['Id_B'][..., 0]))
        self.assertFalse(np.any(pol['Id_B'] & pol['Id_F']))
        self.assertTrue(np.all(pol['d'][:, 0, :] >= 0))
        self.assertTrue(np.all(pol['d'][:, -1, :] <= 0))
        self.assertTrue(np.all(pol['sd_F'][..., -1] <= 0))

    def test_generator(self):
        for model in (self.vec, self.cells):
            A = model.generator(model.policy(self.v))
            self.assertEqual(A.shape, (model.space.size,)*2)
            self.assertLess(np.max(np.abs(np.asarray(A.sum(axis=1)))), 1e-12)
