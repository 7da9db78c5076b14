import unittest

import numpy as np

from hjbvi import ConfigurationError, ExplicitSwitch, LCPObstacle, TwoAssetModel, results_to_df, solve_hjbvi
from hjbvi.operators import row_sums


class TestTwoAssetModel(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.model = TwoAssetModel()
        cls.sol = solve_hjbvi(cls.model)
        cls.sol_cells = solve_hjbvi(TwoAssetModel(kernel='cells'))
        cls.sol_lcp = solve_hjbvi(cls.model, strategy=cls.model.lcp_strategy())

    def test_setup(self):
        model = self.model
        self.assertEqual(model.space.shape, (2, 50, 100))
        self.assertIsInstance(model.default_strategy(), ExplicitSwitch)
        self.assertIsInstance(model.lcp_strategy(), LCPObstacle)
        self.assertEqual(model.maxit, 100)
        self.assertEqual(model.crit, 1e-5)
        self.assertEqual(model.Delta, 100)
        # no tax on illiquid returns at a = 0
        np.testing.assert_allclose(model.Ra[:, 0, :], model.ra)
        self.assertTrue(np.all(model.Ra[:, -1, :] < model.ra))
        np.testing.assert_array_equal(model.Rb[0, 0, model.grid_b.points < 0], model.rb_neg)
        np.testing.assert_array_equal(model.Rb[0, 0, model.grid_b.points > 0], model.rb_pos)

    def test_converged(self):
        for sol in (self.sol, self.sol_cells, self.sol_lcp):
            self.assertLessEqual(sol.it, 100)
            self.assertLess(sol.dist[-1], 1e-5)
            self.assertLess(np.max(np.abs(row_sums(sol.A))), 1e-10)

    def test_kernels_agree(self):
        self.assertEqual(self.sol.it, self.sol_cells.it)
        np.testing.assert_allclose(self.sol_cells.v, self.sol.v, rtol=1e-6)
        for key in ['c', 'd', 's', 'm']:
            np.testing.assert_allclose(getattr(self.sol_cells, key), getattr(self.sol, key),
                                       rtol=1e-6, atol=1e-10, err_msg=key)

    def test_lcp_agrees(self):
        np.testing.assert_allclose(self.sol_lcp.v, self.sol.v, rtol=1e-6)
        for key in ['c', 'd', 's', 'm']:
            np.testing.assert_allclose(getattr(self.sol_lcp, key), getattr(self.sol, key),
                                       rtol=1e-6, atol=1e-7, err_msg=key)
        self.assertTrue(np.all(self.sol_lcp.v > self.sol_lcp.v_star))

    def test_outputs(self):
        sol, model = self.sol, self.model
        np.testing.assert_allclose(sol.s, sol.sc + sol.sd, atol=1e-12)
        np.testing.assert_allclose(sol.m, sol.d + model.xi*model.w*model.zz + model.Ra*model.aa)
        np.testing.assert_allclose(sol.drift, sol.s)
        np.testing.assert_allclose(sol.u, -1/sol.c)
        self.assertTrue(np.all(sol.d[:, 0, :] >= 0))
        self.assertTrue(np.all(sol.d[:, -1, :] <= 0))

    def test_table(self):
        df = results_to_df(self.sol)
        self.assertEqual(len(df), 2*50*100)
        for col in ['state', 'a', 'b', 'c', 'd', 's', 'm', 'sc', 'sd', 'u', 'v', 'action']:
            self.assertIn(col, df.columns)
        self.assertFalse(df['action'].any())
        row = df.iloc[1*5000 + 3*100 + 7]
        self.assertEqual(row['state'], 1)
        self.assertEqual(row['a'], self.model.grid_a.points[3])
        self.assertEqual(row['b'], self.model.grid_b.points[7])


class TestTwoAssetConfiguration(unittest.TestCase):
    def test_invalid(self):
        with self.assertRaises(ConfigurationError):
            TwoAssetModel(kernel='loop')
        with self.assertRaises(ConfigurationError):
            TwoAssetModel(la_mat=((-1/3, 1/3), (1/3, -1/2)))
        with self.assertRaises(ConfigurationError):
            TwoAssetModel(bmin=-40.)
        with self.assertRaises(ConfigurationError):
            TwoAssetModel(J=1)
        with self.assertRaises(ConfigurationError):
            TwoAssetModel(shadow_gap=0)
        # no withdrawal boundary condition above a = 0
        with self.assertRaises(ConfigurationError):
            TwoAssetModel(amin=0.5, I=30, J=15)
        with self.assertRaises(ConfigurationError):
            TwoAssetModel(amin=-1.)
