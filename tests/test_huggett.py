import unittest

import numpy as np

from hjbvi import (ConfigurationError, HuggettModel, ImplicitStep, excess_demand, results_to_df, solve_hjbvi,
                   stationary_distribution)
from hjbvi.operators import row_sums


class TestHuggettModel(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.model = HuggettModel()
        cls.sol = solve_hjbvi(cls.model)
        cls.g = stationary_distribution(cls.sol)

    def test_default_strategy(self):
        self.assertIsInstance(self.model.default_strategy(), ImplicitStep)
        self.assertIsNone(self.sol.v_star)

    def test_converged(self):
        self.assertLess(self.sol.dist[-1], 1e-6)
        self.assertLess(np.max(np.abs(row_sums(self.sol.A))), 1e-10)
        self.assertEqual(self.sol.v.shape, (2, 500))

    def test_policies(self):
        sol, model = self.sol, self.model
        self.assertTrue(np.all(sol.c > 0))
        # higher income, higher consumption
        self.assertTrue(np.all(sol.c[1] > sol.c[0]))
        self.assertTrue(np.all(np.diff(sol.v, axis=1) > 0))
        np.testing.assert_allclose(sol.drift, model.z[:, None] + model.r*model.a[None, :] - sol.c)

    def test_stationary_distribution(self):
        g, model = self.g, self.model
        self.assertEqual(g.shape, (2, 500))
        self.assertAlmostEqual(np.sum(g)*model.da, 1.)
        self.assertTrue(np.all(g >= -1e-10))
        resid = self.sol.A.T @ g.reshape(-1)
        self.assertLess(np.max(np.abs(resid)), 1e-6*np.max(np.abs(g)))

    def test_excess_demand_increasing(self):
        self.assertLess(excess_demand(0.01), excess_demand(0.03))

    def test_table_without_obstacle(self):
        df = results_to_df(self.sol)
        self.assertNotIn('v_star', df.columns)
        self.assertFalse(df['action'].any())
        self.assertFalse(df['c'].isna().any())


class TestHuggettConfiguration(unittest.TestCase):
    def test_three_states(self):
        la_mat = [[-0.02, 0.01, 0.01], [0.01, -0.02, 0.01], [0.01, 0.01, -0.02]]
        model = HuggettModel(z=(0.1, 0.15, 0.2), la_mat=la_mat, N_a=100)
        self.assertEqual(model.space.shape, (3, 100))
        A = model.generator(model.policy(model.v0))
        self.assertEqual(A.shape, (300, 300))
        self.assertLess(np.max(np.abs(row_sums(A))), 1e-12)

    def test_invalid(self):
        with self.assertRaises(ConfigurationError):
            HuggettModel(z=(0.1, 0.15, 0.2))
        with self.assertRaises(ConfigurationError):
            HuggettModel(la_mat=[[-0.02, 0.01], [0.03, -0.03]])
        with self.assertRaises(ConfigurationError):
            HuggettModel(amin=-10.)
