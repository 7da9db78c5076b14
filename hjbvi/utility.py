"""
CRRA utility u(c) = c**(1-sigma)/(1-sigma), log when sigma = 1.
"""

import numpy as np

from hjbvi.errors import ConfigurationError


class CRRA(object):
    def __init__(self, sigma=2., dv_floor=10**-6):
        if not sigma > 0:
            raise ConfigurationError("Risk aversion must be positive, got {0}".format(sigma))
        self.sigma, self.dv_floor = float(sigma), dv_floor

    def u(self, c):
        if self.sigma == 1:
            return np.log(c)
        return c**(1-self.sigma)/(1-self.sigma)

    def u_prime(self, c):
        return c**(-self.sigma)

    def u_prime_inv(self, dv):
        #derivatives below the floor would imply unbounded consumption
        return np.maximum(dv, self.dv_floor)**(-1/self.sigma)
