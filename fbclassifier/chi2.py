# chi2.py - chi-squared combining of independent probabilities
#
# Copyright (C) 2002-2013 Python Software Foundation; All Rights Reserved
# Copyright 2014 Jeffrey Finkelstein.
#
# This file is part of fbclassifier, which is licensed under the Python
# Software Foundation License; for more information, see LICENSE.txt.
"""Chi-squared combining of independent probabilities (Fisher's method).

Across vectors of length n, containing random uniformly-distributed
probabilities, -2*sum(ln(p_i)) follows the chi-squared distribution with 2*n
degrees of freedom.  This has been proven (in some appropriate sense) to be
the most sensitive possible test for rejecting the hypothesis that a vector
of probabilities is uniformly distributed.

"""
import math

#: The natural logarithm of two; this is used to convert the binary exponent
#: kept by :class:`LogProduct` into natural-log terms.
LN2 = math.log(2)

#: A running product smaller than this is renormalized with :func:`math.frexp`.
UNDERFLOW_THRESHOLD = 1e-200

#: The score of a category for which there is no evidence at all.
NEUTRAL = 0.5


def chi2Q(x2, v):
    """Return the probability that `chisq` is at least x2, with `v` degrees of
    freedom.

    If `v` is not even, :exc:`ValueError` is raised.

    """
    if v & 1 != 0:
        raise ValueError('v must be even')

    # XXX If x2 is very large, exp(-m) will underflow to 0.
    m = x2 / 2
    result = math.exp(-m)
    term = result
    for i in range(1, v // 2):
        term *= m / i
        result += term
    # With small x2 and large v, accumulated roundoff error, plus error in
    # the platform exp(), can cause this to spill a few ULP above 1.0.  For
    # example, chi2Q(100, 300) has sum == 1.0 + 2.0**-52 at this point.
    # Returning a value even a teensy bit over 1.0 is no good.
    return min(result, 1.0)


class LogProduct:
    """A running product of probabilities with unbounded dynamic range.

    Floating point multiplication is a lot cheaper than calling ln(), but a
    product of a few hundred small probabilities easily underflows to 0.0.
    This simulates unbounded range via frexp: the real product is
    ``mantissa * 2**exponent``, and whenever the mantissa drops below
    :const:`UNDERFLOW_THRESHOLD` its binary exponent is folded into
    ``exponent``.

    """

    __slots__ = 'mantissa', 'exponent', 'count'

    def __init__(self, probabilities=()):
        self.mantissa = 1.0
        self.exponent = 0
        self.count = 0
        for p in probabilities:
            self.multiply(p)

    def __len__(self):
        return self.count

    def __repr__(self):
        return 'LogProduct({!r}, {!r}, n={})'.format(self.mantissa,
                                                    self.exponent, self.count)

    def multiply(self, p):
        self.mantissa *= p
        self.count += 1
        if self.mantissa < UNDERFLOW_THRESHOLD:  # prevent underflow
            self.mantissa, e = math.frexp(self.mantissa)
            self.exponent += e

    def log(self):
        """Returns the natural log of the product, that is, the sum of the
        logs of every factor.

        ln(x * 2**i) = ln(x) + i * ln(2).  A product containing an exact zero
        has a log of minus infinity.

        """
        if self.mantissa == 0:
            return -math.inf
        return math.log(self.mantissa) + self.exponent * LN2


def fisher_combine(probabilities):
    """Combines independent probabilities into a single probability using
    Fisher's method.

    `probabilities` is an iterable of floats in the interval (0.0, 1.0]. The
    statistic ``-2 * ln(product)`` is compared to the chi-squared distribution
    with ``2 * n`` degrees of freedom, and the right tail probability is
    returned.  Small probabilities give a large statistic and therefore a
    small result.

    If `probabilities` is empty there is no evidence either way, and
    :const:`NEUTRAL` is returned.

    """
    product = LogProduct(probabilities)
    n = len(product)
    if n == 0:
        return NEUTRAL
    log = product.log()
    # A certain (0.0) factor makes the statistic infinite.
    if log == -math.inf:
        return 0.0
    return chi2Q(-2 * log, 2 * n)
