"""
Sign, factorial and derivative coefficients for monomial bases.

d^k/dx^k x^n = n!/(n-k)! x^(n-k) for k <= n and 0 otherwise. The
coefficients are tabulated once in DERIVATIVE_TABLE[n, k] so that the
smoothness indicator assembly only performs lookups.
"""

import math

import numpy as np

MAX_TABLE_ORDER = 20


def pos(x):
    """Sign of ``x`` as a float: +1.0, 0.0 or -1.0."""
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return 0.0


def fac(x):
    """Factorial of a non-negative integer ``x`` as a float."""
    if x < 0 or int(x) != x:
        raise ValueError(f"fac() is defined for non-negative integers, got {x!r}")
    return float(math.factorial(int(x)))


def _falling_factorial(n, k):
    if pos(n - k) < 0:
        return 0.0
    return fac(n) / fac(n - k)


DERIVATIVE_TABLE = np.array([
    [_falling_factorial(n, k) for k in range(MAX_TABLE_ORDER + 1)]
    for n in range(MAX_TABLE_ORDER + 1)
])


def derivative_coefficient(n, k):
    """Coefficient of x^(n-k) in the k-th derivative of x^n."""
    return DERIVATIVE_TABLE[n, k]


def monomial_derivative(exponents, alpha):
    """Differentiate x^n y^m z^l by the multi-index ``alpha``.

    Returns
    -------
    coefficient : float
        Zero when any derivative order exceeds the matching exponent.
    exponents : tuple of int
        Exponents of the resulting monomial.
    """
    n, m, l = exponents
    a, b, c = alpha
    coefficient = (DERIVATIVE_TABLE[n, a]
                   * DERIVATIVE_TABLE[m, b]
                   * DERIVATIVE_TABLE[l, c])
    return coefficient, (n - a, m - b, l - c)


def monomial_exponents(order):
    """Exponent triples (n, m, l) with n + m + l <= order, loop order n, m, l."""
    return [(n, m, l)
            for n in range(order + 1)
            for m in range(order + 1 - n)
            for l in range(order + 1 - n - m)]


def basis_exponents(order, dim=(1, 1, 1)):
    """Non-constant basis monomials of a reconstruction of ``order``.

    ``dim`` flags the active directions; monomials varying along an
    inactive direction are left out (e.g. dim = (1, 1, 0) for 2D meshes).
    """
    return [(n, m, l) for (n, m, l) in monomial_exponents(order)
            if 0 < n + m + l
            and (dim[0] or n == 0) and (dim[1] or m == 0) and (dim[2] or l == 0)]


def derivative_orders(order, dim=(1, 1, 1)):
    """Derivative multi-indices (a, b, c) with 1 <= a + b + c <= order in active directions."""
    return basis_exponents(order, dim)
