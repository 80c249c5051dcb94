"""
Gaussian quadrature of polynomials over triangles.

The rule table holds, for every polynomial degree up to
MAX_QUADRATURE_DEGREE, a collapsed (conical product) Gauss-Legendre rule on
the reference triangle. Points are stored as barycentric coordinates
(1 - u - v, u, v) and weights are normalised to sum to one, so that a
triangle x0 + u*v0 + v*v1 integrates as

    ∫_T f dA = 0.5 |v0 × v1| Σ_q w_q f(x0 + u_q v0 + v_q v1)

Exports:
  - MAX_QUADRATURE_DEGREE, TRIANGLE_RULES
  - triangle_rule
  - gauss_quad, gauss_quad_b
  - required_quadrature_degree, check_polynomial_order
"""

import numpy as np
from numpy.polynomial.legendre import leggauss

from wenogeom._coefficients import pos
from wenogeom._errors import QuadratureDegreeError

MAX_QUADRATURE_DEGREE = 20


def _collapsed_gauss_rule(degree):
    """
    Conical product rule on the triangle {u, v >= 0, u + v <= 1}.

    With u = s and v = t (1 - s) the triangle becomes the unit square and
    picks up the factor (1 - s), which raises the polynomial degree in s by
    one. k Gauss-Legendre points integrate degree 2k - 1 exactly, hence
    k = (degree + 3) // 2 in both directions.
    """
    k = (degree + 3) // 2
    x, w = leggauss(k)
    s = 0.5 * (x + 1.0)
    ws = 0.5 * w

    S, T = np.meshgrid(s, s, indexing='ij')
    WS, WT = np.meshgrid(ws, ws, indexing='ij')
    u = S.ravel()
    v = (T * (1.0 - S)).ravel()
    weights = 2.0 * (WS * WT * (1.0 - S)).ravel()

    bary = np.column_stack((1.0 - u - v, u, v))
    return bary, weights


TRIANGLE_RULES = {
    d: _collapsed_gauss_rule(d) for d in range(MAX_QUADRATURE_DEGREE + 1)
}


def triangle_rule(degree):
    """
    Quadrature rule exact for polynomials of total degree ``degree``.

    Raises
    ------
    QuadratureDegreeError
        If no rule of sufficient exactness is tabulated.
    """
    if degree < 0:
        degree = 0
    try:
        return TRIANGLE_RULES[int(degree)]
    except KeyError:
        raise QuadratureDegreeError(
            f"No triangle quadrature rule for degree {degree}; "
            f"the table covers degrees up to {MAX_QUADRATURE_DEGREE}."
        ) from None


def _rule_points(bary, x0, v0, v1):
    return x0 + np.outer(bary[:, 1], v0) + np.outer(bary[:, 2], v1)


def gauss_quad(n, m, l, x0, v0, v1):
    """
    Surface integral of x^n y^m z^l over a triangle.

    Parameters
    ----------
    n, m, l : int
        Monomial exponents.
    x0 : array_like, shape (3,)
        Anchor vertex of the triangle.
    v0, v1 : array_like, shape (3,)
        Edge vectors from the anchor to the other two vertices.

    Returns
    -------
    float
    """
    x0 = np.asarray(x0, dtype=float)
    v0 = np.asarray(v0, dtype=float)
    v1 = np.asarray(v1, dtype=float)

    bary, weights = triangle_rule(n + m + l)
    p = _rule_points(bary, x0, v0, v1)
    values = p[:, 0]**n * p[:, 1]**m * p[:, 2]**l
    area = 0.5 * np.linalg.norm(np.cross(v0, v1))
    return float(area * np.dot(weights, values))


def gauss_quad_b(n, m, l, x0, v0, v1):
    """
    Smoothness-indicator variant of :func:`gauss_quad`.

    Integrates the x-antiderivative x^(n+1)/(n+1) y^m z^l, i.e. the
    integrand whose x-flux through a closed surface yields the volume
    integral of x^n y^m z^l. Exponents left negative by differentiating a
    monomial more often than its degree allows contribute exactly zero.
    """
    if min(pos(n), pos(m), pos(l)) < 0:
        return 0.0

    x0 = np.asarray(x0, dtype=float)
    v0 = np.asarray(v0, dtype=float)
    v1 = np.asarray(v1, dtype=float)

    bary, weights = triangle_rule(n + 1 + m + l)
    p = _rule_points(bary, x0, v0, v1)
    values = p[:, 0]**(n + 1) * p[:, 1]**m * p[:, 2]**l / (n + 1)
    area = 0.5 * np.linalg.norm(np.cross(v0, v1))
    return float(area * np.dot(weights, values))


def required_quadrature_degree(order):
    """Highest triangle-rule degree used for a reconstruction of ``order``.

    Volume moments need degree order + 1 (divergence reduction), the
    smoothness integrals go up to 2 (order - 1) + 1.
    """
    return max(order + 1, 2 * order - 1)


def check_polynomial_order(order):
    """Reject polynomial orders the quadrature table cannot integrate exactly.

    Raises
    ------
    ValueError
        If ``order`` is not a non-negative integer.
    QuadratureDegreeError
        If the order needs a rule beyond MAX_QUADRATURE_DEGREE.
    """
    if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
        raise ValueError(f"Polynomial order must be an integer, got {order!r}")
    if order < 0:
        raise ValueError(f"Polynomial order must be non-negative, got {order}")
    degree = required_quadrature_degree(int(order))
    if degree > MAX_QUADRATURE_DEGREE:
        raise QuadratureDegreeError(
            f"Polynomial order {order} needs triangle quadrature of degree "
            f"{degree}, but the table covers degrees up to {MAX_QUADRATURE_DEGREE}."
        )
    return int(order)
