"""Polynomial and complex-root algebra.

Two coefficient orders appear in this package:

- ``polynomial_roots`` and ``companion_matrix`` take ascending powers of x
  (``c[0] + c[1]*x + ... + c[n]*x**n``).
- Transfer-function sequences are coefficients of z^-k (index 0 is the
  constant term). ``from_roots`` and ``evaluate_on_unit_circle`` use that
  convention.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt.errors import InvalidCoefficientError, InvalidSpecificationError, NumericalFailureError

# Coefficients below this magnitude are treated as numerically zero.
ZERO_TOLERANCE = 1e-30

# Imaginary residue tolerated when collapsing conjugate-symmetric products to reals.
IMAG_TOLERANCE = 1e-8


def multiply(p: ArrayLike, q: ArrayLike) -> NDArray:
    """Return the polynomial product (coefficient convolution) of p and q."""
    return np.convolve(np.asarray(p), np.asarray(q))


def add(p: ArrayLike, q: ArrayLike) -> NDArray:
    """Return p + q, zero-extending the shorter sequence."""
    p = np.asarray(p)
    q = np.asarray(q)
    length = max(len(p), len(q))
    out = np.zeros(length, dtype=np.result_type(p, q))
    out[: len(p)] += p
    out[: len(q)] += q
    return out


def from_roots(roots: Iterable[complex]) -> NDArray[np.complex128]:
    """Expand prod(1 - r*z^-1) into z^-k coefficients.

    Args:
        roots: Zeros (or poles) in the z-plane.

    Returns:
        Complex coefficient array of length len(roots) + 1, starting with 1.
    """
    coeffs = np.ones(1, dtype=np.complex128)
    for r in roots:
        coeffs = np.convolve(coeffs, np.array([1.0, -complex(r)], dtype=np.complex128))
    return coeffs


def to_real(coeffs: NDArray[np.complex128], name: str = "coefficients") -> NDArray[np.float64]:
    """Drop the negligible imaginary part of a conjugate-symmetric expansion.

    Raises:
        InvalidSpecificationError: If the imaginary part is not negligible,
            i.e. the roots were not closed under conjugation.
    """
    coeffs = np.asarray(coeffs)
    if not np.iscomplexobj(coeffs):
        return coeffs.astype(np.float64)
    scale = max(1.0, float(np.max(np.abs(coeffs.real))) if len(coeffs) else 1.0)
    residue = float(np.max(np.abs(coeffs.imag))) if len(coeffs) else 0.0
    if residue > IMAG_TOLERANCE * scale:
        raise InvalidSpecificationError(
            f"{name} have a non-negligible imaginary part ({residue:.3g}); "
            "complex roots must come in conjugate pairs",
            parameter=name,
            actual=residue,
        )
    return coeffs.real.astype(np.float64)


def _check_finite(coefficients: NDArray, name: str) -> None:
    if not np.all(np.isfinite(coefficients)):
        raise InvalidCoefficientError(f"{name} must be finite", parameter=name)


def companion_matrix(coefficients: Sequence[float]) -> NDArray[np.float64]:
    """Build the companion matrix of a polynomial given in ascending powers.

    The polynomial is made monic by its highest-degree coefficient; the first
    row holds the negated remaining coefficients in descending order and the
    subdiagonal holds ones. Its eigenvalues are the polynomial's roots.

    Raises:
        InvalidCoefficientError: If the polynomial has degree < 1 or a zero
            leading coefficient.
    """
    c = np.asarray(coefficients)
    if len(c) < 2:
        raise InvalidCoefficientError(
            f"companion matrix needs degree >= 1, got {len(c)} coefficients",
            parameter="coefficients",
            actual=len(c),
        )
    lead = c[-1]
    if abs(lead) < ZERO_TOLERANCE:
        raise InvalidCoefficientError(
            "leading coefficient is zero", parameter="coefficients", actual=lead
        )
    n = len(c) - 1
    matrix = np.zeros((n, n), dtype=np.result_type(c, np.float64))
    matrix[0, :] = -c[-2::-1] / lead
    if n > 1:
        matrix[np.arange(1, n), np.arange(0, n - 1)] = 1.0
    return matrix


def polynomial_roots(coefficients: Sequence[float]) -> NDArray[np.complex128]:
    """Return all complex roots of a polynomial given in ascending powers.

    Uses the companion-matrix eigenvalue method. Degree 0 has no roots and
    degree 1 is solved directly. Numerically zero highest-degree
    coefficients are dropped first.

    Args:
        coefficients: ``c[0] + c[1]*x + ... + c[n]*x**n`` as [c0, ..., cn].

    Returns:
        Complex array of n roots (unordered).

    Raises:
        InvalidCoefficientError: If coefficients are empty, all zero or non-finite.
        NumericalFailureError: If the eigenvalue solver does not converge.
    """
    c = np.asarray(coefficients)
    if len(c) == 0:
        raise InvalidCoefficientError("polynomial has no coefficients", parameter="coefficients")
    _check_finite(c, "coefficients")

    nonzero = np.flatnonzero(np.abs(c) >= ZERO_TOLERANCE)
    if len(nonzero) == 0:
        raise InvalidCoefficientError("polynomial is identically zero", parameter="coefficients")
    c = c[: nonzero[-1] + 1]

    degree = len(c) - 1
    if degree == 0:
        return np.zeros(0, dtype=np.complex128)
    if degree == 1:
        return np.array([-c[0] / c[1]], dtype=np.complex128)

    try:
        roots = np.linalg.eigvals(companion_matrix(c))
    except np.linalg.LinAlgError as exc:
        raise NumericalFailureError("polynomial_roots", str(exc)) from exc

    if not np.all(np.isfinite(roots)):
        raise NumericalFailureError("polynomial_roots", "eigenvalue solver returned non-finite roots")
    return roots.astype(np.complex128)


def evaluate_on_unit_circle(coeffs: Sequence[float], omega: float) -> complex:
    """Evaluate sum(c[k] * exp(-1j*omega*k)) at a normalized angular frequency."""
    c = np.asarray(coeffs)
    k = np.arange(len(c))
    return complex(np.sum(c * np.exp(-1j * omega * k)))
