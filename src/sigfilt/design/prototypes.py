"""Normalized analog lowpass prototypes (cutoff = 1 rad/s).

Every function here is pure: the same order and ripple always produce the
same pole/zero set. Ripples are given in dB.

The elliptic prototype follows Orfanidis, "Lecture notes on elliptic filter
design" (2007): Jacobi elliptic functions are approximated by a short
descending Landen sequence of moduli.
"""

from __future__ import annotations

import cmath
import math
from typing import Final, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from sigfilt.config import get_settings
from sigfilt.errors import ensure_positive, ensure_range
from sigfilt.polynomials import polynomial_roots

DEFAULT_RIPPLE: Final[float] = 0.1
DEFAULT_RIPPLE_PASS: Final[float] = 1.0
DEFAULT_RIPPLE_STOP: Final[float] = 20.0

# Analog zero at infinity (odd-order middle zero of Chebyshev-II / elliptic).
INFINITE_ZERO: Final[complex] = complex(0.0, math.inf)


def _check_order(order: int) -> None:
    ensure_positive(order, "order")


def _angles(order: int) -> NDArray[np.float64]:
    return np.pi * (2 * np.arange(order) + 1) / (2 * order)


def butterworth_poles(order: int) -> NDArray[np.complex128]:
    """Poles equally spaced on the left half of the unit circle."""
    _check_order(order)
    theta = _angles(order)
    return -np.sin(theta) + 1j * np.cos(theta)


def chebyshev1_poles(order: int, ripple: float = DEFAULT_RIPPLE) -> NDArray[np.complex128]:
    """Poles on an ellipse set by the passband ripple.

    Args:
        order: Filter order.
        ripple: Passband ripple in dB.
    """
    _check_order(order)
    ensure_positive(ripple, "ripple")
    eps = math.sqrt(10 ** (ripple / 10) - 1)
    s = math.asinh(1 / eps) / order
    theta = _angles(order)
    return -math.sinh(s) * np.sin(theta) + 1j * math.cosh(s) * np.cos(theta)


def chebyshev2_poles(order: int, ripple: float = DEFAULT_RIPPLE) -> NDArray[np.complex128]:
    """Reciprocals of the Chebyshev-I poles for the same ripple."""
    return 1 / chebyshev1_poles(order, ripple)


def chebyshev2_zeros(order: int) -> NDArray[np.complex128]:
    """Zeros on the imaginary axis at j/cos(theta_k).

    For odd orders the middle zero lies at infinity and is returned as
    :data:`INFINITE_ZERO`.
    """
    _check_order(order)
    cos_theta = np.cos(_angles(order))
    zeros = np.empty(order, dtype=np.complex128)
    for i, c in enumerate(cos_theta):
        zeros[i] = INFINITE_ZERO if order % 2 and i == order // 2 else complex(0.0, 1.0 / c)
    return zeros


def landen(k: float, iterations: Optional[int] = None) -> NDArray[np.float64]:
    """Descending Landen sequence of elliptic moduli starting from k."""
    iterations = iterations or get_settings().landen_iterations
    moduli = np.zeros(iterations)
    for i in range(iterations):
        kp = math.sqrt(1 - k * k)
        k = (1 - kp) / (1 + kp)
        moduli[i] = k
    return moduli


def _ascending_landen(inv_x: complex | NDArray, moduli: Sequence[float]) -> complex | NDArray:
    for v in reversed(moduli):
        inv_x = (inv_x + v / inv_x) / (1 + v)
    return 1 / inv_x


def cde(x: complex | NDArray, moduli: Sequence[float]) -> complex | NDArray:
    """Jacobi cd(x*K, k) in normalized argument, with moduli = landen(k)."""
    return _ascending_landen(1 / np.cos(np.asarray(x) * np.pi / 2), moduli)


def sne(x: complex | NDArray, moduli: Sequence[float]) -> complex | NDArray:
    """Jacobi sn(x*K, k) in normalized argument, with moduli = landen(k)."""
    return _ascending_landen(1 / np.sin(np.asarray(x) * np.pi / 2), moduli)


def asne(w: complex, k: float, iterations: Optional[int] = None) -> complex:
    """Inverse of :func:`sne`: the normalized u with sn(u*K, k) = w."""
    iterations = iterations or get_settings().landen_iterations
    moduli = landen(k, iterations)
    previous = k
    for v in moduli:
        w = w / (1 + cmath.sqrt(1 - w * w * previous * previous)) * 2 / (1 + v)
        previous = v
    return 2 * cmath.asin(w) / math.pi


def _elliptic_moduli(order: int, ripple_pass: float, ripple_stop: float) -> tuple[float, float, float]:
    """Return (eps_pass, selectivity k1 = eps_pass/eps_stop, modulus k)."""
    _check_order(order)
    ensure_positive(ripple_pass, "ripple_pass")
    ensure_range(ripple_pass, ripple_stop, "ripple_pass", "ripple_stop")

    eps_pass = math.sqrt(10 ** (ripple_pass / 10) - 1)
    eps_stop = math.sqrt(10 ** (ripple_stop / 10) - 1)
    k1 = eps_pass / eps_stop
    k1_complement = math.sqrt(1 - k1 * k1)

    moduli = landen(k1_complement)
    u = (2 * np.arange(order // 2) + 1) / order
    product = np.prod(sne(u, moduli)) if len(u) else 1.0
    k_complement = abs(k1_complement**order * product**4)
    k = math.sqrt(1 - k_complement * k_complement)
    return eps_pass, k1, k


def elliptic_poles(
    order: int,
    ripple_pass: float = DEFAULT_RIPPLE_PASS,
    ripple_stop: float = DEFAULT_RIPPLE_STOP,
) -> NDArray[np.complex128]:
    """Elliptic (Cauer) prototype poles.

    Args:
        order: Filter order.
        ripple_pass: Passband ripple in dB.
        ripple_stop: Stopband attenuation in dB; must exceed ripple_pass.

    Raises:
        InvalidSpecificationError: If ripple_pass >= ripple_stop.
    """
    eps_pass, k1, k = _elliptic_moduli(order, ripple_pass, ripple_stop)
    v0 = -1j / order * asne(1j / eps_pass, k1)
    u = (2 * np.arange(order) + 1) / order
    return (1j * cde(u - 1j * v0, landen(k))).astype(np.complex128)


def elliptic_zeros(
    order: int,
    ripple_pass: float = DEFAULT_RIPPLE_PASS,
    ripple_stop: float = DEFAULT_RIPPLE_STOP,
) -> NDArray[np.complex128]:
    """Elliptic prototype zeros on the imaginary axis.

    For odd orders the middle zero lies at infinity (:data:`INFINITE_ZERO`).
    """
    _, _, k = _elliptic_moduli(order, ripple_pass, ripple_stop)
    moduli = landen(k)
    zeros = np.empty(order, dtype=np.complex128)
    for i in range(order):
        if order % 2 and i == order // 2:
            zeros[i] = INFINITE_ZERO
        else:
            zeros[i] = complex(0.0, -1.0 / (k * complex(cde((2 * i + 1) / order, moduli)).real))
    return zeros


def reverse_bessel_coefficient(k: int, n: int) -> float:
    """Coefficient of s^k in the reverse Bessel polynomial of degree n."""
    return math.factorial(2 * n - k) / (2 ** (n - k) * math.factorial(k) * math.factorial(n - k))


def bessel_poles(order: int) -> NDArray[np.complex128]:
    """Roots of the reverse Bessel polynomial, phase-normalized.

    Roots are scaled by C(0, n)^(-1/n) so that their product has unit
    magnitude.
    """
    _check_order(order)
    coefficients = [reverse_bessel_coefficient(k, order) for k in range(order + 1)]
    roots = polynomial_roots(coefficients)
    scale = coefficients[0] ** (-1.0 / order)
    # Sort for a deterministic conjugate layout.
    roots = roots[np.lexsort((roots.imag, roots.real))]
    return roots * scale
