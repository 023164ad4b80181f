"""Rational transfer functions B(z)/A(z) and their algebra.

A :class:`TransferFunction` holds numerator and denominator coefficients of
z^-k (index 0 is the constant term) plus a lazily computed zero/pole/gain
form. Instances are immutable: every operation returns a new value, and the
coefficient arrays are read-only so they can be shared with filters.

Example:
    tf1 = TransferFunction([1, -0.1])
    tf2 = TransferFunction([1, 0.4], [1, -0.6])

    total = parallel_combine(tf1, tf2)
    total.numerator          # [2, -0.3, 0.06]
    total.is_fir             # False
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from sigfilt import polynomials
from sigfilt.config import get_settings
from sigfilt.errors import InvalidCoefficientError, InvalidSpecificationError, NumericalFailureError
from sigfilt.spectral import Fft, is_power_of_two


def _as_coefficients(values: ArrayLike, name: str) -> NDArray[np.float64]:
    arr = np.array(values, dtype=np.float64).reshape(-1)
    if len(arr) == 0:
        raise InvalidCoefficientError(f"{name} must not be empty", parameter=name)
    if not np.all(np.isfinite(arr)):
        raise InvalidCoefficientError(f"{name} must be finite", parameter=name)
    arr.setflags(write=False)
    return arr


def direct_form(
    b: NDArray, a: NDArray, x: NDArray, dtype: type = np.float64
) -> NDArray:
    """Run the direct-form difference equation over x from zero state.

    y[n] = sum(b[k]*x[n-k]) - sum(a[m]*y[n-m], m >= 1), with a[0] == 1.
    """
    b = np.asarray(b, dtype=dtype)
    a = np.asarray(a, dtype=dtype)
    x = np.asarray(x, dtype=dtype)
    y = np.zeros(len(x), dtype=dtype)
    nb = len(b)
    na = len(a) - 1
    for n in range(len(x)):
        kmax = min(n + 1, nb)
        acc = np.dot(b[:kmax], x[n - kmax + 1 : n + 1][::-1])
        mmax = min(n, na)
        if mmax:
            acc -= np.dot(a[1 : mmax + 1], y[n - mmax : n][::-1])
        y[n] = acc
    return y


# Bins where |B| falls below this fraction of sum(|b|) sit on a unit-circle root.
SINGULAR_TOLERANCE = 1e-9

# Offset (radians) at which the delay is sampled around such a bin.
SINGULAR_OFFSET = 1e-4


def _delay_at(coeffs: NDArray[np.float64], omegas: NDArray[np.float64]) -> NDArray[np.float64]:
    k = np.arange(len(coeffs))
    basis = np.exp(-1j * np.outer(omegas, k))
    return ((basis @ (coeffs * k)) / (basis @ coeffs)).real


def _delay_of(
    coeffs: NDArray[np.float64],
    spectrum: NDArray[np.complex128],
    ramp: NDArray[np.complex128],
    size: int,
) -> NDArray[np.float64]:
    """Group delay of one polynomial: Re(FFT(k*c) / FFT(c)).

    A root on the unit circle makes the ratio 0/0 at its bin; there the
    delay is replaced by the mean of the values just either side.
    """
    singular = np.abs(spectrum) <= SINGULAR_TOLERANCE * np.sum(np.abs(coeffs))
    delay = np.zeros(size)
    np.divide((ramp * spectrum.conj()).real, np.abs(spectrum) ** 2, out=delay, where=~singular)
    if np.any(singular):
        omegas = 2 * np.pi * np.flatnonzero(singular) / size
        delay[singular] = 0.5 * (
            _delay_at(coeffs, omegas - SINGULAR_OFFSET) + _delay_at(coeffs, omegas + SINGULAR_OFFSET)
        )
    return delay


@dataclass(frozen=True, slots=True, eq=False)
class FrequencyResponse:
    """Frequency response sampled on size//2 + 1 bins from DC to Nyquist.

    Attributes:
        response: Complex response H(e^jw).
        group_delay: Group delay in samples for each bin.
    """

    response: NDArray[np.complex128]
    group_delay: NDArray[np.float64]

    @property
    def frequencies(self) -> NDArray[np.float64]:
        """Normalized frequencies (fraction of sampling rate) of each bin."""
        return np.linspace(0.0, 0.5, len(self.response))

    @property
    def magnitude(self) -> NDArray[np.float64]:
        """Magnitude response."""
        return np.abs(self.response)

    @property
    def phase(self) -> NDArray[np.float64]:
        """Wrapped phase response in radians."""
        return np.angle(self.response)

    @property
    def phase_unwrapped(self) -> NDArray[np.float64]:
        """Unwrapped phase response in radians."""
        return np.unwrap(np.angle(self.response))

    @property
    def power_db(self) -> NDArray[np.float64]:
        """Magnitude response in decibels."""
        with np.errstate(divide="ignore"):
            return 20 * np.log10(np.abs(self.response))


class TransferFunction:
    """Rational system function B(z)/A(z).

    Args:
        numerator: Coefficients b[0], b[1], ... of z^0, z^-1, ...
        denominator: Coefficients a[0], a[1], ...; defaults to [1] (FIR).
    """

    __slots__ = ("_b", "_a", "_zeros", "_poles", "_gain")

    def __init__(self, numerator: ArrayLike, denominator: Optional[ArrayLike] = None) -> None:
        self._b = _as_coefficients(numerator, "numerator")
        self._a = _as_coefficients([1.0] if denominator is None else denominator, "denominator")
        self._zeros: Optional[NDArray[np.complex128]] = None
        self._poles: Optional[NDArray[np.complex128]] = None
        self._gain: Optional[float] = None

    @classmethod
    def from_zpk(
        cls,
        zeros: Iterable[complex],
        poles: Iterable[complex],
        gain: float = 1.0,
    ) -> TransferFunction:
        """Build a transfer function from z-plane zeros, poles and gain.

        The polynomials are expanded by repeated complex multiplication;
        the negligible imaginary remainder is dropped.

        Raises:
            InvalidSpecificationError: If complex roots are not conjugate-paired.
        """
        zeros = np.asarray(list(zeros), dtype=np.complex128)
        poles = np.asarray(list(poles), dtype=np.complex128)
        b = gain * polynomials.to_real(polynomials.from_roots(zeros), "numerator")
        a = polynomials.to_real(polynomials.from_roots(poles), "denominator")
        tf = cls(b, a)
        tf._zeros = zeros
        tf._poles = poles
        tf._gain = float(gain)
        return tf

    def _with_zpk_of(self, other: TransferFunction, gain: Optional[float]) -> TransferFunction:
        self._zeros = other._zeros
        self._poles = other._poles
        self._gain = gain
        return self

    def __repr__(self) -> str:
        return f"TransferFunction(numerator={self._b.tolist()}, denominator={self._a.tolist()})"

    @property
    def numerator(self) -> NDArray[np.float64]:
        """Read-only numerator coefficients."""
        return self._b

    @property
    def denominator(self) -> NDArray[np.float64]:
        """Read-only denominator coefficients."""
        return self._a

    @property
    def is_fir(self) -> bool:
        """True when the denominator is a single constant."""
        return len(self._a) == 1

    @property
    def order(self) -> int:
        """Denominator degree for IIR systems, kernel length - 1 for FIR."""
        if self.is_fir:
            return len(self._b) - 1
        return len(self._a) - 1

    @property
    def zeros(self) -> NDArray[np.complex128]:
        """Zeros in the z-plane (computed on first access).

        Leading zero numerator coefficients are a pure delay and add no finite zeros.
        """
        if self._zeros is None:
            self._zeros = polynomials.polynomial_roots(self._b[::-1]) if len(self._b) > 1 else np.zeros(0, np.complex128)
        return self._zeros

    @property
    def poles(self) -> NDArray[np.complex128]:
        """Poles in the z-plane (computed on first access)."""
        if self._poles is None:
            self._poles = polynomials.polynomial_roots(self._a[::-1]) if len(self._a) > 1 else np.zeros(0, np.complex128)
        return self._poles

    @property
    def gain(self) -> float:
        """Ratio of the leading non-zero numerator and denominator coefficients."""
        if self._gain is None:
            a0 = self._a[0]
            if abs(a0) < polynomials.ZERO_TOLERANCE:
                raise InvalidCoefficientError(
                    "denominator[0] is zero; gain is undefined", parameter="denominator[0]", actual=a0
                )
            nonzero = np.flatnonzero(np.abs(self._b) >= polynomials.ZERO_TOLERANCE)
            self._gain = float(self._b[nonzero[0]] / a0) if len(nonzero) else 0.0
        return self._gain

    def normalized(self) -> TransferFunction:
        """Return a copy with all coefficients divided by denominator[0].

        Raises:
            InvalidCoefficientError: If denominator[0] is numerically zero.
        """
        a0 = self._a[0]
        if abs(a0) < polynomials.ZERO_TOLERANCE:
            raise InvalidCoefficientError(
                "denominator[0] cannot be zero", parameter="denominator[0]", actual=a0
            )
        if a0 == 1.0:
            return self
        tf = TransferFunction(self._b / a0, self._a / a0)
        return tf._with_zpk_of(self, self._gain)

    def response_at(self, omega: float) -> complex:
        """Evaluate H(e^jw) at a normalized angular frequency (radians/sample)."""
        num = polynomials.evaluate_on_unit_circle(self._b, omega)
        den = polynomials.evaluate_on_unit_circle(self._a, omega)
        if abs(den) < polynomials.ZERO_TOLERANCE:
            raise NumericalFailureError("response_at", f"denominator vanishes at omega={omega}")
        return num / den

    def normalized_at(self, omega: float) -> TransferFunction:
        """Return a copy whose magnitude response equals 1 at omega.

        Args:
            omega: Normalized angular frequency in [0, pi] (0 = DC, pi = Nyquist).

        Raises:
            NumericalFailureError: If the response magnitude at omega is zero.
        """
        magnitude = abs(self.response_at(omega))
        if magnitude < polynomials.ZERO_TOLERANCE:
            raise NumericalFailureError("normalized_at", f"zero response magnitude at omega={omega}")
        tf = TransferFunction(self._b / magnitude, self._a)
        gain = None if self._gain is None else self._gain / magnitude
        return tf._with_zpk_of(self, gain)

    def _spectrum(self, coeffs: NDArray[np.float64], size: int) -> NDArray[np.complex128]:
        re = np.zeros(size)
        im = np.zeros(size)
        re[: len(coeffs)] = coeffs
        Fft(size).direct(re, im)
        return re + 1j * im

    def _check_size(self, size: int) -> None:
        longest = max(len(self._b), len(self._a))
        if not is_power_of_two(size) or size < longest:
            raise InvalidSpecificationError(
                f"size must be a power of two >= {longest}, got {size}",
                parameter="size",
                expected=f"power of two >= {longest}",
                actual=size,
            )

    def group_delay(self, size: Optional[int] = None) -> NDArray[np.float64]:
        """Group delay in samples on size//2 + 1 bins from DC to Nyquist."""
        return self.frequency_response(size).group_delay

    def frequency_response(self, size: Optional[int] = None) -> FrequencyResponse:
        """Evaluate the frequency response and group delay through the FFT.

        Args:
            size: FFT size (power of two); defaults to the active settings'
                ``frequency_response_size``.
        """
        size = size or get_settings().frequency_response_size
        self._check_size(size)
        bins = size // 2 + 1

        num = self._spectrum(self._b, size)
        den = self._spectrum(self._a, size)
        ramp_num = self._spectrum(self._b * np.arange(len(self._b)), size)
        ramp_den = self._spectrum(self._a * np.arange(len(self._a)), size)

        with np.errstate(divide="ignore", invalid="ignore"):
            response = num / den
        delay = _delay_of(self._b, num, ramp_num, size) - _delay_of(self._a, den, ramp_den, size)

        return FrequencyResponse(response=response[:bins], group_delay=delay[:bins])

    def impulse_response(self, length: Optional[int] = None) -> NDArray[np.float64]:
        """Return the first ``length`` samples of the impulse response (64-bit).

        FIR systems return their kernel regardless of ``length``.
        """
        tf = self.normalized()
        if tf.is_fir:
            return tf.numerator.copy()
        length = length or get_settings().impulse_response_length
        impulse = np.zeros(length)
        impulse[0] = 1.0
        return direct_form(tf.numerator, tf.denominator, impulse)

    def steady_state(self) -> NDArray[np.float64]:
        """Return transposed-state initial conditions for a unit step.

        Filtering a constant input c from state ``c * steady_state()`` yields
        the steady-state output immediately. The vector has
        max(len(b), len(a)) - 1 entries.

        Raises:
            NumericalFailureError: If the system has a pole at z = 1.
        """
        tf = self.normalized()
        n = max(len(tf.numerator), len(tf.denominator))
        if n == 1:
            return np.zeros(0)
        b = np.zeros(n)
        a = np.zeros(n)
        b[: len(tf.numerator)] = tf.numerator
        a[: len(tf.denominator)] = tf.denominator

        i_minus_a = np.eye(n - 1) - polynomials.companion_matrix(a[::-1]).T
        rhs = b[1:] - a[1:] * b[0]
        try:
            return np.linalg.solve(i_minus_a, rhs)
        except np.linalg.LinAlgError as exc:
            raise NumericalFailureError("steady_state", str(exc)) from exc


def series_combine(tf1: TransferFunction, tf2: TransferFunction) -> TransferFunction:
    """Cascade two systems: B = B1*B2, A = A1*A2.

    The polynomial product is kept exactly; no pole-zero cancellation.
    """
    tf = TransferFunction(
        polynomials.multiply(tf1.numerator, tf2.numerator),
        polynomials.multiply(tf1.denominator, tf2.denominator),
    )
    if tf1._zeros is not None and tf2._zeros is not None and tf1._poles is not None and tf2._poles is not None:
        tf._zeros = np.concatenate([tf1._zeros, tf2._zeros])
        tf._poles = np.concatenate([tf1._poles, tf2._poles])
        if tf1._gain is not None and tf2._gain is not None:
            tf._gain = tf1._gain * tf2._gain
    return tf


def parallel_combine(tf1: TransferFunction, tf2: TransferFunction) -> TransferFunction:
    """Sum two systems: B = B1*A2 + B2*A1, A = A1*A2.

    The result is FIR exactly when both operands are FIR. Common factors
    are not cancelled.
    """
    numerator = polynomials.add(
        polynomials.multiply(tf1.numerator, tf2.denominator),
        polynomials.multiply(tf2.numerator, tf1.denominator),
    )
    denominator = polynomials.multiply(tf1.denominator, tf2.denominator)
    return TransferFunction(numerator, denominator)


def combine_sections(sections: Sequence[TransferFunction]) -> TransferFunction:
    """Cascade a non-empty sequence of transfer functions in order."""
    if not sections:
        raise InvalidSpecificationError("at least one section is required", parameter="sections")
    total = sections[0]
    for section in sections[1:]:
        total = series_combine(total, section)
    return total
