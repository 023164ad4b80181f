"""Band mapping of analog prototypes and the bilinear s -> z transform.

Cutoff frequencies are fractions of the sampling rate in (0, 0.5). They are
pre-warped with tan(pi*f) before the prototype is mapped, so the digital
filter's band edges land where requested after the bilinear transform.

Each ``*_tf`` routine returns a :class:`TransferFunction` with unit gain at
its reference frequency: DC for low-pass and band-stop, Nyquist for
high-pass, and the band centre for band-pass.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from sigfilt.errors import InvalidSpecificationError, ensure_normalized_frequency, ensure_range
from sigfilt.transfer_function import TransferFunction


def bilinear_transform(real: NDArray[np.float64], imag: NDArray[np.float64]) -> None:
    """Map analog roots to the z-plane in place: z = (1 + s) / (1 - s).

    Roots at infinity map to z = -1.

    Args:
        real: Real parts, overwritten with the real parts of z.
        imag: Imaginary parts, overwritten with the imaginary parts of z.

    Raises:
        InvalidSpecificationError: If the arrays differ in length.
    """
    if len(real) != len(imag):
        raise InvalidSpecificationError(
            f"real and imag must have equal lengths, got {len(real)} and {len(imag)}",
            parameter="real/imag",
            expected=len(real),
            actual=len(imag),
        )
    infinite = ~(np.isfinite(real) & np.isfinite(imag))
    re = np.where(infinite, 0.0, real)
    im = np.where(infinite, 0.0, imag)

    den = (1 - re) * (1 - re) + im * im
    real[:] = np.where(infinite, -1.0, (1 - re * re - im * im) / np.where(infinite, 1.0, den))
    imag[:] = np.where(infinite, 0.0, 2 * im / np.where(infinite, 1.0, den))


def _to_digital(roots: NDArray[np.complex128]) -> NDArray[np.complex128]:
    real = roots.real.astype(np.float64)
    imag = roots.imag.astype(np.float64)
    bilinear_transform(real, imag)
    return real + 1j * imag


def _split(zeros: Iterable[complex]) -> tuple[NDArray[np.complex128], int]:
    """Return (finite zeros, number of zeros at infinity)."""
    zeros = np.asarray(list(zeros), dtype=np.complex128)
    finite = zeros[np.isfinite(zeros)]
    return finite, len(zeros) - len(finite)


def _warp(freq: float) -> float:
    return math.tan(math.pi * freq)


def _check_band(freq1: float, freq2: float) -> None:
    ensure_normalized_frequency(freq1, "freq1")
    ensure_normalized_frequency(freq2, "freq2")
    ensure_range(freq1, freq2, "freq1", "freq2")


def _band_roots(alpha: NDArray[np.complex128], center: float) -> NDArray[np.complex128]:
    beta = np.sqrt(1 - (center / alpha) ** 2)
    return np.concatenate([alpha * (1 + beta), alpha * (1 - beta)])


def lowpass_tf(
    freq: float, poles: Iterable[complex], zeros: Iterable[complex] = ()
) -> TransferFunction:
    """Low-pass filter from an analog prototype.

    Prototype zeros that are missing or at infinity become z = -1.
    """
    ensure_normalized_frequency(freq)
    warped = _warp(freq)
    poles = np.asarray(list(poles), dtype=np.complex128)
    finite, _ = _split(zeros)

    z_poles = _to_digital(poles * warped)
    z_zeros = np.full(len(poles), -1.0 + 0j)
    z_zeros[: len(finite)] = _to_digital(finite * warped)

    return TransferFunction.from_zpk(z_zeros, z_poles).normalized_at(0.0)


def highpass_tf(
    freq: float, poles: Iterable[complex], zeros: Iterable[complex] = ()
) -> TransferFunction:
    """High-pass filter from an analog prototype (s -> wc/s).

    Prototype zeros that are missing or at infinity become z = +1.
    """
    ensure_normalized_frequency(freq)
    warped = _warp(freq)
    poles = np.asarray(list(poles), dtype=np.complex128)
    finite, _ = _split(zeros)

    z_poles = _to_digital(warped / poles)
    z_zeros = np.full(len(poles), 1.0 + 0j)
    z_zeros[: len(finite)] = _to_digital(warped / finite)

    return TransferFunction.from_zpk(z_zeros, z_poles).normalized_at(math.pi)


def bandpass_tf(
    freq1: float, freq2: float, poles: Iterable[complex], zeros: Iterable[complex] = ()
) -> TransferFunction:
    """Band-pass filter from an analog prototype; the order doubles.

    Each prototype root p maps to alpha*(1 +- beta) with alpha = bw*p/2 and
    beta = sqrt(1 - (f0/alpha)^2). Missing or infinite prototype zeros
    contribute one zero at z = -1 and one at z = +1.
    """
    _check_band(freq1, freq2)
    w1, w2 = _warp(freq1), _warp(freq2)
    center = math.sqrt(w1 * w2)
    bandwidth = w2 - w1
    poles = np.asarray(list(poles), dtype=np.complex128)
    finite, _ = _split(zeros)

    z_poles = _to_digital(_band_roots(bandwidth / 2 * poles, center))
    missing = len(poles) - len(finite)
    z_zeros = np.concatenate(
        [
            _to_digital(_band_roots(bandwidth / 2 * finite, center)) if len(finite) else np.zeros(0, np.complex128),
            np.full(missing, -1.0 + 0j),
            np.full(missing, 1.0 + 0j),
        ]
    )

    return TransferFunction.from_zpk(z_zeros, z_poles).normalized_at(2 * math.atan(center))


def bandstop_tf(
    freq1: float, freq2: float, poles: Iterable[complex], zeros: Iterable[complex] = ()
) -> TransferFunction:
    """Band-stop filter from an analog prototype; the order doubles.

    Each prototype root p maps to alpha*(1 +- beta) with alpha = bw/(2p).
    Missing or infinite prototype zeros land on the unit circle at the band
    centre, e^(+-j*2*atan(f0)).
    """
    _check_band(freq1, freq2)
    w1, w2 = _warp(freq1), _warp(freq2)
    center = math.sqrt(w1 * w2)
    bandwidth = w2 - w1
    poles = np.asarray(list(poles), dtype=np.complex128)
    finite, _ = _split(zeros)

    z_poles = _to_digital(_band_roots(bandwidth / (2 * poles), center))
    missing = len(poles) - len(finite)
    notch = np.exp(1j * 2 * math.atan(center))
    z_zeros = np.concatenate(
        [
            _to_digital(_band_roots(bandwidth / (2 * finite), center)) if len(finite) else np.zeros(0, np.complex128),
            np.full(missing, notch),
            np.full(missing, np.conj(notch)),
        ]
    )

    return TransferFunction.from_zpk(z_zeros, z_poles).normalized_at(0.0)
