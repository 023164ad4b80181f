"""Second-order section (SOS) factorization.

Pairing rule used by :func:`tf_to_sos`:

1. Zeros and poles are padded with roots at the origin to equal, even count,
   and each complex conjugate pair is reduced to one representative.
2. Sections are filled from last to first. Each step takes the remaining
   pole closest to the unit circle and the remaining zero closest to that
   pole, completing the section with conjugates, or with the next real
   pole/zero when the first pick is real.
3. The first section carries the overall gain; every other section has
   unit gain.

The last sections therefore hold the poles nearest the unit circle, so a
cascade runs the best-damped sections first.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

import numpy as np

from sigfilt.errors import InvalidSpecificationError
from sigfilt.polynomials import ZERO_TOLERANCE
from sigfilt.transfer_function import TransferFunction, combine_sections

logger = logging.getLogger(__name__)

# Roots whose imaginary part is below this are treated as real.
REAL_TOLERANCE = 1e-10

_Condition = Callable[[complex], bool]


def _any(c: complex) -> bool:
    return True


def _is_real(c: complex) -> bool:
    return abs(c.imag) < REAL_TOLERANCE


def _is_complex(c: complex) -> bool:
    return abs(c.imag) > REAL_TOLERANCE


def _pick(values: list[complex], key: Callable[[complex], float], condition: _Condition) -> complex:
    """Remove and return the value minimizing ``key`` among those matching ``condition``.

    Falls back to all values when none match.
    """
    candidates = [i for i, v in enumerate(values) if condition(v)] or list(range(len(values)))
    best = min(candidates, key=lambda i: key(values[i]))
    return values.pop(best)


def _closest_to(values: list[complex], target: complex, condition: _Condition) -> complex:
    return _pick(values, lambda v: abs(v - target), condition)


def _closest_to_unit_circle(values: list[complex], condition: _Condition) -> complex:
    return _pick(values, lambda v: abs(abs(v) - 1.0), condition)


def _remove_conjugates(values: list[complex]) -> list[complex]:
    """Keep one member of each conjugate pair; real values are kept as-is.

    Raises:
        InvalidSpecificationError: If a complex value has no conjugate partner.
    """
    remaining = [complex(v.real, 0.0) if _is_real(v) else v for v in values]
    result: list[complex] = []
    while remaining:
        value = remaining.pop(0)
        result.append(value)
        if _is_real(value):
            continue
        for j, other in enumerate(remaining):
            if abs(value.real - other.real) < REAL_TOLERANCE and abs(value.imag + other.imag) < REAL_TOLERANCE:
                del remaining[j]
                break
        else:
            raise InvalidSpecificationError(
                f"no conjugate pair for {value}", parameter="roots", actual=value
            )
    return result


def _leading_zeros(coefficients: np.ndarray) -> int:
    nonzero = np.flatnonzero(np.abs(coefficients) >= ZERO_TOLERANCE)
    return int(nonzero[0]) if len(nonzero) else len(coefficients)


def _carry_delay(sections: list[TransferFunction], delay: int) -> list[TransferFunction]:
    """Shift section numerators right into their trailing zeros until ``delay`` is used up."""
    result = []
    for section in sections:
        b = section.numerator
        shift = min(delay, len(b) - 1 - int(np.flatnonzero(np.abs(b) >= ZERO_TOLERANCE)[-1]))
        if shift:
            b = np.concatenate([np.zeros(shift), b[: len(b) - shift]])
            section = TransferFunction(b, section.denominator)
            delay -= shift
        result.append(section)
    return result


def tf_to_sos(tf: TransferFunction) -> list[TransferFunction]:
    """Factor a transfer function into ceil(order/2) second-order sections.

    Leading zero numerator coefficients are a pure delay z^-k with no finite
    zeros; the delay is reserved as k extra zeros at the origin and then
    carried by shifting section numerators.

    Args:
        tf: Transfer function with real coefficients.

    Returns:
        Sections whose cascade reconstructs ``tf``.

    Raises:
        InvalidSpecificationError: If the numerator is identically zero or the
            roots are not closed under conjugation.
        NumericalFailureError: If root finding fails.
    """
    delay = _leading_zeros(tf.numerator)
    if delay == len(tf.numerator):
        raise InvalidSpecificationError("numerator is identically zero", parameter="numerator")
    if delay:
        tf = TransferFunction(tf.numerator[delay:], tf.denominator)

    zeros = [complex(z) for z in tf.zeros]
    poles = [complex(p) for p in tf.poles]

    count = max(len(zeros) + delay, len(poles))
    zeros += [0j] * (count - len(zeros))
    poles += [0j] * (count - len(poles))

    section_count = (count + 1) // 2
    if count % 2:
        zeros.append(0j)
        poles.append(0j)

    zeros = _remove_conjugates(zeros)
    poles = _remove_conjugates(poles)

    sections: list[TransferFunction] = [None] * section_count  # type: ignore[list-item]

    for i in range(section_count - 1, -1, -1):
        p1 = _closest_to_unit_circle(poles, _any)

        if _is_real(p1) and all(_is_complex(p) for p in poles):
            z1 = _closest_to(zeros, p1, _is_real)
            p2 = z2 = 0j
        else:
            if _is_complex(p1) and sum(1 for z in zeros if _is_real(z)) == 1:
                z1 = _closest_to(zeros, p1, _is_complex)
            else:
                z1 = _closest_to(zeros, p1, _any)

            if _is_complex(p1):
                p2 = p1.conjugate()
                z2 = z1.conjugate() if _is_complex(z1) else _closest_to(zeros, p1, _is_real)
            elif _is_complex(z1):
                z2 = z1.conjugate()
                p2 = _closest_to(poles, z1, _is_real)
            else:
                p2 = _closest_to_unit_circle(poles, _is_real)
                z2 = _closest_to(zeros, p2, _is_real)

        gain = tf.gain if i == 0 else 1.0
        sections[i] = TransferFunction.from_zpk([z1, z2], [p1, p2], gain)

    if delay:
        sections = _carry_delay(sections, delay)

    logger.debug("Factored order-%d transfer function into %d sections", tf.order, section_count)
    return sections


def _trim(coefficients: np.ndarray) -> np.ndarray:
    nonzero = np.flatnonzero(coefficients)
    return coefficients[: nonzero[-1] + 1] if len(nonzero) else coefficients[:1]


def sos_to_tf(sections: Sequence[TransferFunction]) -> TransferFunction:
    """Cascade second-order sections back into one transfer function.

    Trailing zero coefficients introduced by padding roots at the origin
    are dropped; they do not change the system.
    """
    total = combine_sections(list(sections))
    return TransferFunction(_trim(np.array(total.numerator)), _trim(np.array(total.denominator)))
