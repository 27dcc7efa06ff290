"""
Weighted running mean, variance, skewness and kurtosis.

Each statistic is a pair of functions working on a caller-owned accumulator
(a float64 numpy array, see `new_buffer`):

    buf = new_buffer(KURTOSIS_BUFFER_SIZE)
    for x, w in samples:
        kurtosis(x, w, buf)
    mean, var, skew, kurt = kurtosis_finalize(buf)

Layout of the accumulator:
    buf[0]      cumulative weight
    buf[1]      running weighted mean
    buf[2..4]   running sums of w * (x - mean) ** k, k = 2..4

The update keeps centered sums against the evolving mean (Welford's method)
instead of raw power sums, so long streams do not lose precision to
cancellation. Finalize only reads the accumulator, it can be called at any
time and updates can resume afterwards.

Skewness and kurtosis are population values: no bias correction, and
kurtosis is not the excess kurtosis (a normal sample gives ~3, not ~0).
A stream whose weights sum to 0 produces NaN/Inf, not an error.
"""

import numpy as np

from incstats.primitives.arith import ipow

MEAN_BUFFER_SIZE = 2
VARIANCE_BUFFER_SIZE = 3
SKEWNESS_BUFFER_SIZE = 4
KURTOSIS_BUFFER_SIZE = 5


def new_buffer(size: int) -> np.ndarray:
    """Returns a zeroed accumulator of the given length."""
    return np.zeros(size, dtype=np.float64)


def check_buffer(buffer, size: int, name: str = "buffer"):
    """Raises ValueError if `buffer` cannot hold `size` slots."""
    if len(buffer) < size:
        raise ValueError(f"{name} needs at least {size} slots, got {len(buffer)}")


def _results(out, size: int) -> np.ndarray:
    if out is None:
        return np.empty(size, dtype=np.float64)
    check_buffer(out, size, name="out")
    return out


# --- Mean ---

def mean(x: float, w: float, buffer: np.ndarray) -> None:
    check_buffer(buffer, MEAN_BUFFER_SIZE)
    with np.errstate(divide="ignore", invalid="ignore"):
        buffer[0] += w
        buffer[1] = buffer[1] + w / buffer[0] * (x - buffer[1])


def mean_finalize(buffer: np.ndarray) -> float:
    check_buffer(buffer, MEAN_BUFFER_SIZE)
    return float(buffer[1])


# --- Variance ---

def variance(x: float, w: float, buffer: np.ndarray) -> None:
    check_buffer(buffer, VARIANCE_BUFFER_SIZE)
    with np.errstate(divide="ignore", invalid="ignore"):
        buffer[0] += w
        new_mean = buffer[1] + w / buffer[0] * (x - buffer[1])
        buffer[2] = buffer[2] + w * (x - buffer[1]) * (x - new_mean)
        buffer[1] = new_mean


def variance_finalize(buffer: np.ndarray, out=None) -> np.ndarray:
    """Returns [mean, population variance]."""
    check_buffer(buffer, VARIANCE_BUFFER_SIZE)
    results = _results(out, 2)
    with np.errstate(divide="ignore", invalid="ignore"):
        results[0] = buffer[1]
        results[1] = buffer[2] / buffer[0]
    return results


# --- Skewness / Kurtosis ---

def _deviations(x: float, w: float, buffer: np.ndarray):
    """
    Shifts of one sample against the pre-update state.
    d: how far the old samples move relative to the new mean (scaled by w).
    e: how far the new sample sits from the new mean.
    """
    total = buffer[0] + w
    delta = x - buffer[1]
    return total, -w * delta / total, buffer[0] * delta / total


def skewness(x: float, w: float, buffer: np.ndarray) -> None:
    check_buffer(buffer, SKEWNESS_BUFFER_SIZE)
    with np.errstate(divide="ignore", invalid="ignore"):
        total, d, e = _deviations(x, w, buffer)
        w_old = buffer[0]

        m3 = buffer[3] + 3.0 * buffer[2] * d + w_old * ipow(d, 3) + w * ipow(e, 3)
        m2 = buffer[2] + w_old * ipow(d, 2) + w * ipow(e, 2)

        buffer[3] = m3
        buffer[2] = m2
        buffer[1] = buffer[1] + w / total * (x - buffer[1])
        buffer[0] = total


def skewness_finalize(buffer: np.ndarray, out=None) -> np.ndarray:
    """Returns [mean, variance, skewness]."""
    check_buffer(buffer, SKEWNESS_BUFFER_SIZE)
    results = _results(out, 3)
    with np.errstate(divide="ignore", invalid="ignore"):
        var = buffer[2] / buffer[0]
        results[0] = buffer[1]
        results[1] = var
        results[2] = (buffer[3] / buffer[0]) / (var * np.sqrt(var))
    return results


def kurtosis(x: float, w: float, buffer: np.ndarray) -> None:
    check_buffer(buffer, KURTOSIS_BUFFER_SIZE)
    with np.errstate(divide="ignore", invalid="ignore"):
        total, d, e = _deviations(x, w, buffer)
        w_old = buffer[0]

        # All three orders read the pre-update lower orders.
        m4 = (buffer[4] + 4.0 * buffer[3] * d + 6.0 * buffer[2] * ipow(d, 2)
              + w_old * ipow(d, 4) + w * ipow(e, 4))
        m3 = buffer[3] + 3.0 * buffer[2] * d + w_old * ipow(d, 3) + w * ipow(e, 3)
        m2 = buffer[2] + w_old * ipow(d, 2) + w * ipow(e, 2)

        buffer[4] = m4
        buffer[3] = m3
        buffer[2] = m2
        buffer[1] = buffer[1] + w / total * (x - buffer[1])
        buffer[0] = total


def kurtosis_finalize(buffer: np.ndarray, out=None) -> np.ndarray:
    """Returns [mean, variance, skewness, kurtosis]."""
    check_buffer(buffer, KURTOSIS_BUFFER_SIZE)
    results = _results(out, 4)
    with np.errstate(divide="ignore", invalid="ignore"):
        var = buffer[2] / buffer[0]
        results[0] = buffer[1]
        results[1] = var
        results[2] = (buffer[3] / buffer[0]) / (var * np.sqrt(var))
        results[3] = (buffer[4] / buffer[0]) / ipow(var, 2)
    return results
