"""
Weighted central moments of arbitrary order p.

Generalizes the recurrence in `incstats.moments.welford` to any order. The
accumulator has `central_buffer_size(p)` slots:

    buf[0]      cumulative weight
    buf[1]      running weighted mean
    buf[i]      running sum of w * (x - mean) ** i, i = 2..p

For one sample with weight w, total N = buf[0] + w and delta = x - buf[1],
d = -w * delta / N and e = buf[0] * delta / N, order i becomes

    buf[i] + sum(C(i, k) * buf[i - k] * d ** k for k in 1..i-2)
           + buf[0] * d ** i + w * e ** i

Every order is computed from the same pre-update snapshot; the new values are
committed only once all orders are known, then the mean and the weight.
"""

import numpy as np

from incstats.moments.welford import check_buffer
from incstats.primitives.arith import ipow, n_choose_k


def central_buffer_size(p: int) -> int:
    """Accumulator length needed for moments up to order p."""
    return max(2, p + 1)


def _check_order(p: int):
    if p < 1:
        raise ValueError(f"moment order must be >= 1, got {p}")


def central_moment(x: float, w: float, buffer: np.ndarray, p: int) -> None:
    """Adds sample x with weight w to an order-p accumulator."""
    _check_order(p)
    check_buffer(buffer, central_buffer_size(p))

    with np.errstate(divide="ignore", invalid="ignore"):
        w_old = buffer[0]
        total = w_old + w
        delta = x - buffer[1]
        d = -w * delta / total
        e = w_old * delta / total

        staged = []
        for i in range(p, 1, -1):
            cross = 0.0
            for k in range(i - 2, 0, -1):
                cross += n_choose_k(i, k) * buffer[i - k] * ipow(d, k)
            staged.append(buffer[i] + cross + w_old * ipow(d, i) + w * ipow(e, i))

        for i, value in zip(range(p, 1, -1), staged):
            buffer[i] = value
        buffer[1] = buffer[1] + w / total * delta
        buffer[0] = total


def central_moment_finalize(buffer: np.ndarray, p: int, standardize: bool = False,
                            out=None) -> np.ndarray:
    """
    Derives the central moments from an order-p accumulator.

    Returns an array of length p + 2:
        [0]       1.0 (zeroth moment)
        [1]       0.0 (first central moment)
        [2..p]    weighted central moments, divided by sigma ** i when
                  `standardize` is set (so [3] is the skewness, [4] the kurtosis)
        [p + 1]   running mean

    The accumulator is left untouched.
    """
    _check_order(p)
    check_buffer(buffer, central_buffer_size(p))
    if standardize and p < 2:
        raise ValueError("standardized moments need order >= 2")

    if out is None:
        results = np.empty(p + 2, dtype=np.float64)
    else:
        check_buffer(out, p + 2, name="out")
        results = out

    with np.errstate(divide="ignore", invalid="ignore"):
        results[0] = 1.0
        results[1] = 0.0
        for i in range(2, p + 1):
            results[i] = buffer[i] / buffer[0]
        if standardize:
            sigma = np.sqrt(results[2])
            for i in range(p + 1):
                results[i] = results[i] / ipow(sigma, i)
    results[p + 1] = buffer[1]
    return results
