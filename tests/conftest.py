import numpy as np
import pytest

STREAM_LENGTH = 1000


def weighted_central_moments(x, w, p):
    """Two-pass reference: (mean, [sum w (x - mean)^k / sum w for k = 0..p])."""
    x = np.asarray(x, dtype=np.float64)
    w = np.asarray(w, dtype=np.float64)
    mean = np.sum(w * x) / np.sum(w)
    centered = x - mean
    moments = np.array([np.sum(w * centered ** k) / np.sum(w) for k in range(p + 1)])
    return mean, moments


@pytest.fixture(params=[111111, 7, 2024])
def weighted_stream(request):
    """Uniform values in [0, 1) with weights in [1e-5, 1)."""
    rng = np.random.default_rng(request.param)
    x = rng.uniform(0.0, 1.0, STREAM_LENGTH)
    w = rng.uniform(1e-5, 1.0, STREAM_LENGTH)
    return x, w


@pytest.fixture
def reference():
    return weighted_central_moments
