"""
Tests for the specialized weighted mean/variance/skewness/kurtosis updates.

Every step of the stream is compared against a naive two-pass computation.
"""

import warnings

import numpy as np
import pytest
from incstats.moments.welford import (
    new_buffer,
    mean, mean_finalize,
    variance, variance_finalize,
    skewness, skewness_finalize,
    kurtosis, kurtosis_finalize,
    MEAN_BUFFER_SIZE, VARIANCE_BUFFER_SIZE, SKEWNESS_BUFFER_SIZE, KURTOSIS_BUFFER_SIZE,
)


class TestRunningAgreement:
    """Running statistics match the two-pass reference after every sample."""

    def test_mean(self, weighted_stream):
        x, w = weighted_stream
        buf = new_buffer(MEAN_BUFFER_SIZE)
        for i in range(len(x)):
            mean(x[i], w[i], buf)
            expected = np.sum(w[:i + 1] * x[:i + 1]) / np.sum(w[:i + 1])
            assert abs(mean_finalize(buf) - expected) < 1e-7

        assert buf[0] == pytest.approx(np.sum(w), rel=1e-12)

    def test_variance(self, weighted_stream, reference):
        x, w = weighted_stream
        buf = new_buffer(VARIANCE_BUFFER_SIZE)
        for i in range(len(x)):
            variance(x[i], w[i], buf)
            results = variance_finalize(buf)
            m, moments = reference(x[:i + 1], w[:i + 1], 2)
            assert abs(results[0] - m) < 1e-7
            assert abs(results[1] - moments[2]) < 1e-7

    def test_skewness(self, weighted_stream, reference):
        x, w = weighted_stream
        buf = new_buffer(SKEWNESS_BUFFER_SIZE)
        for i in range(len(x)):
            skewness(x[i], w[i], buf)
            results = skewness_finalize(buf)
            m, moments = reference(x[:i + 1], w[:i + 1], 3)
            assert abs(results[0] - m) < 1e-7
            assert abs(results[1] - moments[2]) < 1e-7
            if i > 0:
                expected = moments[3] / moments[2] ** 1.5
                assert results[2] == pytest.approx(expected, rel=1e-7, abs=1e-5)

    def test_kurtosis(self, weighted_stream, reference):
        x, w = weighted_stream
        buf = new_buffer(KURTOSIS_BUFFER_SIZE)
        for i in range(len(x)):
            kurtosis(x[i], w[i], buf)
            results = kurtosis_finalize(buf)
            m, moments = reference(x[:i + 1], w[:i + 1], 4)
            assert abs(results[0] - m) < 1e-7
            assert abs(results[1] - moments[2]) < 1e-7
            if i > 0:
                skew = moments[3] / moments[2] ** 1.5
                kurt = moments[4] / moments[2] ** 2
                assert results[2] == pytest.approx(skew, rel=1e-7, abs=1e-5)
                assert results[3] == pytest.approx(kurt, rel=1e-7, abs=1e-5)


class TestKnownValues:

    def test_unweighted_small_sample(self):
        data = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        buf = new_buffer(KURTOSIS_BUFFER_SIZE)
        for v in data:
            kurtosis(v, 1.0, buf)
        m, var, skew, kurt = kurtosis_finalize(buf)

        arr = np.array(data)
        centered = arr - arr.mean()
        assert m == pytest.approx(5.0)
        assert var == pytest.approx(4.0)  # population variance, no Bessel correction
        assert skew == pytest.approx(np.mean(centered ** 3) / 8.0)
        assert kurt == pytest.approx(np.mean(centered ** 4) / 16.0)

    def test_kurtosis_is_not_excess(self):
        """A symmetric two-point distribution has kurtosis exactly 1."""
        buf = new_buffer(KURTOSIS_BUFFER_SIZE)
        for v in [-1.0, 1.0, -1.0, 1.0]:
            kurtosis(v, 1.0, buf)
        results = kurtosis_finalize(buf)
        assert results[2] == pytest.approx(0.0, abs=1e-12)
        assert results[3] == pytest.approx(1.0)

    def test_integer_weights_equal_repeats(self):
        weighted = new_buffer(KURTOSIS_BUFFER_SIZE)
        repeated = new_buffer(KURTOSIS_BUFFER_SIZE)
        for v, k in [(1.0, 3), (2.5, 1), (-4.0, 2)]:
            kurtosis(v, float(k), weighted)
            for _ in range(k):
                kurtosis(v, 1.0, repeated)
        np.testing.assert_allclose(kurtosis_finalize(weighted), kurtosis_finalize(repeated), rtol=1e-10)

    def test_large_offset_is_stable(self):
        buf = new_buffer(VARIANCE_BUFFER_SIZE)
        for v in [1e9 + 1.0, 1e9 + 2.0, 1e9 + 3.0]:
            variance(v, 1.0, buf)
        m, var = variance_finalize(buf)
        assert m == pytest.approx(1e9 + 2.0, abs=1e-6)
        assert var == pytest.approx(2.0 / 3.0)


class TestFinalize:

    def test_idempotent_and_non_destructive(self, weighted_stream):
        x, w = weighted_stream
        observed = new_buffer(KURTOSIS_BUFFER_SIZE)
        untouched = new_buffer(KURTOSIS_BUFFER_SIZE)
        for i in range(len(x)):
            kurtosis(x[i], w[i], observed)
            kurtosis(x[i], w[i], untouched)
            if i % 50 == 0:
                before = observed.copy()
                first = kurtosis_finalize(observed)
                second = kurtosis_finalize(observed)
                np.testing.assert_array_equal(first, second)
                np.testing.assert_array_equal(observed, before)

        np.testing.assert_array_equal(observed, untouched)

    def test_writes_into_out(self):
        buf = new_buffer(SKEWNESS_BUFFER_SIZE)
        for v in [1.0, 2.0, 4.0]:
            skewness(v, 1.0, buf)
        out = np.zeros(3)
        returned = skewness_finalize(buf, out=out)
        assert returned is out
        np.testing.assert_array_equal(out, skewness_finalize(buf))

    def test_empty_accumulator_gives_nan(self):
        results = variance_finalize(new_buffer(VARIANCE_BUFFER_SIZE))
        assert results[0] == 0.0
        assert np.isnan(results[1])


class TestZeroWeight:

    @pytest.mark.parametrize("update, size", [
        (mean, MEAN_BUFFER_SIZE),
        (variance, VARIANCE_BUFFER_SIZE),
        (skewness, SKEWNESS_BUFFER_SIZE),
        (kurtosis, KURTOSIS_BUFFER_SIZE),
    ])
    def test_zero_weight_is_noop(self, update, size):
        buf = new_buffer(size)
        for v, wt in [(0.2, 0.5), (0.9, 1.0), (0.4, 0.25), (0.7, 0.8)]:
            update(v, wt, buf)
        before = buf.copy()
        update(123.0, 0.0, buf)
        np.testing.assert_array_equal(buf, before)


class TestBufferContract:

    @pytest.mark.parametrize("update, size", [
        (mean, MEAN_BUFFER_SIZE),
        (variance, VARIANCE_BUFFER_SIZE),
        (skewness, SKEWNESS_BUFFER_SIZE),
        (kurtosis, KURTOSIS_BUFFER_SIZE),
    ])
    def test_short_buffer_rejected(self, update, size):
        with pytest.raises(ValueError):
            update(1.0, 1.0, new_buffer(size - 1))

    def test_short_out_rejected(self):
        buf = new_buffer(KURTOSIS_BUFFER_SIZE)
        kurtosis(1.0, 1.0, buf)
        with pytest.raises(ValueError):
            kurtosis_finalize(buf, out=np.zeros(3))


class TestDegenerateWeight:
    """Zero total weight yields NaN silently, in updates as in finalize."""

    @pytest.mark.parametrize("update, size", [
        (mean, MEAN_BUFFER_SIZE),
        (variance, VARIANCE_BUFFER_SIZE),
        (skewness, SKEWNESS_BUFFER_SIZE),
        (kurtosis, KURTOSIS_BUFFER_SIZE),
    ])
    def test_zero_weight_on_empty_buffer(self, update, size):
        buf = new_buffer(size)
        with warnings.catch_warnings():
            warnings.simplefilter("error", RuntimeWarning)
            update(3.0, 0.0, buf)
        assert buf[0] == 0.0
        assert np.isnan(buf[1])
