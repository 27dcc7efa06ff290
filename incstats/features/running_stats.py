import numpy as np

from incstats.moments.central import (
    central_buffer_size,
    central_moment,
    central_moment_finalize,
)
from incstats.moments.extrema import track_max, track_min

EPS = 1e-9
DEFAULT_ORDER = 4


class RunningMoments:
    """
    Weighted running moments up to a fixed order, plus min/max.
    Single pass over the data, memory does not grow with the stream.
    """
    def __init__(self, order: int = DEFAULT_ORDER):
        if order < 2:
            raise ValueError(f"RunningMoments needs order >= 2, got {order}")
        self.order = order
        self.count = 0
        self.buffer = np.zeros(central_buffer_size(order), dtype=np.float64)
        self.min = float('inf')
        self.max = float('-inf')

    def update(self, x, w=1.0):
        """Add a weighted value to the running statistics."""
        if x is None or np.isnan(x):
            return
        # Zero weight contributes nothing; feeding it to an empty accumulator would divide 0 by 0.
        if w == 0:
            return

        self.count += 1
        central_moment(x, w, self.buffer, self.order)

        self.min = track_min(x, self.min)
        self.max = track_max(x, self.max)

    @property
    def weight(self):
        return float(self.buffer[0])

    @property
    def mean(self):
        return float(self.buffer[1])

    @property
    def variance(self):
        """Returns the population (weighted) variance."""
        if self.weight <= 0.0:
            return 0.0
        return float(self.buffer[2] / self.buffer[0])

    @property
    def std(self):
        return np.sqrt(self.variance)

    @property
    def skewness(self):
        return self._standardized(3)

    @property
    def kurtosis(self):
        return self._standardized(4)

    def _standardized(self, k):
        if self.order < k:
            raise ValueError(f"order {k} moment requested from an order {self.order} accumulator")
        return float(self.moments(standardize=True)[k])

    def moments(self, standardize=False):
        """Central moments 0..order followed by the mean, see central_moment_finalize."""
        return central_moment_finalize(self.buffer, self.order, standardize)

    def normalize(self, x):
        """Returns the z-score of x based on the running statistics."""
        if self.std < EPS:
            return 0.0
        return (x - self.mean) / self.std

    def to_dict(self) -> dict:
        standardized = self.moments(standardize=True)
        summary = {
            "count": self.count,
            "weight": self.weight,
            "mean": self.mean,
            "variance": self.variance,
            "std": float(self.std),
        }
        for k in range(3, self.order + 1):
            # Undefined when std is 0; JSON has no NaN.
            summary[f"sm_{k}"] = float(standardized[k]) if np.isfinite(standardized[k]) else None
        summary["min"] = self.min if self.min != float('inf') else None
        summary["max"] = self.max if self.max != float('-inf') else None
        return summary
