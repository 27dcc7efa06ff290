"""
Running max/min trackers.

Seed the tracked value with -inf (max) or +inf (min); there is no first-sample
detection. Ties keep the value already held.

    hi = float("-inf")
    for x in stream:
        hi = track_max(x, hi)
"""


def track_max(x: float, current: float) -> float:
    if current < x:
        return x
    return current


def track_min(x: float, current: float) -> float:
    if current > x:
        return x
    return current
