"""
Integer arithmetic helpers for the moment recurrences: integer power,
factorial and binomial coefficients.
"""

from functools import lru_cache


def ipow(x: float, y: int) -> float:
    """
    Returns x raised to the non-negative integer power y.
    ipow(x, 0) is 1.0 for every x, including 0.
    """
    if y < 0:
        raise ValueError(f"ipow expects a non-negative exponent, got {y}")
    if y == 0:
        return 1.0

    result = x
    for _ in range(y - 1):
        result *= x
    return result


def factorial(n: int) -> int:
    if n < 0:
        raise ValueError(f"factorial is undefined for negative n={n}")
    result = 1
    for i in range(2, n + 1):
        result *= i
    return result


@lru_cache(maxsize=None)
def n_choose_k(n: int, k: int) -> int:
    """
    Binomial coefficient C(n, k) using the multiplicative formula.

    Works on the smaller side (k -> min(k, n - k)) and keeps every step in
    integer arithmetic: divide n by j when it divides, otherwise divide the
    running product, otherwise multiply first and divide after.
    """
    if n < 0 or k < 0:
        raise ValueError(f"n_choose_k expects non-negative arguments, got n={n}, k={k}")
    if k > n:
        return 0

    result = 1
    k = min(k, n - k)
    for j in range(1, k + 1):
        if n % j == 0:
            result *= n // j
        elif result % j == 0:
            result = result // j * n
        else:
            result = result * n // j
        n -= 1
    return result
