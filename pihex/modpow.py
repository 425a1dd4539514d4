import math
from bisect import bisect_right

import numpy as np


POWERS_OF_TWO = tuple(1 << i for i in range(63))
_POWERS_ARRAY = np.array(POWERS_OF_TWO, dtype=np.int64)


def _mod(r: float, k: float) -> float:
    return r - math.floor(r / k) * k


def highest_power_index(n: int) -> int:
    return bisect_right(POWERS_OF_TWO, n) - 1


def expo_mod(n: int, k: float) -> float:
    n = int(n)
    if n == 0:
        return 1.0
    bits = highest_power_index(n)
    t = POWERS_OF_TWO[bits]
    r = 1.0
    for _ in range(bits + 1):
        if n >= t:
            r = _mod(r * 16.0, k)
            n -= t
        t //= 2
        if t >= 1:
            r = _mod(r * r, k)
    return r


def expo_mod_lanes(n, k):
    n = np.asarray(n, dtype=np.int64).copy()
    k = np.asarray(k, dtype=np.float64)
    bits = np.maximum(np.searchsorted(_POWERS_ARRAY, n, side="right") - 1, 0)
    t = _POWERS_ARRAY[bits]
    r = np.ones(n.shape, dtype=np.float64)
    for i in range(int(bits.max(initial=0)) + 1):
        active = bits >= i
        step = active & (n >= t)
        r = np.where(step, r * 16.0, r)
        r = np.where(step, r - np.floor(r / k) * k, r)
        n = np.where(step, n - t, n)
        t = np.where(active, t // 2, t)
        square = active & (t >= 1)
        r = np.where(square, r * r, r)
        r = np.where(square, r - np.floor(r / k) * k, r)
    return r
