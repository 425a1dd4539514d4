import math
from typing import Tuple

from mpmath import mp


HEX_ALPHABET = "0123456789ABCDEF"


def _prec_bits(d: int) -> int:
    return max(128, int(math.log2(d + 1)) + 128)


def _series_fraction(j: int, d: int):
    s = mp.mpf(0)
    for k in range(d):
        r = 8 * k + j
        s += mp.mpf(pow(16, d - k, r)) / r
        s -= mp.floor(s)
    eps = mp.power(2, -mp.prec + 16)
    k = d
    power = mp.mpf(1)
    while True:
        term = power / (8 * k + j)
        if term < eps:
            break
        s += term
        k += 1
        power /= 16
    return s - mp.floor(s)


def reference_fraction(d: int):
    d = int(d)
    if d < 0:
        raise ValueError("d must be >= 0")
    with mp.workprec(_prec_bits(d)):
        x = 4 * _series_fraction(1, d) - 2 * _series_fraction(4, d) - _series_fraction(5, d) - _series_fraction(6, d)
        return x - mp.floor(x)


def reference_hex_digits(d: int, count: int) -> str:
    count = int(count)
    if count < 0:
        raise ValueError("count must be >= 0")
    x = reference_fraction(d)
    out = []
    with mp.workprec(_prec_bits(d)):
        for _ in range(count):
            x *= 16
            digit = int(mp.floor(x))
            out.append(HEX_ALPHABET[digit])
            x -= digit
    return "".join(out)


def verify_digits(d: int, digits: str, count: int = 8) -> Tuple[bool, str]:
    count = min(int(count), len(digits))
    if count <= 0:
        return True, ""
    expected = reference_hex_digits(d, count)
    return digits[:count].upper() == expected, expected
