import math
from dataclasses import dataclass
from typing import Iterator

from .modpow import expo_mod


SERIES = (1, 4, 5, 6)
TAIL_THRESHOLD = 1e-17
TAIL_LIMIT = 100


@dataclass(frozen=True)
class Chunk:
    start: int
    length: int
    j: int
    d: int


def frac(x: float) -> float:
    return x - math.floor(x)


def left_term(j: int, d: int, k: int) -> float:
    denominator = float(8 * k + j)
    return expo_mod(d - k, denominator) / denominator


def right_term(j: int, d: int, k: int) -> float:
    return 16.0 ** (d - k) / float(8 * k + j)


def left_sum(j: int, d: int, start: int, stop: int, s: float = 0.0) -> float:
    for k in range(start, stop):
        s = frac(s + left_term(j, d, k))
    return s


def iter_right_terms(j: int, d: int, threshold: float = TAIL_THRESHOLD, limit: int = TAIL_LIMIT) -> Iterator[float]:
    # k = d is part of the tail
    for k in range(d, d + int(limit) + 1):
        term = right_term(j, d, k)
        if term < threshold:
            return
        yield term


def right_sum(j: int, d: int, s: float = 0.0, threshold: float = TAIL_THRESHOLD, limit: int = TAIL_LIMIT) -> float:
    for term in iter_right_terms(j, d, threshold, limit):
        s = frac(s + term)
    return s


def sum_chunk(chunk: Chunk) -> float:
    return left_sum(chunk.j, chunk.d, chunk.start, chunk.start + chunk.length)
