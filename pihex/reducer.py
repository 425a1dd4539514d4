import logging
from typing import List

from .backends import Backend
from .series import TAIL_LIMIT, TAIL_THRESHOLD, Chunk, frac, left_sum, right_sum


logger = logging.getLogger(__name__)


def fold_reversed(s: float, results: List[float]) -> float:
    # last dispatched first
    for value in reversed(results):
        s = frac(s + value)
    return s


class ParallelReducer:
    def __init__(
        self,
        backend: Backend,
        chunk_length: int = 100_000,
        tail_threshold: float = TAIL_THRESHOLD,
        tail_limit: int = TAIL_LIMIT,
    ):
        chunk_length = int(chunk_length)
        if chunk_length < 1:
            raise ValueError("chunk_length must be >= 1")
        self.backend = backend
        self.chunk_length = chunk_length
        self.tail_threshold = tail_threshold
        self.tail_limit = tail_limit

    @property
    def wave_length(self) -> int:
        return self.chunk_length * self.backend.workers

    def wave_chunks(self, j: int, d: int, k: int) -> List[Chunk]:
        return [Chunk(k + i * self.chunk_length, self.chunk_length, j, d) for i in range(self.backend.workers)]

    def reduce(self, j: int, d: int) -> float:
        s = 0.0
        k = 0
        waves = 0
        wave = self.wave_length
        while k + wave < d:
            results = self.backend.run(self.wave_chunks(j, d, k))
            k += wave
            s = fold_reversed(s, results)
            waves += 1
        logger.debug("S%d: %d waves, %d serial left terms", j, waves, d - k)
        s = left_sum(j, d, k, d, s)
        return right_sum(j, d, s, self.tail_threshold, self.tail_limit)
