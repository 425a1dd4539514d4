import logging
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from typing import List, Sequence

import numpy as np

from .config import EngineConfig
from .modpow import expo_mod_lanes
from .series import Chunk, sum_chunk


logger = logging.getLogger(__name__)


class BackendError(RuntimeError):
    pass


class Backend:
    name = "base"

    def __init__(self, workers: int):
        workers = int(workers)
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.workers = workers

    def start(self):
        pass

    def close(self):
        pass

    def run(self, chunks: Sequence[Chunk]) -> List[float]:
        raise NotImplementedError

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class SerialBackend(Backend):
    name = "serial"

    def run(self, chunks: Sequence[Chunk]) -> List[float]:
        return [sum_chunk(chunk) for chunk in chunks]


class _PoolBackend(Backend):
    _failures = (RuntimeError, OSError)

    def __init__(self, workers: int):
        super().__init__(workers)
        self.pool = None

    def _make_pool(self):
        raise NotImplementedError

    def start(self):
        if self.pool is not None:
            return
        try:
            self.pool = self._make_pool()
        except self._failures as e:
            raise BackendError(f"cannot start {self.workers} {self.name} workers: {e}") from e
        logger.debug("%s backend started with %d workers", self.name, self.workers)

    def close(self):
        if self.pool is not None:
            self.pool.shutdown(wait=True)
            self.pool = None

    def run(self, chunks: Sequence[Chunk]) -> List[float]:
        if self.pool is None:
            self.start()
        try:
            return list(self.pool.map(sum_chunk, chunks))
        except self._failures as e:
            raise BackendError(f"{self.name} workers failed: {e}") from e


class ThreadBackend(_PoolBackend):
    name = "thread"

    def _make_pool(self):
        return ThreadPoolExecutor(max_workers=self.workers)


class ProcessBackend(_PoolBackend):
    name = "process"
    _failures = (BrokenProcessPool, OSError)

    def _make_pool(self):
        return ProcessPoolExecutor(max_workers=self.workers)


class LaneBackend(Backend):
    name = "lanes"

    def __init__(self, blocks: int, threads_per_block: int):
        self.blocks = int(blocks)
        self.threads_per_block = int(threads_per_block)
        super().__init__(self.blocks * self.threads_per_block)

    def run(self, chunks: Sequence[Chunk]) -> List[float]:
        if not chunks:
            return []
        first = chunks[0]
        if any(c.length != first.length or c.j != first.j or c.d != first.d for c in chunks):
            raise ValueError("lane chunks must share length, j and d")
        try:
            starts = np.array([c.start for c in chunks], dtype=np.int64)
            s = np.zeros(len(chunks), dtype=np.float64)
        except MemoryError as e:
            raise BackendError(f"cannot allocate {len(chunks)} lanes") from e
        for step in range(first.length):
            k = starts + step
            denominator = (8 * k + first.j).astype(np.float64)
            s = s + expo_mod_lanes(first.d - k, denominator) / denominator
            s = s - np.floor(s)
        return s.tolist()


def make_backend(config: EngineConfig) -> Backend:
    if config.backend == "serial":
        return SerialBackend(config.workers)
    if config.backend == "thread":
        return ThreadBackend(config.workers)
    if config.backend == "process":
        return ProcessBackend(config.workers)
    return LaneBackend(config.blocks, config.threads_per_block)


def describe_backend(config: EngineConfig) -> dict:
    info = {
        "backend": config.backend,
        "workers": config.wave_workers,
        "terms_per_worker": config.terms_per_worker,
        "numpy": np.__version__,
    }
    if config.backend == "lanes":
        info["blocks"] = config.blocks
        info["threads_per_block"] = config.threads_per_block
    return info
