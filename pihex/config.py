import os
from dataclasses import dataclass, field
from typing import Optional

from .series import TAIL_LIMIT, TAIL_THRESHOLD


DEFAULT_POSITION = 10_000_000
# r * r in expo_mod stays exact below this
PRECISION_LIMIT = 10_000_000
BACKENDS = ("serial", "thread", "process", "lanes")


def hardware_workers() -> int:
    return os.cpu_count() or 1


def resolve_position(position: Optional[int]) -> int:
    if position is None or int(position) < 1:
        return DEFAULT_POSITION
    return int(position)


def resolve_workers(workers: Optional[int]) -> int:
    if workers is None or int(workers) < 1:
        return hardware_workers()
    return int(workers)


@dataclass(frozen=True)
class EngineConfig:
    backend: str = "process"
    workers: int = field(default_factory=hardware_workers)
    chunk_length: int = 100_000
    blocks: int = 80
    threads_per_block: int = 60
    lane_length: int = 2_000
    tail_threshold: float = TAIL_THRESHOLD
    tail_limit: int = TAIL_LIMIT

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"unsupported backend: {self.backend}")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.chunk_length < 1:
            raise ValueError("chunk_length must be >= 1")
        if self.blocks < 1 or self.threads_per_block < 1:
            raise ValueError("blocks and threads_per_block must be >= 1")
        if self.lane_length < 1:
            raise ValueError("lane_length must be >= 1")
        if not self.tail_threshold > 0:
            raise ValueError("tail_threshold must be > 0")
        if self.tail_limit < 0:
            raise ValueError("tail_limit must be >= 0")

    @property
    def wave_workers(self) -> int:
        if self.backend == "lanes":
            return self.blocks * self.threads_per_block
        return self.workers

    @property
    def terms_per_worker(self) -> int:
        if self.backend == "lanes":
            return self.lane_length
        return self.chunk_length
