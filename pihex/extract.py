import logging
import math
from typing import Optional

from .backends import SerialBackend, make_backend
from .config import PRECISION_LIMIT, EngineConfig
from .reducer import ParallelReducer


logger = logging.getLogger(__name__)

HEX_DIGITS = "0123456789ABCDEF"
OUTPUT_DIGITS = 9


def bbp_fraction(d: int, reducer: ParallelReducer) -> float:
    s1 = reducer.reduce(1, d)
    s4 = reducer.reduce(4, d)
    s5 = reducer.reduce(5, d)
    s6 = reducer.reduce(6, d)
    result = 4.0 * s1 - 2.0 * s4 - s5 - s6
    return result - int(result) + 1.0


def fraction_to_hex(x: float, count: int = OUTPUT_DIGITS) -> str:
    out = []
    for _ in range(int(count)):
        x = 16.0 * (x - math.floor(x))
        out.append(HEX_DIGITS[int(x)])
    return "".join(out)


def extract_digit(d: int, reducer: Optional[ParallelReducer] = None) -> str:
    d = int(d)
    if d < 0:
        raise ValueError("d must be >= 0")
    if d > PRECISION_LIMIT:
        logger.warning("digit index %d is past the double precision limit %d; trailing digits may drift", d, PRECISION_LIMIT)
    if reducer is None:
        reducer = ParallelReducer(SerialBackend(1))
    return fraction_to_hex(bbp_fraction(d, reducer))


def compute(position: int, config: Optional[EngineConfig] = None) -> str:
    config = config or EngineConfig()
    with make_backend(config) as backend:
        reducer = ParallelReducer(
            backend,
            chunk_length=config.terms_per_worker,
            tail_threshold=config.tail_threshold,
            tail_limit=config.tail_limit,
        )
        logger.debug("position %d on %s backend, %d workers x %d terms", position, backend.name, backend.workers, reducer.chunk_length)
        return extract_digit(int(position) - 1, reducer)
