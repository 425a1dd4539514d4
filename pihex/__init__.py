__all__ = [
    "expo_mod",
    "left_term",
    "right_term",
    "ParallelReducer",
    "EngineConfig",
    "BackendError",
    "make_backend",
    "extract_digit",
    "compute",
    "reference_hex_digits",
]

from .backends import BackendError, make_backend
from .config import EngineConfig
from .extract import compute, extract_digit
from .modpow import expo_mod
from .reducer import ParallelReducer
from .reference import reference_hex_digits
from .series import left_term, right_term
