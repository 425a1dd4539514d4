import logging
import math

import pytest

import pihex.extract as extract
from pihex.backends import LaneBackend, SerialBackend, ThreadBackend
from pihex.config import EngineConfig
from pihex.extract import bbp_fraction, compute, extract_digit, fraction_to_hex
from pihex.reducer import ParallelReducer
from pihex.reference import reference_hex_digits


PI_HEX = "243F6A8885A308D313198A2E0370734"


def test_known_digits():
    assert extract_digit(0) == "243F6A888"
    assert extract_digit(1) == "43F6A8885"
    assert extract_digit(8) == "85A308D31"
    assert extract_digit(16) == "13198A2E0"


def test_leading_digits_follow_expansion():
    for d in range(0, 20):
        assert extract_digit(d)[:6] == PI_HEX[d : d + 6]


def test_matches_reference_digits():
    for d in [5, 37, 100, 999, 2024]:
        assert extract_digit(d)[:8] == reference_hex_digits(d, 8)


def test_normalised_fraction_after_truncation():
    # truncate then add one; pinned for d = 0
    for d in [0, 8, 500]:
        x = bbp_fraction(d, ParallelReducer(SerialBackend(1)))
        assert 0.0 < x < 2.0
    assert bbp_fraction(0, ParallelReducer(SerialBackend(1))) == pytest.approx(math.pi - 3, abs=1e-12)
    assert fraction_to_hex(bbp_fraction(0, ParallelReducer(SerialBackend(1)))) == "243F6A888"


def test_parallel_reducers_match_serial():
    d = 3000
    expected = extract_digit(d)[:8]
    with ThreadBackend(4) as backend:
        assert extract_digit(d, ParallelReducer(backend, chunk_length=100))[:8] == expected
    with LaneBackend(2, 4) as backend:
        assert extract_digit(d, ParallelReducer(backend, chunk_length=60))[:8] == expected


def test_extract_is_deterministic():
    assert extract_digit(777) == extract_digit(777)


def test_fraction_to_hex():
    assert fraction_to_hex(0.5, 3) == "800"
    assert fraction_to_hex(1.75, 2) == "C0"
    assert fraction_to_hex(0.0) == "000000000"


def test_fraction_to_hex_is_idempotent():
    x = 1.141592653589793
    assert fraction_to_hex(x) == fraction_to_hex(x)
    assert x == 1.141592653589793


def test_compute_uses_one_based_position():
    assert compute(1, EngineConfig(backend="serial", workers=1)) == "243F6A888"
    config = EngineConfig(backend="lanes", blocks=2, threads_per_block=3, lane_length=50)
    assert compute(1001, config)[:8] == extract_digit(1000)[:8]


def test_compute_with_processes():
    config = EngineConfig(backend="process", workers=2, chunk_length=200)
    assert compute(1501, config)[:8] == extract_digit(1500)[:8]


def test_rejects_negative_index():
    with pytest.raises(ValueError):
        extract_digit(-1)


def test_precision_limit_warning(monkeypatch, caplog):
    monkeypatch.setattr(extract, "PRECISION_LIMIT", 5)
    with caplog.at_level(logging.WARNING, logger="pihex.extract"):
        assert extract_digit(10) == PI_HEX[10:19]
    assert "precision limit" in caplog.text
