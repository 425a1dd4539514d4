import pytest

from pihex.backends import Backend, SerialBackend
from pihex.reducer import ParallelReducer, fold_reversed
from pihex.series import SERIES, left_sum, right_sum


class RecordingBackend(Backend):
    name = "recording"

    def __init__(self, workers, value=0.0):
        super().__init__(workers)
        self.value = value
        self.waves = []

    def run(self, chunks):
        self.waves.append(list(chunks))
        return [self.value] * len(chunks)


def _serial(j, d):
    return right_sum(j, d, left_sum(j, d, 0, d))


def test_reduce_independent_of_partitioning():
    d = 600
    for chunk_length in [1, 3, 7, 50]:
        for workers in [1, 2, 3, 5]:
            reducer = ParallelReducer(SerialBackend(workers), chunk_length=chunk_length)
            for j in SERIES:
                assert reducer.reduce(j, d) == pytest.approx(_serial(j, d), abs=1e-9)


def test_waves_cover_left_range_contiguously():
    backend = RecordingBackend(2)
    reducer = ParallelReducer(backend, chunk_length=4)
    reducer.reduce(1, 25)
    starts = [c.start for wave in backend.waves for c in wave]
    assert starts == [0, 4, 8, 12, 16, 20]
    assert all(c.length == 4 and c.j == 1 and c.d == 25 for wave in backend.waves for c in wave)
    assert [len(wave) for wave in backend.waves] == [2, 2, 2]


def test_no_partial_waves():
    backend = RecordingBackend(3)
    reducer = ParallelReducer(backend, chunk_length=10)
    reducer.reduce(4, 30)
    assert backend.waves == []
    reducer.reduce(4, 31)
    assert len(backend.waves) == 1


def test_zero_index_runs_only_the_tail():
    backend = RecordingBackend(4)
    reducer = ParallelReducer(backend, chunk_length=1)
    for j in SERIES:
        assert reducer.reduce(j, 0) == right_sum(j, 0)
    assert backend.waves == []


def test_fold_reversed_reduces_each_step():
    assert fold_reversed(0.0, [0.5, 0.75]) == pytest.approx(0.25)
    assert 0 <= fold_reversed(0.9, [0.9, 0.9, 0.9]) < 1


def test_fold_reversed_order():
    seen = []

    class Spy(float):
        def __radd__(self, other):
            seen.append(float(self))
            return float(self) + other

    fold_reversed(0.0, [Spy(0.1), Spy(0.2), Spy(0.3)])
    assert seen == [0.3, 0.2, 0.1]


def test_wave_length():
    reducer = ParallelReducer(SerialBackend(3), chunk_length=7)
    assert reducer.wave_length == 21


def test_rejects_bad_chunk_length():
    with pytest.raises(ValueError):
        ParallelReducer(SerialBackend(1), chunk_length=0)
