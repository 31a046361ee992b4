# tests/domain/test_history.py
import pytest
from domain.history import HISTORY_CAPACITY, ValueHistory


class TestValueHistory:
    def test_empty_history(self):
        history = ValueHistory()
        assert len(history) == 0
        assert not history
        assert history.newest() is None
        assert history.capacity == HISTORY_CAPACITY == 10

    def test_newest_first(self):
        history = ValueHistory()
        history.push("a")
        history.push("b")
        assert history.newest() == "b"
        assert history.as_list() == ["b", "a"]
        assert history[1] == "a"

    def test_eleventh_push_evicts_oldest(self):
        history = ValueHistory()
        for i in range(11):
            history.push(i)

        assert len(history) == 10
        assert history.newest() == 10
        assert history.as_list() == list(range(10, 0, -1))
        assert 0 not in list(history)

    def test_never_exceeds_capacity(self):
        history = ValueHistory(capacity=3)
        for i in range(100):
            history.push(i)
            assert len(history) <= 3
        assert history.as_list() == [99, 98, 97]

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            ValueHistory(capacity=0)
