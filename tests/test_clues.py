import logging

import numpy as np
import pytest
from wordsieve.engine import ClueIndex, RangeError
from wordsieve.engine.clues import letter_index

WORDS = ["abcde", "edcba", "aabbc", "eerie", "aaaaa"]


def _ids(mask):
    return [WORDS[i] for i in np.flatnonzero(mask)]


@pytest.fixture
def index():
    return ClueIndex(WORDS, 5)


def test_position_clues(index):
    a = letter_index("a")
    assert _ids(index.here(0, a)) == ["abcde", "aabbc", "aaaaa"]
    assert _ids(index.here(4, a)) == ["edcba", "aaaaa"]
    assert _ids(index.here(2, letter_index("z"))) == []


def test_letter_count_clues(index):
    a, e = letter_index("a"), letter_index("e")
    assert _ids(index.exactly(a, 0)) == ["eerie"]
    assert _ids(index.exactly(a, 1)) == ["abcde", "edcba"]
    assert _ids(index.exactly(a, 2)) == ["aabbc"]
    assert _ids(index.at_least(a, 2)) == ["aabbc", "aaaaa"]
    assert _ids(index.exactly(e, 3)) == ["eerie"]


def test_at_least_zero_is_everything(index):
    assert index.at_least(letter_index("q"), 0).all()


def test_cap_grows_to_fit_the_dictionary(index, caplog):
    a = letter_index("a")
    # "aaaaa" has 5 a's, above the default cap of 4.
    assert index.max_letter_repeat == 5
    assert _ids(index.exactly(a, 4)) == []
    assert _ids(index.at_least(a, 4)) == ["aaaaa"]
    assert _ids(index.exactly(a, 5)) == ["aaaaa"]
    with caplog.at_level(logging.WARNING):
        small = ClueIndex(WORDS, 5, max_letter_repeat=2)
    assert small.max_letter_repeat == 5
    assert "max_letter_repeat=2" in caplog.text


def test_counts_above_cap_match_nothing(index):
    a = letter_index("a")
    assert not index.exactly(a, 6).any()
    assert not index.at_least(a, 6).any()


def test_configurable_cap():
    idx = ClueIndex(["abcde", "aabbc", "eerie"], 5, max_letter_repeat=3)
    assert idx.max_letter_repeat == 3
    assert idx.letter_counts(letter_index("a")).tolist() == [1, 1, 1, 0]
    assert idx.letter_counts(letter_index("e")).tolist() == [1, 1, 0, 1]


def test_bitsets_are_read_only(index):
    with pytest.raises(ValueError):
        index.here(0, 0)[0] = False


@pytest.mark.parametrize("call", [
    lambda i: i.here(5, 0),
    lambda i: i.here(0, 26),
    lambda i: i.at_least(-1, 1),
    lambda i: i.exactly(0, -1),
])
def test_out_of_range(index, call):
    with pytest.raises(RangeError):
        call(index)


def test_letter_index():
    assert letter_index("a") == 0 and letter_index("Z") == 25
    with pytest.raises(RangeError):
        letter_index("?")
