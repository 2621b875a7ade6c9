import itertools

import pytest
from wordsieve.engine import (ELSEWHERE, HERE, NOWHERE, RangeError, ResultTable, ValidationError,
                              decode, encode, is_valid, parse, score, score_code, to_string)
from wordsieve.engine.result import all_here, num_codes

WORDS = ["crane", "raise", "stare", "trace", "cared", "racer", "scoop", "level", "belle",
         "lemon", "speed", "abide", "eerie", "geese", "sheep", "abcde", "edcba", "aabbc"]


def _gy(guess, answer):
    return to_string(score(guess, answer), here="G", elsewhere="Y", nowhere="-")


# --- N=5 golden tests (duplicates + placements) ---
@pytest.mark.parametrize("guess,answer,expected", [
    ("belle", "level", "-GYYY"),
    ("level", "level", "GGGGG"),
    ("lemon", "level", "GG---"),
    ("cools", "scoop", "YYG-Y"),
    ("scoop", "scoop", "GGGGG"),
    ("crane", "crane", "GGGGG"),
    ("raise", "crane", "YY--G"),
    ("stare", "crane", "--GYG"),
])
def test_score_n5_golden(guess, answer, expected):
    assert _gy(guess, answer) == expected


# --- N=6 sample tests ---
@pytest.mark.parametrize("guess,answer,expected", [
    ("settle", "letter", "-GGGYY"),
    ("little", "letter", "G-GG-Y"),
    ("planet", "palate", "GYY-YY"),
    ("kitten", "tinket", "YGYYGY"),
])
def test_score_n6_samples(guess, answer, expected):
    assert _gy(guess, answer) == expected


def test_score_reversed_word():
    assert to_string(score("abcde", "edcba")) == "EEHEE"
    assert score("abcde", "edcba") == (ELSEWHERE, ELSEWHERE, HERE, ELSEWHERE, ELSEWHERE)


def test_score_length_mismatch():
    with pytest.raises(ValidationError):
        score("abc", "abcd")


def test_encode_positions_are_base3_digits():
    assert encode([NOWHERE] * 5) == 0
    assert encode([HERE, NOWHERE, NOWHERE, NOWHERE, NOWHERE]) == 2
    assert encode([NOWHERE, ELSEWHERE, NOWHERE, NOWHERE, NOWHERE]) == 3
    assert encode([HERE] * 5) == all_here(5) == 242
    assert num_codes(5) == 243


def test_decode_inverts_encode():
    for code in (0, 1, 17, 100, 242):
        assert encode(decode(code, 5)) == code


@pytest.mark.parametrize("code", [243, 1000, -1])
def test_decode_out_of_range(code):
    with pytest.raises(RangeError):
        decode(code, 5)


def test_bad_length_rejected():
    with pytest.raises(RangeError):
        num_codes(0)
    assert num_codes(14) == 3 ** 14
    with pytest.raises(RangeError):
        num_codes(15)
    with pytest.raises(RangeError):
        ResultTable().table(16)


def test_result_table_is_cached_per_length():
    t = ResultTable()
    assert t.table(4) is t.table(4)
    assert t.table(4).shape == (81, 4)
    assert t.decode(80, 4) == (HERE,) * 4


def test_self_comparison_is_all_here():
    for w in WORDS:
        assert score_code(w, w) == all_here(len(w))


def test_every_scored_result_is_valid_for_the_guess():
    for guess, answer in itertools.product(WORDS, repeat=2):
        assert is_valid(score(guess, answer), guess)
        assert is_valid(score_code(guess, answer), guess)


def test_is_valid_rejects_nowhere_before_elsewhere_on_same_letter():
    # 'e' at 2 marked NOWHERE, later 'e' at 3 marked ELSEWHERE: never produced.
    assert not is_valid(parse("NNNEN"), "speed")
    # Other order is fine, and HERE after NOWHERE is fine.
    assert is_valid(parse("NNENN"), "speed")
    assert is_valid(parse("NNNHN"), "speed")
    # Different letters never conflict.
    assert is_valid(parse("NENEN"), "crane")


def test_valid_mask_matches_is_valid():
    t = ResultTable()
    for w in ("speed", "eerie", "crane"):
        mask = t.valid_mask(w)
        for code in range(num_codes(5)):
            assert bool(mask[code]) == is_valid(code, w)


def test_is_valid_length_mismatch():
    assert not is_valid((HERE, HERE), "abc")


def test_parse_and_render():
    assert parse("hEn") == (HERE, ELSEWHERE, NOWHERE)
    assert to_string((HERE, ELSEWHERE, NOWHERE)) == "HEN"
    assert to_string(encode((HERE, ELSEWHERE, NOWHERE)), 3) == "HEN"
    with pytest.raises(ValidationError):
        parse("HXN")
    with pytest.raises(ValidationError):
        parse("")
