import math

import numpy as np
import pytest
from wordsieve.engine import (ClueIndex, GuessPartitioner, RangeError, combined_stats,
                              compute_stats, parse, encode, score_code)
from wordsieve.engine.stats import Stats, stats_from_sizes

WORDS = ["crane", "raise", "stare", "trace", "cared", "racer", "scoop", "level", "belle",
         "lemon", "speed", "abide", "eerie", "geese", "sheep", "abcde", "edcba", "aabbc"]


@pytest.fixture(scope="module")
def partitioner():
    return GuessPartitioner(ClueIndex(WORDS, 5))


def test_buckets_cover_dictionary_exactly_once(partitioner):
    for w in WORDS:
        part = partitioner.compute_partition(w)
        assert part.total() == len(WORDS)


def test_buckets_match_brute_force_scoring(partitioner):
    for guess in WORDS:
        part = partitioner.compute_partition(guess)
        expected = [score_code(guess, answer) for answer in WORDS]
        assert part.assignment.tolist() == expected
        for code, bucket in part:
            got = [WORDS[i] for i in np.flatnonzero(bucket)]
            assert got == [a for a, c in zip(WORDS, expected) if c == code]


def test_invalid_codes_are_not_buckets(partitioner):
    part = partitioner.compute_partition("speed")
    bad = encode(parse("NNNEN"))
    assert bad not in part
    assert part.bucket(bad) is None
    assert not partitioner.bucket("speed", bad).any()


def test_single_bucket_matches_partition(partitioner):
    part = partitioner.compute_partition("crane")
    for code in part.codes[:40]:
        assert (partitioner.bucket("crane", int(code)) == part.bucket(int(code))).all()


def test_three_word_dictionary():
    words = ["abcde", "edcba", "aabbc"]
    part = GuessPartitioner(ClueIndex(words, 5)).compute_partition("abcde")
    assert part.total() == 3
    assert int(part.sizes().sum()) == 3
    hit = part.bucket(encode(parse("EEHEE")))
    assert [words[i] for i in np.flatnonzero(hit)] == ["edcba"]


def test_wrong_length_guess(partitioner):
    with pytest.raises(RangeError):
        partitioner.compute_partition("cranes")


def test_describe_lists_nonempty_buckets(partitioner):
    lines = partitioner.compute_partition("crane").describe(WORDS)
    assert all("(0 words)" not in line for line in lines)
    assert any(line.startswith("HHHHH (1 words) : crane") for line in lines)


# --- stats ---

def test_stats_bounds(partitioner):
    n = len(WORDS)
    for w in WORDS:
        st = compute_stats(partitioner.compute_partition(w))
        assert 0 < st.max_bucket <= n
        assert 0 < st.expected_bucket <= n
        assert 0.0 <= st.entropy_bits <= math.log2(n) + 1e-9
        assert 0.0 <= st.solve_probability <= 1.0


def test_stats_formulas():
    st = stats_from_sizes([2, 1, 1, 0], 4)
    assert st.max_bucket == 2
    assert st.expected_bucket == pytest.approx((4 + 1 + 1) / 4)
    assert st.entropy_bits == pytest.approx(1.5)
    assert st.solve_probability == pytest.approx(0.5)


def test_empty_restriction_gives_zero_stats(partitioner):
    part = partitioner.compute_partition("crane")
    assert compute_stats(part, np.zeros(len(WORDS), dtype=bool)) == Stats.zero()
    assert stats_from_sizes([], 0) == Stats.zero()


def test_restricted_stats_count_only_candidates(partitioner):
    part = partitioner.compute_partition("crane")
    mask = np.zeros(len(WORDS), dtype=bool)
    mask[[WORDS.index("crane"), WORDS.index("trace")]] = True
    st = compute_stats(part, mask)
    # crane and trace score differently against "crane": two singleton buckets.
    assert st.max_bucket == 1
    assert st.expected_bucket == pytest.approx(1.0)
    assert st.entropy_bits == pytest.approx(1.0)
    assert st.solve_probability == pytest.approx(1.0)


def test_combined_stats_groups_by_code_tuple(partitioner):
    a = partitioner.compute_partition("crane")
    b = partitioner.compute_partition("lemon")
    pair = combined_stats([a, b])
    single = compute_stats(a)
    assert combined_stats([a]) == single
    # Playing a second guess never merges buckets.
    assert pair.max_bucket <= single.max_bucket
    assert pair.entropy_bits >= single.entropy_bits - 1e-12

    keys = {(score_code("crane", w), score_code("lemon", w)) for w in WORDS}
    assert pair.max_bucket >= 1
    assert pair.entropy_bits <= math.log2(len(keys)) + 1e-9


def test_combined_stats_needs_partitions():
    with pytest.raises(ValueError):
        combined_stats([])


REPEATS = ["crane", "speed", "eerie", "geese", "sheep", "level", "belle", "abide"]


@pytest.mark.parametrize("cap", [1, 2, 4])
def test_small_cap_still_matches_brute_force(cap):
    partitioner = GuessPartitioner(ClueIndex(REPEATS, 5, max_letter_repeat=cap))
    assert partitioner.index.max_letter_repeat >= 3  # "eerie" and "geese" have three e's
    for guess in REPEATS:
        part = partitioner.compute_partition(guess)
        assert part.assignment.tolist() == [score_code(guess, answer) for answer in REPEATS]
        for code, bucket in part:
            assert (partitioner.bucket(guess, code) == bucket).all()


def test_stats_bounds_inside_candidate_sets(partitioner):
    rng = np.random.default_rng(7)
    for _ in range(20):
        mask = rng.random(len(WORDS)) < 0.4
        total = int(mask.sum())
        if not total:
            continue
        for w in WORDS:
            st = compute_stats(partitioner.compute_partition(w), mask)
            assert 0 < st.max_bucket <= total
            assert 0 < st.expected_bucket <= total
            assert 0.0 <= st.entropy_bits <= math.log2(total) + 1e-9
            assert 0.0 <= st.solve_probability <= 1.0


def test_buckets_and_bucket_of(partitioner):
    part = partitioner.compute_partition("crane")
    buckets = part.buckets
    assert sorted(buckets) == part.codes.tolist()
    assert sum(int(b.sum()) for b in buckets.values()) == len(WORDS)
    for i, answer in enumerate(WORDS):
        code = part.bucket_of(i)
        assert code == score_code("crane", answer)
        assert buckets[code][i]
    with pytest.raises(RangeError):
        part.bucket_of(len(WORDS))
