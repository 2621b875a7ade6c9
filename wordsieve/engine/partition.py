"""
Guess partitioning: split the dictionary by the result a guess would get.

For a guess g and each achievable result r, the bucket B(g, r) is the set of
dictionary words w with score(g, w) == r. Rather than scoring g against every
word, the bucket is assembled from the ClueIndex:

  per position i
    HERE              -> keep words with g[i] at i
    ELSEWHERE/NOWHERE -> drop words with g[i] at i
  per letter c of g   (m = number of HERE + ELSEWHERE marks on c)
    any NOWHERE on c  -> keep words with exactly m copies of c
    otherwise         -> keep words with at least m copies of c

Cost is O(3**L * L) vector ops per guess; partitions don't depend on the
candidate set, so the Engine computes each one at most once.

Buckets are disjoint and cover the dictionary, so a Partition is stored as
one code per word (the "assignment") plus the list of achievable codes.
That is N small ints per guess instead of one N-bit vector per code.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .clues import ClueIndex, letter_index
from .errors import RangeError
from .result import ELSEWHERE, HERE, ResultTable, num_codes, to_string


def code_dtype(length: int) -> np.dtype:
    """Smallest unsigned dtype that holds every result id for `length`."""
    n = num_codes(length)
    if n <= 2 ** 8:
        return np.dtype(np.uint8)
    if n <= 2 ** 16:
        return np.dtype(np.uint16)
    return np.dtype(np.uint32)


class Partition:
    """
    Result buckets for one guess.

    `codes` holds the achievable result ids (ascending); only those are
    buckets. A bucket may be empty: no word is consistent with that result.
    """

    def __init__(self, guess: str, codes: np.ndarray, assignment: np.ndarray):
        self.guess = guess
        self.codes = codes
        self.assignment = assignment
        self.assignment.setflags(write=False)
        self.num_codes = num_codes(len(guess))

    @property
    def size(self) -> int:
        return len(self.assignment)

    def __len__(self) -> int:
        return len(self.codes)

    def __contains__(self, code: int) -> bool:
        i = int(np.searchsorted(self.codes, code))
        return i < len(self.codes) and int(self.codes[i]) == code

    def __iter__(self) -> Iterator[Tuple[int, np.ndarray]]:
        for code in self.codes:
            yield int(code), self.assignment == code

    @property
    def buckets(self) -> Dict[int, np.ndarray]:
        """Every achievable code -> its bucket (built on each access)."""
        return {int(code): self.assignment == code for code in self.codes}

    def bucket(self, code: int) -> Optional[np.ndarray]:
        """Bucket for `code` as a boolean vector, or None if not achievable."""
        if code not in self:
            return None
        return self.assignment == code

    def bucket_of(self, word_index: int) -> int:
        """Result id the guess gets when word `word_index` is the answer."""
        if not 0 <= word_index < self.size:
            raise RangeError(f"word index {word_index} out of range (< {self.size})")
        return int(self.assignment[word_index])

    def sizes(self, restrict_to: Optional[np.ndarray] = None) -> np.ndarray:
        """Bucket sizes aligned with `codes`, optionally counted inside restrict_to."""
        a = self.assignment if restrict_to is None else self.assignment[restrict_to]
        return np.bincount(a, minlength=self.num_codes)[self.codes]

    def total(self) -> int:
        return int(self.sizes().sum())

    def describe(self, words: Sequence[str], limit: int = 10) -> List[str]:
        """Human-readable lines for non-empty buckets (largest first)."""
        length = len(self.guess)
        sizes = self.sizes()
        order = sorted(range(len(self.codes)), key=lambda k: (-int(sizes[k]), int(self.codes[k])))
        lines = []
        for k in order:
            if not sizes[k]:
                continue
            code = int(self.codes[k])
            ids = np.flatnonzero(self.assignment == code)
            shown = ",".join(words[i] for i in ids[:limit])
            more = " ..." if len(ids) > limit else ""
            lines.append(f"{to_string(code, length)} ({len(ids)} words) : {shown}{more}")
        return lines


class GuessPartitioner:
    def __init__(self, index: ClueIndex, table: Optional[ResultTable] = None):
        self.index = index
        self.table = table or ResultTable()

    def _check_guess(self, guess: str) -> None:
        if len(guess) != self.index.length:
            raise RangeError(
                f"guess {guess!r} has length {len(guess)}; dictionary length is {self.index.length}")

    def _bucket(self, letters: Sequence[int], marks: Sequence[int]) -> np.ndarray:
        """Words consistent with guess letters + marks. Scratch is local to the call."""
        idx = self.index
        out = idx.all_words().copy()
        found: Counter = Counter()
        failed = set()

        for i, (c, m) in enumerate(zip(letters, marks)):
            if m == HERE:
                out &= idx.here(i, c)
                found[c] += 1
            elif m == ELSEWHERE:
                out &= ~idx.here(i, c)
                found[c] += 1
            else:
                out &= ~idx.here(i, c)
                failed.add(c)

        for c in set(letters):
            if c in failed:
                out &= idx.exactly(c, found[c])  # an exact cap is known
            elif found[c]:
                out &= idx.at_least(c, found[c])

        return out

    def bucket(self, guess: str, code: int) -> np.ndarray:
        """
        Single bucket B(guess, code), without building the whole partition.

        An unachievable code yields an empty bucket.
        """
        self._check_guess(guess)
        marks = self.table.decode(code, len(guess))
        if not self.table.valid_mask(guess)[code]:
            return self.index.no_words().copy()
        return self._bucket([letter_index(c) for c in guess], marks)

    def compute_partition(self, guess: str) -> Partition:
        self._check_guess(guess)
        letters = [letter_index(c) for c in guess]
        tbl = self.table.table(len(guess))
        codes = np.flatnonzero(self.table.valid_mask(guess))

        assignment = np.zeros(self.index.size, dtype=code_dtype(len(guess)))
        for code in codes:
            assignment[self._bucket(letters, tbl[code])] = code
        return Partition(guess, codes, assignment)
