"""
Clue index: which dictionary words are consistent with each atomic fact.

Two families of facts are indexed, each as a boolean vector over word ids:

  - position clues : here(p, c)        -> words with letter c at position p
  - letter clues   : at_least(c, k)    -> words with >= k copies of c
                     exactly(c, k)     -> words with exactly k copies of c

Letter counts are tracked up to `max_letter_repeat` (default 4). The cap is
raised, with a warning, to the largest count any dictionary word actually
has, so every stored count is exact: a word never sits in two `exactly`
buckets, and counts above the cap match no word. "At least 0" is true for
every word, so it isn't stored; at_least(c, 0) just returns all words.

The index is built once per dictionary in O(N*L) and is read-only afterwards.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .errors import RangeError

log = logging.getLogger(__name__)

ALPHABET = "abcdefghijklmnopqrstuvwxyz"
NUM_LETTERS = len(ALPHABET)

DEFAULT_MAX_LETTER_REPEAT = 4


def letter_index(ch: str) -> int:
    """'a' -> 0 ... 'z' -> 25 (upper-case accepted)."""
    i = ord(ch.lower()) - ord("a") if len(ch) == 1 else -1
    if not 0 <= i < NUM_LETTERS:
        raise RangeError(f"not a letter: {ch!r}")
    return i


def words_to_array(words: Sequence[str], length: int) -> np.ndarray:
    """Encode words as an (N, L) uint8 array of letter indices."""
    arr = np.zeros((len(words), length), dtype=np.uint8)
    for i, w in enumerate(words):
        arr[i] = [letter_index(c) for c in w]
    return arr


class ClueIndex:
    def __init__(self, words: Sequence[str], length: int,
                 max_letter_repeat: int = DEFAULT_MAX_LETTER_REPEAT):
        if max_letter_repeat < 1:
            raise RangeError(f"max_letter_repeat must be >= 1; got {max_letter_repeat}")

        self.length = int(length)
        self.words = tuple(words)
        self.size = len(self.words)

        n, cap = self.size, int(max_letter_repeat)
        chars = words_to_array(self.words, self.length)
        ids = np.arange(n)

        # Position clues: here[p, c, w]
        here = np.zeros((self.length, NUM_LETTERS, n), dtype=bool)
        for p in range(self.length):
            here[p, chars[:, p], ids] = True

        # Letter counts per word
        counts = np.zeros((n, NUM_LETTERS), dtype=np.int64)
        for p in range(self.length):
            np.add.at(counts, (ids, chars[:, p]), 1)

        top = int(counts.max()) if n else 0
        if top > cap:
            log.warning("max_letter_repeat=%d is below the %d copies of one letter in the word list; "
                        "using %d.", cap, top, top)
            cap = top
        self.max_letter_repeat = cap
        counts = counts.T  # (26, N)

        # exactly[c, k, w] for k in 0..cap; at_least[c, k-1, w] for k in 1..cap
        ks = np.arange(cap + 1)
        exactly = counts[:, None, :] == ks[None, :, None]
        at_least = counts[:, None, :] >= ks[None, 1:, None]

        for arr in (here, exactly, at_least):
            arr.setflags(write=False)

        self._chars = chars
        self._here = here
        self._exactly = exactly
        self._at_least = at_least
        self._all = np.ones(n, dtype=bool)
        self._none = np.zeros(n, dtype=bool)
        self._all.setflags(write=False)
        self._none.setflags(write=False)

    # ---- accessors (all return read-only views) ----

    @property
    def chars(self) -> np.ndarray:
        return self._chars

    def all_words(self) -> np.ndarray:
        return self._all

    def no_words(self) -> np.ndarray:
        return self._none

    def _check_letter(self, letter: int) -> None:
        if not 0 <= letter < NUM_LETTERS:
            raise RangeError(f"letter index out of range: {letter}")

    def here(self, pos: int, letter: int) -> np.ndarray:
        if not 0 <= pos < self.length:
            raise RangeError(f"position {pos} out of range for length {self.length}")
        self._check_letter(letter)
        return self._here[pos, letter]

    def at_least(self, letter: int, count: int) -> np.ndarray:
        self._check_letter(letter)
        if count < 0:
            raise RangeError(f"count must be >= 0; got {count}")
        if count == 0:
            return self._all
        if count > self.max_letter_repeat:
            return self._none
        return self._at_least[letter, count - 1]

    def exactly(self, letter: int, count: int) -> np.ndarray:
        self._check_letter(letter)
        if count < 0:
            raise RangeError(f"count must be >= 0; got {count}")
        if count > self.max_letter_repeat:
            return self._none
        return self._exactly[letter, count]

    def letter_counts(self, letter: int) -> np.ndarray:
        """Sizes of exactly(letter, k) for k in 0..cap (diagnostics)."""
        self._check_letter(letter)
        return self._exactly[letter].sum(axis=1)
