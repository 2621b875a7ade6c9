"""
Result codes: per-letter feedback patterns and their compact integer IDs.

Conventions:
  - NOWHERE   (0) : letter not present (or present fewer times than guessed)
  - ELSEWHERE (1) : correct letter, wrong position
  - HERE      (2) : correct letter, correct position

A pattern of length L is a tuple of L marks. Its ID is the base-3 number
with the mark at position p contributing mark * 3**p, so IDs live in
[0, 3**L) and the all-HERE pattern is 3**L - 1.

Text form uses 'H', 'E', 'N' (case-insensitive), e.g. "EEHEE".

Not every ID is achievable for a given guess: a letter reported NOWHERE at
position i can't be reported ELSEWHERE at a later position j holding the same
letter (the scorer hands out ELSEWHERE marks left to right). Those IDs are
skipped during partitioning rather than treated as errors.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, Sequence, Tuple

import numpy as np

from .errors import RangeError, ValidationError

NOWHERE = 0
ELSEWHERE = 1
HERE = 2

MARKS = (NOWHERE, ELSEWHERE, HERE)

# Word lengths must stay below this (decode tables up to 3**14 codes).
MAX_WORD_SIZE = 15

_TEXT_TO_MARK = {"n": NOWHERE, "e": ELSEWHERE, "h": HERE}

Pattern = Tuple[int, ...]


def num_codes(length: int) -> int:
    """Number of result IDs for words of `length` letters (3**length)."""
    _check_length(length)
    return 3 ** length


def all_here(length: int) -> int:
    """ID of the winning pattern (every mark HERE)."""
    return num_codes(length) - 1


def _check_length(length: int) -> None:
    if not 1 <= length < MAX_WORD_SIZE:
        raise RangeError(f"word length must be in 1..{MAX_WORD_SIZE - 1}; got {length}")


class ResultTable:
    """
    Lazily built decode tables, one per word length.

    table(L) is an (3**L, L) uint8 array whose row `code` holds the marks of
    that code. Decoding is requested 3**L times for each of N words, so the
    rows are computed once per length and shared. Building a new length is
    serialized by a lock; reads of a finished table need no locking.
    """

    def __init__(self):
        self._tables: Dict[int, np.ndarray] = {}
        self._lock = threading.Lock()

    def table(self, length: int) -> np.ndarray:
        tbl = self._tables.get(length)
        if tbl is not None:
            return tbl
        _check_length(length)
        with self._lock:
            tbl = self._tables.get(length)
            if tbl is None:
                codes = np.arange(3 ** length, dtype=np.int64)
                powers = 3 ** np.arange(length, dtype=np.int64)
                tbl = ((codes[:, None] // powers[None, :]) % 3).astype(np.uint8)
                tbl.setflags(write=False)
                self._tables[length] = tbl
        return tbl

    def decode(self, code: int, length: int) -> Pattern:
        n = num_codes(length)
        if not 0 <= code < n:
            raise RangeError(f"result id {code} out of range for length {length} (< {n})")
        return tuple(int(m) for m in self.table(length)[code])

    def valid_mask(self, word: str) -> np.ndarray:
        """
        Boolean vector over all IDs for len(word): True where the ID is
        achievable for `word` (see is_valid).
        """
        tbl = self.table(len(word))
        ok = np.ones(tbl.shape[0], dtype=bool)
        for i in range(len(word) - 1):
            for j in range(i + 1, len(word)):
                if word[i] == word[j]:
                    ok &= ~((tbl[:, i] == NOWHERE) & (tbl[:, j] == ELSEWHERE))
        return ok

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()


# Shared default for the module-level helpers; the Engine holds its own.
_DEFAULT_TABLE = ResultTable()


def encode(pattern: Sequence[int]) -> int:
    """Pattern -> ID. Marks must be NOWHERE / ELSEWHERE / HERE."""
    _check_length(len(pattern))
    code = 0
    base = 1
    for mark in pattern:
        if mark not in MARKS:
            raise RangeError(f"invalid mark {mark!r}")
        code += mark * base
        base *= 3
    return code


def decode(code: int, length: int) -> Pattern:
    """ID -> pattern. Raises RangeError when code is outside [0, 3**length)."""
    return _DEFAULT_TABLE.decode(code, length)


def is_valid(pattern: Sequence[int] | int, word: str) -> bool:
    """
    True if `pattern` could actually be produced when `word` is the guess.

    Accepts either a pattern or an ID (decoded against len(word)).
    """
    if isinstance(pattern, (int, np.integer)):
        pattern = decode(int(pattern), len(word))
    if len(pattern) != len(word):
        return False
    for i in range(len(word) - 1):
        if pattern[i] != NOWHERE:
            continue
        for j in range(i + 1, len(word)):
            if pattern[j] == ELSEWHERE and word[i] == word[j]:
                return False
    return True


def score(guess: str, answer: str) -> Pattern:
    """
    Feedback pattern for `guess` against `answer`.

    Exact matches are resolved first and claim their answer slots. Remaining
    guess letters are scanned left to right; each claims the earliest
    unclaimed answer slot holding the same letter (ELSEWHERE) or gets NOWHERE.

      score("abcde", "edcba") -> (1, 1, 2, 1, 1)   i.e. "EEHEE"
    """
    if len(guess) != len(answer):
        raise ValidationError(f"guess and answer differ in length: {guess!r} vs {answer!r}")

    n = len(guess)
    marks = [NOWHERE] * n
    used = [False] * n

    for i in range(n):
        if guess[i] == answer[i]:
            marks[i] = HERE
            used[i] = True

    for i in range(n):
        if marks[i] == HERE:
            continue
        for j in range(n):
            if not used[j] and guess[i] == answer[j]:
                marks[i] = ELSEWHERE
                used[j] = True  # each answer letter is consumed at most once
                break

    return tuple(marks)


def score_code(guess: str, answer: str) -> int:
    return encode(score(guess, answer))


def parse(text: str) -> Pattern:
    """
    Parse an 'H'/'E'/'N' string into a pattern.

    Raises ValidationError on any other character.
    """
    marks = []
    for ch in text.strip():
        mark = _TEXT_TO_MARK.get(ch.lower())
        if mark is None:
            raise ValidationError(f"invalid result character {ch!r} in {text!r} (use H, E, N)")
        marks.append(mark)
    if not marks:
        raise ValidationError("empty result string")
    return tuple(marks)


def to_string(pattern: Iterable[int] | int, length: int | None = None, *,
              here: str = "H", elsewhere: str = "E", nowhere: str = "N") -> str:
    """
    Render a pattern (or an ID plus its length) with the given symbols.

    to_string((2, 1, 0), here="G", elsewhere="Y", nowhere="-") -> "GY-"
    """
    if isinstance(pattern, (int, np.integer)):
        if length is None:
            raise ValueError("length is required when rendering a result id")
        pattern = decode(int(pattern), length)
    symbols = {HERE: here, ELSEWHERE: elsewhere, NOWHERE: nowhere}
    return "".join(symbols[m] for m in pattern)
