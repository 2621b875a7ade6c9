"""
Candidate set: the words still possible given every clue/filter so far.

The set is a boolean vector over word ids. It starts as all words, only ever
shrinks as operations are applied, and grows back solely through reset().

Operations:
  - ClueOp    : a (guess, result) pair -> keep the guess's bucket for result
  - PatternOp : positional pattern, e.g. "s..[ae][^t]"
                  letter  -> that letter at that position
                  .       -> any letter
                  [abc]   -> one of a, b, c
                  [^abc]  -> none of a, b, c
  - LettersOp : include multiset + exclude set, e.g. include="aa", exclude="st"
                  include letter with multiplicity m -> at least m copies
                  exclude letter                     -> exactly m copies
                                                        (m = 0 unless included)

Intersections lose information, so pop() rebuilds from all words by
replaying the remaining history.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .clues import ALPHABET, ClueIndex, letter_index
from .errors import RangeError, ValidationError
from .result import encode, parse, to_string

ResultLike = Union[str, int, Sequence[int]]

# (guess, result id) -> bucket; supplied by the owner so partitions stay cached
BucketFn = Callable[[str, int], np.ndarray]


@dataclass(frozen=True)
class ClueOp:
    guess: str
    code: int

    def describe(self) -> str:
        return f"clue {self.guess} {to_string(self.code, len(self.guess))}"


@dataclass(frozen=True)
class PatternOp:
    pattern: str
    slots: Tuple[Optional[frozenset], ...]

    def describe(self) -> str:
        return f"pattern {self.pattern}"


@dataclass(frozen=True)
class LettersOp:
    include: str
    exclude: str

    def describe(self) -> str:
        parts = []
        if self.include:
            parts.append("+" + self.include)
        if self.exclude:
            parts.append("-" + self.exclude)
        return "letters " + " ".join(parts)


Operation = Union[ClueOp, PatternOp, LettersOp]


def result_code(result: ResultLike, length: int) -> int:
    """Normalize an 'HEN' string, a pattern tuple, or an id to an id."""
    if isinstance(result, str):
        pattern = parse(result)
    elif isinstance(result, (int, np.integer)):
        code = int(result)
        if not 0 <= code < 3 ** length:
            raise RangeError(f"result id {code} out of range for length {length}")
        return code
    else:
        pattern = tuple(result)
    if len(pattern) != length:
        raise ValidationError(f"result has {len(pattern)} marks; words have {length} letters")
    return encode(pattern)


def parse_pattern(text: str, length: int) -> Tuple[Optional[frozenset], ...]:
    """
    Parse a positional pattern into one slot per position.

    A slot is None for '.', else the frozenset of allowed letter ids.
    """
    slots: List[Optional[frozenset]] = []
    s = text.strip().lower()
    i = 0
    while i < len(s):
        ch = s[i]
        if ch == ".":
            slots.append(None)
            i += 1
        elif ch == "[":
            end = s.find("]", i + 1)
            if end == -1:
                raise ValidationError(f"unclosed '[' in pattern {text!r}")
            body = s[i + 1:end]
            negate = body.startswith("^")
            if negate:
                body = body[1:]
            if not body or any(c not in ALPHABET for c in body):
                raise ValidationError(f"bad letter class [{s[i + 1:end]}] in pattern {text!r}")
            letters = {letter_index(c) for c in body}
            if negate:
                letters = set(range(len(ALPHABET))) - letters
            slots.append(frozenset(letters))
            i = end + 1
        elif ch in ALPHABET:
            slots.append(frozenset([letter_index(ch)]))
            i += 1
        else:
            raise ValidationError(f"unexpected character {ch!r} in pattern {text!r}")
    if len(slots) != length:
        raise ValidationError(f"pattern {text!r} covers {len(slots)} positions; words have {length}")
    return tuple(slots)


def _letters(text: str, what: str) -> str:
    s = text.strip().lower()
    bad = [c for c in s if c not in ALPHABET]
    if bad:
        raise ValidationError(f"{what} letters must be a-z; got {''.join(bad)!r}")
    return s


class CandidateSet:
    def __init__(self, index: ClueIndex, bucket_fn: BucketFn):
        self.index = index
        self._bucket_fn = bucket_fn
        self._mask = index.all_words().copy()
        self._history: List[Operation] = []

    # ---- read-only views ----

    @property
    def mask(self) -> np.ndarray:
        """Read-only snapshot; later operations don't change it."""
        snap = self._mask.copy()
        snap.setflags(write=False)
        return snap

    @property
    def history(self) -> List[Operation]:
        return list(self._history)

    @property
    def count(self) -> int:
        return int(np.count_nonzero(self._mask))

    def __len__(self) -> int:
        return self.count

    def __contains__(self, word_id: int) -> bool:
        return 0 <= word_id < len(self._mask) and bool(self._mask[word_id])

    def indices(self) -> np.ndarray:
        return np.flatnonzero(self._mask)

    def words(self) -> List[str]:
        return [self.index.words[i] for i in self.indices()]

    # ---- operations ----

    def _apply(self, op: Operation, mask: np.ndarray) -> None:
        """Intersect `mask` in place with the words satisfying `op`."""
        idx = self.index
        if isinstance(op, ClueOp):
            mask &= self._bucket_fn(op.guess, op.code)
        elif isinstance(op, PatternOp):
            for pos, slot in enumerate(op.slots):
                if slot is None:
                    continue
                allowed = np.zeros_like(mask)
                for c in slot:
                    allowed |= idx.here(pos, c)
                mask &= allowed
        elif isinstance(op, LettersOp):
            need = Counter(op.include)
            for ch, m in need.items():
                mask &= idx.at_least(letter_index(ch), m)
            for ch in set(op.exclude):
                mask &= idx.exactly(letter_index(ch), need.get(ch, 0))
        else:
            raise TypeError(f"unknown operation: {op!r}")

    def _push(self, op: Operation) -> None:
        self._apply(op, self._mask)
        self._history.append(op)

    def apply_clue(self, guess: str, result: ResultLike) -> None:
        guess = guess.strip().lower()
        code = result_code(result, self.index.length)
        # Resolve the bucket before touching state so an unknown guess leaves us unchanged.
        bucket = self._bucket_fn(guess, code)
        self._mask &= bucket
        self._history.append(ClueOp(guess, code))

    def apply_pattern(self, pattern: str) -> None:
        slots = parse_pattern(pattern, self.index.length)
        self._push(PatternOp(pattern.strip().lower(), slots))

    def apply_include_exclude(self, include: str = "", exclude: str = "") -> None:
        inc = _letters(include, "include")
        exc = "".join(sorted(set(_letters(exclude, "exclude"))))
        self._push(LettersOp(inc, exc))

    def reset(self) -> None:
        self._mask = self.index.all_words().copy()
        self._history.clear()

    def replay(self, ops: Sequence[Operation]) -> None:
        """Reset, then apply `ops` in order."""
        mask = self.index.all_words().copy()
        for op in ops:
            self._apply(op, mask)
        self._mask = mask
        self._history = list(ops)

    def pop(self) -> Optional[Operation]:
        """Drop the most recent operation; None if there was nothing to drop."""
        if not self._history:
            return None
        last = self._history[-1]
        self.replay(self._history[:-1])
        return last
