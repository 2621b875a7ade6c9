"""
Engine: the composition root for one dictionary.

Owns:
  - the cleaned word list and its word -> id map
  - the ClueIndex and a GuessPartitioner over it
  - the ResultTable (decode tables) used by the partitioner
  - cached partitions and full-dictionary stats, one slot per word
  - the CandidateSet plus cached stats against it

Partitions never change for a loaded dictionary. Stats against the
candidate set are dropped whenever the candidate set changes.

Typical use:
    eng = Engine(words)                 # length inferred from the words
    eng.precompute(workers=4)           # optional; otherwise lazy
    eng.apply_clue("crane", "NNEHN")
    for word, st in eng.ranked("entropy", limit=10): ...
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from wordsieve.datasets.validator import clean_words, infer_length

from .candidates import CandidateSet, Operation, ResultLike
from .clues import DEFAULT_MAX_LETTER_REPEAT, ClueIndex
from .errors import UnknownWordError, ValidationError
from .partition import GuessPartitioner, Partition
from .ranking import sort_rows
from .result import ResultTable
from .stats import Stats, combined_stats, compute_stats

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64

ProgressFn = Callable[[float], None]


class Engine:
    def __init__(
            self,
            words: Sequence[str],
            length: int | None = None,
            *,
            max_letter_repeat: int = DEFAULT_MAX_LETTER_REPEAT,
            strict: bool = False,
            table: ResultTable | None = None,
    ):
        """
        Args:
          words             : word tokens in load order (cleaned here)
          length            : word length; inferred from the first alphabetic token if None
          max_letter_repeat : cap on tracked copies of one letter
          strict            : raise ValidationError instead of dropping bad tokens
          table             : shared decode tables (a private one is created if None)
        """
        words = list(words)
        self.length = int(length) if length is not None else infer_length(words)

        kept, rejected = clean_words(words, self.length, normalize=not strict)
        if rejected.total:
            if strict:
                raise ValidationError("; ".join(rejected.messages()))
            for msg in rejected.messages():
                log.warning(msg)
        if not kept:
            raise ValidationError(f"no valid {self.length}-letter words to load")

        self.words: Tuple[str, ...] = tuple(kept)
        self.rejected = rejected
        self._ids: Dict[str, int] = {w: i for i, w in enumerate(self.words)}
        log.info("Loaded %d valid words.", len(self.words))

        self.table = table or ResultTable()
        self.index = ClueIndex(self.words, self.length, max_letter_repeat)
        self.partitioner = GuessPartitioner(self.index, self.table)
        log.debug("Clues are initialized for all %d words.", len(self.words))

        n = len(self.words)
        self._partitions: List[Optional[Partition]] = [None] * n
        self._full_stats: List[Optional[Stats]] = [None] * n
        self._cand_stats: Dict[int, Stats] = {}
        self._cand_mask: Optional[np.ndarray] = None

        # Single writer for the candidate set and its stats cache.
        self._lock = threading.RLock()
        self.candidates = CandidateSet(self.index, self._clue_bucket)

    # ---- dictionary ----

    @property
    def size(self) -> int:
        return len(self.words)

    @property
    def max_letter_repeat(self) -> int:
        return self.index.max_letter_repeat

    def __contains__(self, word: str) -> bool:
        return word.strip().lower() in self._ids

    def word_id(self, word: str) -> int:
        """Dense id of `word`; UnknownWordError if it isn't loaded."""
        try:
            return self._ids[word.strip().lower()]
        except KeyError:
            raise UnknownWordError(word) from None

    def word(self, word_id: int) -> str:
        return self.words[word_id]

    # ---- partitions & stats ----

    def _partition_at(self, i: int) -> Partition:
        part = self._partitions[i]
        if part is None:
            part = self.partitioner.compute_partition(self.words[i])
            self._partitions[i] = part
        return part

    def partition(self, word: str) -> Partition:
        return self._partition_at(self.word_id(word))

    def _clue_bucket(self, guess: str, code: int) -> np.ndarray:
        part = self._partitions[self.word_id(guess)]
        if part is None:
            # One bucket is enough; don't build the whole partition for a clue.
            return self.partitioner.bucket(guess, code)
        bucket = part.bucket(code)
        return bucket if bucket is not None else self.index.no_words()

    def _restriction(self) -> np.ndarray:
        with self._lock:
            if self._cand_mask is None:
                self._cand_mask = self.candidates.mask
            return self._cand_mask

    def _full_stats_at(self, i: int) -> Stats:
        st = self._full_stats[i]
        if st is None:
            st = compute_stats(self._partition_at(i))
            self._full_stats[i] = st
        return st

    def _cand_stats_at(self, i: int) -> Stats:
        with self._lock:
            st = self._cand_stats.get(i)
            if st is None:
                st = compute_stats(self._partition_at(i), self._restriction())
                self._cand_stats[i] = st
            return st

    def stats(self, word: str, restrict: bool = True) -> Stats:
        """
        Stats for guessing `word`: against the current candidates (restrict=True)
        or the whole dictionary.
        """
        i = self.word_id(word)
        return self._cand_stats_at(i) if restrict else self._full_stats_at(i)

    @property
    def progress(self) -> float:
        """Fraction of words whose partition + full stats are ready (advisory)."""
        if not self.size:
            return 1.0
        return sum(st is not None for st in self._full_stats) / self.size

    def precompute(self, workers: int | None = None, progress: ProgressFn | None = None,
                   chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """
        Compute every partition and its full-dictionary stats.

        The word list is split into chunks; each worker fills its own slots,
        so no locking is needed. `progress` receives the fraction done after
        each chunk. workers=1 runs inline.
        """
        todo = [i for i in range(self.size) if self._full_stats[i] is None]
        if not todo:
            if progress:
                progress(1.0)
            return

        chunks = [todo[k:k + chunk_size] for k in range(0, len(todo), chunk_size)]
        workers = workers or min(32, (os.cpu_count() or 1))
        log.info("Processing %d words in %d chunks (%d workers).", len(todo), len(chunks), workers)

        def run(chunk: List[int]) -> None:
            for i in chunk:
                self._full_stats_at(i)

        if workers == 1:
            for chunk in chunks:
                run(chunk)
                if progress:
                    progress(self.progress)
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(run, chunk) for chunk in chunks]
                for fut in as_completed(futures):
                    fut.result()
                    if progress:
                        progress(self.progress)

        log.info("%d words are analyzed; %d results each.", self.size, 3 ** self.length)

    # ---- candidate set ----

    def _changed(self) -> None:
        self._cand_stats.clear()
        self._cand_mask = None

    def apply_clue(self, guess: str, result: ResultLike) -> None:
        with self._lock:
            self.candidates.apply_clue(guess, result)
            self._changed()

    def apply_pattern(self, pattern: str) -> None:
        with self._lock:
            self.candidates.apply_pattern(pattern)
            self._changed()

    def apply_include_exclude(self, include: str = "", exclude: str = "") -> None:
        with self._lock:
            self.candidates.apply_include_exclude(include, exclude)
            self._changed()

    def reset(self) -> None:
        with self._lock:
            self.candidates.reset()
            self._changed()

    def pop(self) -> Optional[Operation]:
        with self._lock:
            op = self.candidates.pop()
            if op is not None:
                self._changed()
            return op

    @property
    def history(self) -> List[Operation]:
        return self.candidates.history

    def candidate_words(self) -> List[str]:
        return self.candidates.words()

    # ---- ranking & iteration ----

    def ranked(self, order: str = "entropy", *, reverse: bool = False, scope: str = "candidates",
               limit: int | None = None, restrict: bool = True) -> List[Tuple[str, Stats]]:
        """
        Words with their stats, sorted by `order` (see ranking.SORT_ORDERS).

        scope    : "candidates" lists only still-possible words, "all" the whole dictionary
        restrict : score against the candidate set (True) or the full dictionary
        """
        if scope == "candidates":
            ids = self.candidates.indices()
        elif scope == "all":
            ids = range(self.size)
        else:
            raise ValueError(f"scope must be 'candidates' or 'all'; got {scope!r}")

        stat_fn = self._cand_stats_at if restrict else self._full_stats_at
        rows = [(self.words[i], stat_fn(int(i))) for i in ids]
        rows = sort_rows(rows, order, reverse=reverse)
        return rows[:limit] if limit is not None else rows

    def iter_stats(self, restrict: bool = False) -> Iterator[Tuple[str, Stats]]:
        """(word, Stats) in load order."""
        stat_fn = self._cand_stats_at if restrict else self._full_stats_at
        for i, w in enumerate(self.words):
            yield w, stat_fn(i)

    def iter_partition(self, word: str) -> Iterator[Tuple[int, List[str]]]:
        """(result id, bucket words) for every achievable result of `word`."""
        part = self.partition(word)
        for code, bucket in part:
            yield code, [self.words[i] for i in np.flatnonzero(bucket)]

    def combined_stats(self, words: Sequence[str], restrict: bool = True) -> Stats:
        """Stats for playing several guesses together (pairs, triples...)."""
        parts = [self.partition(w) for w in words]
        mask = self._restriction() if restrict else None
        return combined_stats(parts, mask)
