"""
Bulk analysis primitives on top of an Engine.

- run_case:    play one hidden answer by always guessing the top-ranked candidate.
- run_batch:   run many answers in sequence (optionally a sample prefix).
- rank_table:  every dictionary word with its full-dictionary stats, ranked.
- scan_pairs / scan_triples: brute-force search for guess combinations that,
  played together, split the candidates best (by combined entropy).

Enforces Wordle's 6-turn limit at the harness layer. These functions are
UI-agnostic so they can be reused by a CLI app, a notebook, or tests.
"""

from __future__ import annotations

import heapq
import itertools
import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from wordsieve.engine import Engine, Stats, score_code, to_string
from wordsieve.engine.result import all_here

# Single source of truth for Wordle turn budget.
WORDLE_MAX_TURNS = 6

Combo = Tuple[Tuple[str, ...], Stats]


def _assert_wordle_turns(max_turns: int) -> None:
    """Guardrail: prevent accidental runs with >6 turns."""
    if max_turns != WORDLE_MAX_TURNS:
        raise ValueError(f"max_turns must be {WORDLE_MAX_TURNS} for Wordle-like rules; got {max_turns}")


def run_case(
        engine: Engine,
        answer: str,
        *,
        order: str = "entropy",
        first_guess: str | None = None,
        max_turns: int = WORDLE_MAX_TURNS,
) -> Dict:
    """
    Play one game until the answer is found or the turn budget is exhausted.

    Each turn guesses the best still-possible word under `order` (scored
    against the current candidates), then narrows the engine's candidate set
    with the real result. The engine is reset first and left in its final
    state afterwards.

    Returns:
        dict with keys:
            success (bool), guesses (int), time_ms (float),
            history (list[(guess, pattern)]), answer (str)
    """
    _assert_wordle_turns(max_turns)
    answer = answer.strip().lower()
    engine.word_id(answer)  # the answer must be a dictionary word

    engine.reset()
    win = all_here(engine.length)
    history: List[Tuple[str, str]] = []

    t0 = time.time()
    for turn in range(1, WORDLE_MAX_TURNS + 1):
        if turn == 1 and first_guess:
            guess = first_guess.strip().lower()
        else:
            guess = engine.ranked(order, limit=1)[0][0]

        code = score_code(guess, answer)
        history.append((guess, to_string(code, engine.length)))

        if code == win:
            dt = (time.time() - t0) * 1000.0
            return {
                "success": True, "guesses": turn, "time_ms": dt,
                "history": history, "answer": answer,
            }

        engine.apply_clue(guess, code)

    # Out of turns: lose
    dt = (time.time() - t0) * 1000.0
    return {
        "success": False, "guesses": WORDLE_MAX_TURNS, "time_ms": dt,
        "history": history, "answer": answer,
    }


def run_batch(
        engine: Engine,
        answers: Sequence[str],
        *,
        order: str = "entropy",
        first_guess: str | None = None,
        max_turns: int = WORDLE_MAX_TURNS,
        sample: int | None = None,
) -> List[Dict]:
    """
    Run many cases back-to-back. If 'sample' is provided, only the first K
    answers are used to speed up quick experiments. The engine is reset
    after the batch.
    """
    _assert_wordle_turns(max_turns)

    pool = list(answers)
    if sample is not None:
        pool = pool[:sample]

    out: List[Dict] = []
    for ans in pool:
        out.append(run_case(engine, ans, order=order, first_guess=first_guess,
                            max_turns=WORDLE_MAX_TURNS))
    engine.reset()
    return out


def rank_table(engine: Engine, order: str = "entropy", reverse: bool = False) -> List[Tuple[str, Stats]]:
    """Whole dictionary, scored against the whole dictionary, ranked by `order`."""
    return engine.ranked(order, reverse=reverse, scope="all", restrict=False)


def _default_pool(engine: Engine, size: int, restrict: bool) -> List[str]:
    # Any dictionary word may be guessed, even one already ruled out as the answer.
    return [w for w, _ in engine.ranked("entropy", scope="all", restrict=restrict, limit=size)]


def _scan(engine: Engine, k: int, pool: Sequence[str] | None, top: int, restrict: bool,
          pool_size: int, progress: Callable[[int], None] | None) -> List[Combo]:
    words = list(pool) if pool is not None else _default_pool(engine, pool_size, restrict)
    best: List[Tuple[float, float, Tuple[str, ...], Stats]] = []

    for combo in itertools.combinations(words, k):
        st = engine.combined_stats(combo, restrict=restrict)
        # Keep the `top` highest-entropy combos; ties favour fewer expected words left.
        item = (st.entropy_bits, -st.expected_bucket, combo, st)
        if len(best) < top:
            heapq.heappush(best, item)
        elif item[:2] > best[0][:2]:
            heapq.heapreplace(best, item)
        if progress:
            progress(1)

    best.sort(key=lambda t: (-t[0], -t[1], t[2]))
    return [(combo, st) for _, _, combo, st in best]


def scan_pairs(engine: Engine, pool: Sequence[str] | None = None, *, top: int = 20,
               restrict: bool = False, pool_size: int = 50,
               progress: Optional[Callable[[int], None]] = None) -> List[Combo]:
    """
    Best two-guess combinations by combined entropy.

    pool      : words to combine (default: the `pool_size` highest-entropy words)
    restrict  : score against the current candidates instead of the dictionary
    progress  : called with 1 after each evaluated combination
    """
    return _scan(engine, 2, pool, top, restrict, pool_size, progress)


def scan_triples(engine: Engine, pool: Sequence[str] | None = None, *, top: int = 20,
                 restrict: bool = False, pool_size: int = 25,
                 progress: Optional[Callable[[int], None]] = None) -> List[Combo]:
    """Best three-guess combinations by combined entropy (see scan_pairs)."""
    return _scan(engine, 3, pool, top, restrict, pool_size, progress)
