# apps/cli/rank.py
"""
CLI entry point for bulk guess analysis.

This script:
  1) Validates the word list (prints counts + SHA, reports dropped tokens).
  2) Precomputes every word's partition and stats with a live progress bar.
  3) Writes:
       - CSV:  every word ranked by the chosen sort order
       - TXT:  the ranked words alone, one per line
       - JSON: manifest with config, word list hash, git commit, etc.
  4) Optionally scans guess pairs / triples and simulates games.
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

from tqdm import tqdm

from wordsieve.datasets import load_wordlist, pretty_summary, read_tokens, infer_length, write_lines
from wordsieve.engine import Engine, WordsieveError
from wordsieve.engine.clues import DEFAULT_MAX_LETTER_REPEAT
from wordsieve.engine.ranking import get_order_ids
from wordsieve.harness import rank_table, run_batch, scan_pairs, scan_triples
from wordsieve.harness.core import WORDLE_MAX_TURNS
from wordsieve.harness.io import (write_csv, write_games_csv, write_manifest, timestamp_id,
                                  git_commit_or_unknown)


def _combo_lines(title: str, combos) -> list[str]:
    lines = [title]
    for words, st in combos:
        lines.append(f"  {'+'.join(words)}: entropy={st.entropy_bits:.4f} "
                     f"expected={st.expected_bucket:.3f} max={st.max_bucket}")
    return lines


def main():
    """
    Parse CLI args, validate the word list, precompute with progress, and write outputs.
    """
    ap = argparse.ArgumentParser(description="wordsieve: rank every guess in a word list")
    ap.add_argument("--words", required=True, help="path to the word list (whitespace-separated)")
    ap.add_argument("--N", type=int, help="word length (default: length of the first word)")
    ap.add_argument("--sort", default="entropy",
                    help=f"sort order (one of: {', '.join(get_order_ids())}; 'r-' prefix reverses)")
    ap.add_argument("--reverse", action="store_true", help="reverse the sort order")
    ap.add_argument("--max-repeat", type=int, default=DEFAULT_MAX_LETTER_REPEAT,
                    help="cap on tracked copies of a single letter (raised to fit the word list)")
    ap.add_argument("--workers", type=int, help="threads for precomputation (default: CPU count)")
    ap.add_argument("--pairs", type=int, default=0,
                    help="scan all pairs among the top-K words by entropy (0 = skip)")
    ap.add_argument("--triples", type=int, default=0,
                    help="scan all triples among the top-K words by entropy (0 = skip)")
    ap.add_argument("--simulate", type=int, default=0,
                    help="play the first K words as hidden answers (0 = skip)")
    ap.add_argument("--outdir", default="reports", help="directory for output files")
    ap.add_argument("--progress", choices=["auto", "bar", "off"], default="auto",
                    help="Show run progress (auto=bar if stderr is a terminal).")
    ap.add_argument("--log-level", default="INFO", help="logging level (DEBUG, INFO, WARNING...)")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    show = args.progress == "bar" or (args.progress == "auto" and sys.stderr.isatty())

    # 1) Validate + load the word list
    N = args.N or infer_length(read_tokens(args.words))
    words, rep = load_wordlist(N, args.words)
    print(pretty_summary(rep))

    try:
        engine = Engine(words, N, max_letter_repeat=args.max_repeat)
    except WordsieveError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # 2) Precompute with live progress
    with tqdm(total=engine.size, ncols=80, desc="Processing", unit="word", disable=not show) as bar:
        engine.precompute(workers=args.workers,
                          progress=lambda frac: bar.update(round(frac * engine.size) - bar.n))

    # 3) Rank + write outputs
    try:
        rows = rank_table(engine, args.sort, reverse=args.reverse)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    run_id = timestamp_id()
    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    csv_path = outdir / f"rank_{run_id}.csv"
    txt_path = outdir / f"rank_{run_id}.txt"
    manifest_path = outdir / f"rank_{run_id}_manifest.json"

    write_csv(rows, str(csv_path))
    write_lines([w for w, _ in rows], txt_path)

    manifest = {
        "run_id": run_id,
        "git_commit": git_commit_or_unknown(),
        "config": vars(args),
        "wordlist": rep,
        "num_words": engine.size,
        "top": [w for w, _ in rows[:10]],
    }

    # 4) Optional bulk scans
    if args.pairs:
        total = math.comb(min(args.pairs, engine.size), 2)
        with tqdm(total=total, ncols=80, desc="Pairs", unit="pair", disable=not show) as bar:
            combos = scan_pairs(engine, pool_size=args.pairs, progress=bar.update)
        print("\n".join(_combo_lines("Best pairs:", combos)))
        manifest["pairs"] = [{"words": list(c), **st.as_dict()} for c, st in combos]

    if args.triples:
        total = math.comb(min(args.triples, engine.size), 3)
        with tqdm(total=total, ncols=80, desc="Triples", unit="triple", disable=not show) as bar:
            combos = scan_triples(engine, pool_size=args.triples, progress=bar.update)
        print("\n".join(_combo_lines("Best triples:", combos)))
        manifest["triples"] = [{"words": list(c), **st.as_dict()} for c, st in combos]

    if args.simulate:
        results = run_batch(engine, engine.words, order=args.sort, sample=args.simulate)
        for r in results:
            r["order"] = args.sort
        games_path = outdir / f"games_{run_id}.csv"
        write_games_csv(results, str(games_path), max_turns=WORDLE_MAX_TURNS, N=N)
        wins = [r for r in results if r["success"]]
        avg = sum(r["guesses"] for r in wins) / len(wins) if wins else 0.0
        print(f"Simulated {len(results)} games: {len(wins)} solved, average {avg:.3f} guesses")
        manifest["games"] = {"path": str(games_path), "played": len(results),
                             "solved": len(wins), "average_guesses": avg}
        print(f"Wrote: {games_path}")

    write_manifest(manifest, str(manifest_path))

    print(f"Wrote: {csv_path}")
    print(f"Wrote: {txt_path}")
    print(f"Wrote: {manifest_path}")


if __name__ == "__main__":
    main()
