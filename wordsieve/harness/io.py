"""
I/O utilities for analysis runs.

Responsibilities:
- write_csv:      ranking table (word + stats), one row per word.
- write_games_csv: flatten simulated games into a tidy CSV (one row per game).
- write_manifest: dump a JSON manifest with config, hashes, and metadata.
- timestamp_id:   stable UTC run ID string.
- git_commit_or_unknown: best-effort short commit hash for reproducibility.

Notes:
- Patterns are prefixed with an apostrophe to keep Excel from interpreting
  strings like "-GYY-" as formulas (which would display as #NAME?).
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence, Tuple
import csv
import json
import subprocess
import datetime as dt

from wordsieve.engine import Stats

RANK_FIELDS = ["rank", "word", "expected_bucket", "max_bucket", "entropy_bits", "solve_probability"]


def _excel_safe_pattern(patt: str) -> str:
    """
    Prefix with an apostrophe so spreadsheet apps treat it as text.
    Example: "-GYY-" -> "'-GYY-"
    """
    return "'" + patt if patt else patt


def write_csv(rows: Sequence[Tuple[str, Stats]], path: str) -> str:
    """
    Serialize a ranked (word, Stats) list to CSV.

    Schema (columns):
      rank, word, expected_bucket, max_bucket, entropy_bits, solve_probability

    Returns:
      The path written (string).
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=RANK_FIELDS)
        w.writeheader()
        for rank, (word, st) in enumerate(rows, start=1):
            w.writerow({
                "rank": rank,
                "word": word,
                "expected_bucket": round(st.expected_bucket, 6),
                "max_bucket": st.max_bucket,
                "entropy_bits": round(st.entropy_bits, 6),
                "solve_probability": round(st.solve_probability, 6),
            })

    return str(p)


def write_games_csv(results: List[Dict], path: str, max_turns: int, N: int) -> str:
    """
    Serialize a batch of simulated games to CSV.

    Schema (columns):
      order, N, answer, success, guesses, time_ms,
      guess_1, patt_1, ..., guess_max_turns, patt_max_turns
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fields = ["order", "N", "answer", "success", "guesses", "time_ms"]
    for i in range(1, max_turns + 1):
        fields += [f"guess_{i}", f"patt_{i}"]

    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()

        for r in results:
            row = {
                "order": r.get("order", "?"),
                "N": N,
                "answer": r["answer"],
                "success": r["success"],
                "guesses": r["guesses"],
                "time_ms": round(float(r["time_ms"]), 3),
            }

            # Expand history into fixed columns (Excel-safe patterns)
            hist = r.get("history", [])
            for i in range(1, max_turns + 1):
                if i <= len(hist):
                    g, patt = hist[i - 1]
                    row[f"guess_{i}"] = g
                    row[f"patt_{i}"] = _excel_safe_pattern(patt)
                else:
                    row[f"guess_{i}"] = ""
                    row[f"patt_{i}"] = ""

            w.writerow(row)

    return str(p)


def write_manifest(manifest: Dict, path: str) -> str:
    """
    Write a JSON manifest with run configuration and dataset validation summary.

    Typical keys:
      - run_id, git_commit
      - config: CLI args (words path, N, sort order, workers, outdir)
      - wordlist: output of datasets.validate_wordlist(...)
      - num_words: number of ranked words
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)
    return str(p)


def timestamp_id() -> str:
    """
    Return a compact UTC timestamp suitable for filenames, e.g. 20250820T024121Z.
    """
    return dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def git_commit_or_unknown() -> str:
    """
    Best-effort short git hash of the current repo state.
    Returns 'unknown' if git is not available or the call fails.
    """
    try:
        return (
            subprocess.check_output(
                ["git", "rev-parse", "--short", "HEAD"],
                stderr=subprocess.DEVNULL,
            )
            .decode()
            .strip()
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
