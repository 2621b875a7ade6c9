"""
Dictionary validator for wordsieve.

What this module does:
- Clean a stream of word tokens for length N: lowercase, a-z only, exact
  length, first occurrence wins.
- Count every rejected token by reason (wrong length, invalid characters,
  duplicates) instead of failing on it.
- Validate a word-list file: the above plus SHA-256 of the raw bytes.
- Return a machine-readable dict (for manifests) and provide a pretty one-line summary.

Typical use:
    from wordsieve.datasets import validate_wordlist, pretty_summary
    rep = validate_wordlist(5, "data/words_5.txt")
    print(pretty_summary(rep))
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, Iterable, List, Tuple
import hashlib
import logging

from .io import read_tokens

log = logging.getLogger(__name__)

ALPHABET = frozenset("abcdefghijklmnopqrstuvwxyz")


# -----------------------------
# Dataclasses for structured reports
# -----------------------------

@dataclass
class Rejections:
    """Tokens dropped while cleaning, by reason."""
    wrong_length: int = 0
    invalid_chars: int = 0
    duplicates: int = 0

    @property
    def total(self) -> int:
        return self.wrong_length + self.invalid_chars + self.duplicates

    def messages(self) -> List[str]:
        """One warning line per non-zero reason."""
        out = []
        if self.wrong_length:
            out.append(f"eliminated {self.wrong_length} words of the wrong size")
        if self.invalid_chars:
            out.append(f"eliminated {self.invalid_chars} words with invalid characters")
        if self.duplicates:
            out.append(f"eliminated {self.duplicates} words that were duplicates")
        return out


@dataclass
class LoadReport:
    """Validation result for one word-list file."""
    N: int
    path: str                 # file path (as given)
    exists: bool              # did the file exist on disk?
    count: int                # number of VALID words after cleaning
    sha256: str               # SHA-256 of raw file bytes (empty string if missing)
    rejected: Rejections = field(default_factory=Rejections)
    passed: bool = False
    issues: List[str] = field(default_factory=list)


# -----------------------------
# Helpers
# -----------------------------

def _sha256_file(path: Path) -> str:
    """Compute SHA-256 of a file's raw bytes."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def infer_length(tokens: Iterable[str], default: int = 5) -> int:
    """Length of the first purely alphabetic token, else `default`."""
    for t in tokens:
        t = t.strip()
        if t and t.isascii() and t.isalpha():
            return len(t)
    return default


def clean_words(tokens: Iterable[str], N: int, *, normalize: bool = True) -> Tuple[List[str], Rejections]:
    """
    Keep tokens that are N-letter a-z words, in input order, without repeats.

    Rules (checked in this order, one reason per rejected token):
      - length must be exactly N                 -> wrong_length
      - every character must be a-z              -> invalid_chars
      - must not repeat an already kept word     -> duplicates

    With normalize=True tokens are stripped and lowercased first (what the
    file loader does); with normalize=False upper-case letters count as
    invalid characters.

    Returns:
      (valid_words, rejections)
    """
    kept: List[str] = []
    seen = set()
    rej = Rejections()

    for raw in tokens:
        w = raw.strip().lower() if normalize else raw
        if len(w) != N:
            rej.wrong_length += 1
            continue
        if not ALPHABET.issuperset(w):
            rej.invalid_chars += 1
            continue
        if w in seen:
            rej.duplicates += 1
            continue
        seen.add(w)
        kept.append(w)

    return kept, rej


def _as_dict(rep: LoadReport) -> Dict:
    """Dataclass → plain dict (stable ordering)."""
    d = asdict(rep)
    d["rejected"]["total"] = rep.rejected.total
    return d


# -----------------------------
# Public API
# -----------------------------

def load_wordlist(N: int, path: str) -> Tuple[List[str], Dict]:
    """
    Read and clean a whitespace-separated word list.

    Returns (words, report) where report is the validate_wordlist dict.
    Raises FileNotFoundError if the path doesn't exist.
    """
    p = Path(path)
    tokens = read_tokens(p)
    words, rej = clean_words(tokens, N)

    issues = rej.messages()
    if not words:
        issues.append("word list contains 0 valid words")
    for msg in rej.messages():
        log.warning("%s: %s", p, msg)

    rep = LoadReport(
        N=N,
        path=str(p),
        exists=True,
        count=len(words),
        sha256=_sha256_file(p),
        rejected=rej,
        # Strict pass criteria: non-empty + nothing rejected
        passed=bool(words) and rej.total == 0,
        issues=issues,
    )
    log.info("Loaded %d valid words from %s", len(words), p)
    return words, _as_dict(rep)


def validate_wordlist(N: int, path: str) -> Dict:
    """
    Validate a word list for length N.

    Parameters
    ----------
    N : int
        Word length (e.g., 5 or 6).
    path : str
        Path to the word list (whitespace-separated tokens).

    Returns
    -------
    Dict
        A JSON-serializable dictionary (see LoadReport schema) with:
          - valid word count, SHA-256
          - rejected token counts by reason
          - `passed` boolean (strict: non-empty and nothing rejected)
          - `issues` (list of strings) to surface any problems
    """
    p = Path(path)
    if not p.exists():
        rep = LoadReport(N=N, path=path, exists=False, count=0, sha256="",
                         issues=[f"word list not found: {path}"])
        return _as_dict(rep)
    _, rep = load_wordlist(N, path)
    return rep


def pretty_summary(report: Dict) -> str:
    """
    Produce a compact, human-friendly one-liner for console/docs.

    Example:
        N=5 | words=5757 (sha=abc123...) | rejected=0 (len=0, chars=0, dup=0) | OK
    """
    r = report["rejected"]
    status = "OK" if report["passed"] else "FAIL"
    # abbreviate sha to 12 chars for readability
    sha = (report.get("sha256") or "")[:12]
    return (
        f"N={report['N']} | words={report['count']} (sha={sha}) "
        f"| rejected={r['total']} (len={r['wrong_length']}, chars={r['invalid_chars']}, "
        f"dup={r['duplicates']}) | {status}"
    )
