from pathlib import Path

import pytest
from wordsieve.datasets import (clean_words, infer_length, load_wordlist, pretty_summary,
                                read_tokens, validate_wordlist, write_lines)


def _write(p: Path, lines):
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_validate_wordlist_happy_path(tmp_path: Path):
    words = tmp_path / "words_5.txt"
    _write(words, ["crane", "raise", "stare", "trace", "cared"])

    rep = validate_wordlist(5, str(words))
    assert rep["passed"] is True
    assert rep["count"] == 5
    assert rep["rejected"]["total"] == 0
    assert len(rep["sha256"]) == 64
    s = pretty_summary(rep)
    assert "N=5" in s and "words=5" in s and s.endswith("OK")


def test_validate_wordlist_flags_rejections(tmp_path: Path):
    words = tmp_path / "words_6.txt"
    # 'crane' is the wrong size, '??????' has invalid characters, 'RAISER' repeats 'raiser'
    words.write_text("raiser crane\n??????\nplanet RAISER\n", encoding="utf-8")

    rep = validate_wordlist(6, str(words))
    assert rep["passed"] is False
    assert rep["count"] == 2
    assert rep["rejected"] == {"wrong_length": 1, "invalid_chars": 1, "duplicates": 1, "total": 3}
    assert any("invalid characters" in msg for msg in rep["issues"])
    assert pretty_summary(rep).endswith("(len=1, chars=1, dup=1) | FAIL")


def test_validate_missing_file(tmp_path: Path):
    rep = validate_wordlist(5, str(tmp_path / "nope.txt"))
    assert rep["exists"] is False and rep["passed"] is False
    assert any("not found" in msg for msg in rep["issues"])


def test_load_wordlist_returns_clean_words(tmp_path: Path):
    words = tmp_path / "w.txt"
    _write(words, ["Crane", "crane", "lemon"])
    got, rep = load_wordlist(5, str(words))
    assert got == ["crane", "lemon"]
    assert rep["rejected"]["duplicates"] == 1
    with pytest.raises(FileNotFoundError):
        load_wordlist(5, str(tmp_path / "missing.txt"))


def test_empty_wordlist_fails(tmp_path: Path):
    words = tmp_path / "empty.txt"
    words.write_text("", encoding="utf-8")
    rep = validate_wordlist(5, str(words))
    assert rep["count"] == 0 and rep["passed"] is False
    assert any("0 valid words" in msg for msg in rep["issues"])


def test_clean_words_strict_treats_case_as_invalid():
    kept, rej = clean_words(["crane", "CRANE", " lemon"], 5, normalize=False)
    assert kept == ["crane"]
    assert rej.invalid_chars == 1 and rej.wrong_length == 1


def test_infer_length():
    assert infer_length(["12", "planet", "crane"]) == 6
    assert infer_length([]) == 5


def test_read_write_roundtrip(tmp_path: Path):
    p = write_lines(["crane", "lemon"], tmp_path / "sub" / "out.txt")
    assert read_tokens(p) == ["crane", "lemon"]
