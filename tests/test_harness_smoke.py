import csv
import json
import math

import pytest
from wordsieve.engine import Engine
from wordsieve.harness import (rank_table, run_batch, run_case, scan_pairs, scan_triples, write_csv,
                               write_games_csv, write_manifest)

WORDS = ["crane", "raise", "stare", "trace", "cared"]


@pytest.fixture
def engine():
    return Engine(WORDS)


def test_run_case_smoke(engine):
    r = run_case(engine, "cared")
    assert "success" in r and "history" in r
    # Every guess is a candidate, so five words need at most five turns.
    assert r["success"] is True
    assert r["history"][-1] == ("cared", "HHHHH")
    assert r["guesses"] == len(r["history"]) <= 5


def test_run_case_first_guess_and_turn_limit(engine):
    r = run_case(engine, "trace", first_guess="raise")
    assert r["history"][0][0] == "raise"
    with pytest.raises(ValueError):
        run_case(engine, "trace", max_turns=7)
    with pytest.raises(LookupError):
        run_case(engine, "zzzzz")


def test_run_batch_resets_engine(engine):
    results = run_batch(engine, WORDS, sample=3)
    assert [r["answer"] for r in results] == WORDS[:3]
    assert all(r["success"] for r in results)
    assert engine.candidates.count == len(WORDS)


def test_rank_table_covers_dictionary(engine):
    rows = rank_table(engine, "expected")
    assert sorted(w for w, _ in rows) == sorted(WORDS)
    exp = [st.expected_bucket for _, st in rows]
    assert exp == sorted(exp)


def test_scan_pairs_and_triples(engine):
    ticks = []
    pairs = scan_pairs(engine, top=3, progress=ticks.append)
    assert len(ticks) == math.comb(len(WORDS), 2)
    assert len(pairs) == 3
    ent = [st.entropy_bits for _, st in pairs]
    assert ent == sorted(ent, reverse=True)
    # A pair never splits worse than its better half.
    (a, b), st = pairs[0]
    assert st.entropy_bits >= max(engine.stats(a, False).entropy_bits,
                                  engine.stats(b, False).entropy_bits) - 1e-12

    triples = scan_triples(engine, pool=WORDS[:4], top=10)
    assert len(triples) == math.comb(4, 3)
    assert all(len(combo) == 3 for combo, _ in triples)


def test_outputs(tmp_path, engine):
    rows = rank_table(engine)
    path = write_csv(rows, str(tmp_path / "rank.csv"))
    with open(path, newline="", encoding="utf-8") as f:
        got = list(csv.DictReader(f))
    assert [r["word"] for r in got] == [w for w, _ in rows]
    assert got[0]["rank"] == "1"

    results = run_batch(engine, WORDS, sample=2)
    games = write_games_csv(results, str(tmp_path / "games.csv"), max_turns=6, N=5)
    with open(games, newline="", encoding="utf-8") as f:
        first = next(csv.DictReader(f))
    assert first["answer"] == "crane"
    assert first["patt_1"].startswith("'")

    m = write_manifest({"run_id": "x", "num_words": engine.size}, str(tmp_path / "m.json"))
    with open(m, encoding="utf-8") as f:
        assert json.load(f)["num_words"] == len(WORDS)
