from .result import NOWHERE, ELSEWHERE, HERE, ResultTable, encode, decode, is_valid, score, score_code, parse, to_string
from .clues import ClueIndex
from .partition import GuessPartitioner, Partition
from .stats import Stats, compute_stats, combined_stats
from .candidates import CandidateSet
from .core import Engine
from .errors import WordsieveError, ValidationError, RangeError, UnknownWordError

__all__ = [
    "NOWHERE", "ELSEWHERE", "HERE", "ResultTable", "encode", "decode", "is_valid", "score",
    "score_code", "parse", "to_string", "ClueIndex", "GuessPartitioner", "Partition", "Stats",
    "compute_stats", "combined_stats", "CandidateSet", "Engine", "WordsieveError",
    "ValidationError", "RangeError", "UnknownWordError",
]
