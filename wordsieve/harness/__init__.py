from .core import run_case, run_batch, rank_table, scan_pairs, scan_triples
from .io import write_csv, write_games_csv, write_manifest

__all__ = ["run_case", "run_batch", "rank_table", "scan_pairs", "scan_triples",
           "write_csv", "write_games_csv", "write_manifest"]
