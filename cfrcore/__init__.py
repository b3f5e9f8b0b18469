"""Compact bit-level data structures (packed arrays, bitvectors, rank and select) and
read-classification helpers (hit scoring, read-pair merging, result writing)."""

__version__ = "0.1.0"

__all__ = [
    "fixed_size_array",
    "interleaved_array",
    "bitvector",
    "rank",
    "select",
    "classifier",
    "read_merger",
    "result_writer",
]