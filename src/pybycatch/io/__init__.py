"""
I/O module for PyBycatch.

Contains helpers for parsing input tables and for persisting the results,
summary and report files of a simulation run.
"""

from pybycatch.io.utils import (
    safe_float,
    normalize_code,
    split_codes,
)

from pybycatch.io.results import (
    output_paths,
    write_results,
    read_results,
    write_summary,
    read_summary,
    write_report,
    read_report,
    write_run,
)

__all__ = [
    # Parsing
    "safe_float",
    "normalize_code",
    "split_codes",
    # Outputs
    "output_paths",
    "write_results",
    "read_results",
    "write_summary",
    "read_summary",
    "write_report",
    "read_report",
    "write_run",
]
