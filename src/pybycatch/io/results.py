"""
Reading and writing simulation outputs.

A run produces three files whose names encode the uncertainty mode and
alpha, e.g. for ``uncertainty='nouncert'`` and ``alpha=0.5``:

- bycatch_results_nouncert_alpha=05.csv          results table
- bycatch_results_nouncert_alpha=05_summary.csv  summary table
- bycatch_results_nouncert_alpha=05_report.json  run report
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Union

import numpy as np
import pandas as pd

from pybycatch.config import SimulationConfig
from pybycatch.core.constants import RESULT_COLUMNS, SUMMARY_KEY_COLUMNS


def output_paths(
    config: SimulationConfig, output_dir: Union[str, Path] = ""
) -> Dict[str, Path]:
    """Paths of the results, summary and report files of a run."""
    output_dir = Path(output_dir)
    stem = config.file_stem
    return {
        "results": output_dir / f"{stem}.csv",
        "summary": output_dir / f"{stem}_summary.csv",
        "report": output_dir / f"{stem}_report.json",
    }


def _check_columns(df: pd.DataFrame, required, what: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{what} table is missing columns: {missing}")


def write_results(results: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write the results table with its stable column order."""
    _check_columns(results, RESULT_COLUMNS, "Results")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    results[list(RESULT_COLUMNS)].to_csv(path, index=False)
    return path


def read_results(path: Union[str, Path]) -> pd.DataFrame:
    """Read a results table written by ``write_results``."""
    df = pd.read_csv(
        path,
        dtype={"species": str, "policy": str, "draw": np.int64, "resample": np.int64},
    )
    _check_columns(df, RESULT_COLUMNS, "Results")
    return df[list(RESULT_COLUMNS)]


def write_summary(summary: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write the summary table."""
    _check_columns(summary, SUMMARY_KEY_COLUMNS, "Summary")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    summary.to_csv(path, index=False)
    return path


def read_summary(path: Union[str, Path]) -> pd.DataFrame:
    """Read a summary table written by ``write_summary``."""
    df = pd.read_csv(path, dtype={"species": str, "policy": str})
    _check_columns(df, SUMMARY_KEY_COLUMNS, "Summary")
    return df


def write_report(report, path: Union[str, Path]) -> Path:
    """Write a run report (object with ``to_dict()`` or a dict) as JSON."""
    data = report.to_dict() if hasattr(report, "to_dict") else dict(report)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


def read_report(path: Union[str, Path]) -> dict:
    """Read a run report written by ``write_report``."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_run(run, summary: pd.DataFrame, config: SimulationConfig,
              output_dir: Union[str, Path] = "") -> Dict[str, Path]:
    """Persist results, summary and report of a run.

    Parameters
    ----------
    run : RunResult
        Output of ``run_simulation``
    summary : pd.DataFrame
        Output of ``summarize_results``
    config : SimulationConfig
        Run parameters, used for the file names
    output_dir : str or Path
        Directory for the three files

    Returns
    -------
    dict
        'results', 'summary' and 'report' paths
    """
    paths = output_paths(config, output_dir)
    write_results(run.results, paths["results"])
    write_summary(summary, paths["summary"])
    write_report(run.report, paths["report"])
    return paths
