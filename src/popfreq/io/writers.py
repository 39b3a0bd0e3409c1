"""
CSV writers for allele frequency results.

Frequency maps are nested (locus -> allele -> frequency), so they are
flattened into long-form tables before writing: one row per
locus [x population] x allele. Long form loads directly into R, pandas or
a spreadsheet pivot.

Files are written atomically; an interrupted run never leaves a truncated
CSV behind.

Examples:
    >>> from pathlib import Path
    >>> from popfreq.io.writers import write_frequencies
    >>> from popfreq.stats import table_frequencies
    >>>
    >>> write_frequencies(table_frequencies(table), Path("results/frequencies.csv"))
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Union

import pandas as pd

from popfreq.stats.lookup import frequency_table
from popfreq.utils.fileio import atomic_write_text

__all__ = ['write_frequency_table', 'write_frequencies']

logger = logging.getLogger(__name__)


def write_frequency_table(df: pd.DataFrame, path: Path, float_format: str = '%.6g') -> Path:
    """
    Write a long-form frequency table to CSV.

    Args:
        df: Frame from popfreq.stats.frequency_table()
        path: Output CSV path (parent directories are created)
        float_format: printf-style format for frequencies

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, df.to_csv(index=False, float_format=float_format))
    logger.info(f"Wrote {len(df):,} frequency rows to {path}")
    return path


def write_frequencies(
    frequencies: Union[Mapping[Any, Mapping[int, float]], pd.DataFrame],
    path: Path,
    float_format: str = '%.6g',
) -> Path:
    """
    Flatten frequency maps with frequency_table() and write them to CSV.

    Args:
        frequencies: {locus: FrequencyMap} or the population_frequencies() frame
        path: Output CSV path
        float_format: printf-style format for frequencies
    """
    return write_frequency_table(frequency_table(frequencies), path, float_format=float_format)
