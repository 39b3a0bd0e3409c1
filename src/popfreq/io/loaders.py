"""
Delimited-text loader for genotype data.

Reads wide genotype tables (one row per sample, one column per locus) into
a GenotypeTable. Genepop, Structure and VCF inputs are expected to be
converted upstream; anything that can be exported as a delimited table
loads here.

Expected layout:
```
name,population,fca8,fca23
N215,north,135143,136146
N216,north,133135,000000
N217,south,135135,-9
```

Engineering Design:
    - Delimiter sniffed unless the format fixes it
    - Every value read as text, then parsed with the format's genotype encoding
    - Fail fast with row/locus context on unparseable genotypes
    - Recoverable quirks (duplicate sample rows) produce UserWarnings

Examples:
    >>> from pathlib import Path
    >>> from popfreq.io.loaders import load_genotypes
    >>>
    >>> table = load_genotypes(Path("nancycats.csv"), format="microsatellite_csv")
    >>> print(f"Loaded {table.n_samples} samples x {table.n_loci} loci")
    Loaded 237 samples x 9 loci
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from popfreq.core.genotype import GenotypeError
from popfreq.core.table import GenotypeTable
from popfreq.io.formats import PRESETS, DataFormat, sniff_delimiter, suggest_format

__all__ = ['load_genotypes', 'resolve_format']

logger = logging.getLogger(__name__)


def resolve_format(
    path: Path,
    format: Union[str, DataFormat, None] = None,
    infer_format: bool = True,
) -> DataFormat:
    """
    Turn a preset name, DataFormat or None into a DataFormat.

    Raises:
        KeyError: If format is an unknown preset name
    """
    if format is None:
        if infer_format:
            preset_name, fmt = suggest_format(path)
            logger.info(f"Auto-detected format: {preset_name} ({fmt.name})")
            return fmt
        return PRESETS['generic_csv']

    if isinstance(format, str):
        if format not in PRESETS:
            raise KeyError(
                f"Unknown format preset: '{format}'. "
                f"Available: {list(PRESETS.keys())}"
            )
        return PRESETS[format]

    return format


def load_genotypes(
    path: Path,
    format: Union[str, DataFormat, None] = None,
    infer_format: bool = True,
    loci: Optional[list[str]] = None,
) -> GenotypeTable:
    """
    Load a wide delimited genotype file into a GenotypeTable.

    Args:
        path: Path to data file (CSV, TSV, ...)
        format: One of:
            - None: Auto-detect (delimiter and genotype encoding)
            - str: Preset name (e.g. 'microsatellite_csv', 'snp_tsv')
            - DataFormat: Custom format configuration
        infer_format: If True and format is None, attempt to suggest format
        loci: Restrict to these locus columns (default: all non-identifier columns)

    Returns:
        GenotypeTable with one row per sample x locus, in file order
        (locus-major)

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is empty, lacks identifier columns, or holds
            an unparseable genotype
        KeyError: If preset name is not recognized

    Examples:
        >>> table = load_genotypes("snps.tsv", format="snp_tsv")
        >>>
        >>> from popfreq.io.formats import DataFormat
        >>> fmt = DataFormat(delimiter=';', population_col='site', digits=2)
        >>> table = load_genotypes("samples.txt", format=fmt)
    """
    if not isinstance(path, Path):
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Genotype file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    fmt = resolve_format(path, format, infer_format)

    delimiter = fmt.delimiter
    if delimiter is None:
        delimiter = sniff_delimiter(path)
        logger.debug(f"Sniffed delimiter: {repr(delimiter)}")

    try:
        df = pd.read_csv(
            path,
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skiprows=fmt.skip_rows,
            encoding=fmt.encoding,
        )
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"Genotype file is empty: {path}") from e
    except Exception as e:
        raise ValueError(f"Failed to read genotype file {path}: {e}") from e

    if df.empty:
        raise ValueError(f"Genotype file contains no samples: {path}")

    df.columns = [str(c).strip() for c in df.columns]
    logger.info(f"Raw data: {df.shape[0]} rows x {df.shape[1]} columns")

    id_cols = [fmt.name_col, fmt.population_col]
    missing_cols = [c for c in id_cols if c not in df.columns]
    if missing_cols:
        raise ValueError(
            f"Genotype file {path} lacks identifier columns {missing_cols}. "
            f"Found columns: {list(df.columns)[:10]}"
        )

    if df[fmt.name_col].duplicated().any():
        n_duplicates = int(df[fmt.name_col].duplicated().sum())
        warnings.warn(
            f"Found {n_duplicates} duplicate sample names. "
            "Using first occurrence of each.",
            UserWarning
        )
        df = df[~df[fmt.name_col].duplicated(keep='first')]

    locus_cols = [
        c for c in df.columns
        if c not in id_cols and not fmt.should_drop_column(c)
    ]
    if loci is not None:
        unknown = [c for c in loci if c not in locus_cols]
        if unknown:
            raise ValueError(f"Requested loci not found in {path}: {unknown}")
        locus_cols = list(loci)

    if not locus_cols:
        raise ValueError(f"Genotype file contains no locus columns: {path}")

    long = df.melt(
        id_vars=id_cols,
        value_vars=locus_cols,
        var_name='locus',
        value_name='raw',
    ).rename(columns={fmt.name_col: 'name', fmt.population_col: 'population'})

    genotypes = []
    for row in long.itertuples(index=False):
        try:
            genotypes.append(fmt.parse(row.raw))
        except GenotypeError as e:
            raise ValueError(
                f"Unparseable genotype for sample '{row.name}' at locus '{row.locus}': {e}"
            ) from e
    long['genotype'] = pd.Series(genotypes, index=long.index, dtype=object)

    try:
        table = GenotypeTable(
            long[['name', 'population', 'locus', 'genotype']],
            allele_dtype=np.dtype(fmt.allele_dtype),
        )
    except GenotypeError as e:
        raise ValueError(f"Failed to create GenotypeTable from {path}: {e}") from e

    logger.info(
        f"Loaded {table.n_samples:,} samples x {table.n_loci:,} loci "
        f"in {table.n_populations} populations ({fmt.name})"
    )

    return table
