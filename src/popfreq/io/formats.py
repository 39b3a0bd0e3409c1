"""
Format configuration for delimited genotype files.

Design philosophy: **auto-detect what's safe, require explicit config for
ambiguous cases**. The delimiter can be sniffed reliably; how a genotype
token splits into alleles ("101104" = 101/104 or 10/1104?) cannot, so allele
width and separator live in an explicit DataFormat, with presets for the
common layouts.

Expected layout (wide, one row per sample):
```
name,population,fca8,fca23,fca43
N215,1,135143,136146,141145
N216,1,133135,0,139139
```

Examples:
    >>> from popfreq.io.formats import DataFormat, PRESETS
    >>>
    >>> fmt = PRESETS['microsatellite_csv']
    >>> fmt.parse("135143")
    (135, 143)
    >>>
    >>> # Tetraploid SNP calls with a custom population column
    >>> fmt = DataFormat(
    ...     name="Tetraploid SNP TSV",
    ...     delimiter='\\t',
    ...     population_col='site',
    ...     ploidy=4,
    ...     allele_sep='/',
    ... )
"""

from __future__ import annotations

import csv
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

from popfreq.core.genotype import (
    DEFAULT_ALLELE_DTYPE,
    MISSING_TOKENS,
    Genotype,
    parse_genotype,
)

__all__ = [
    'DataFormat',
    'PRESETS',
    'sniff_delimiter',
    'suggest_format',
]


@dataclass
class DataFormat:
    """
    Configuration for loading wide delimited genotype files.

    Attributes:
        name: Human-readable format name
        delimiter: Column delimiter (None = sniff from '\\t', ',', ';')
        name_col: Column holding sample names
        population_col: Column holding population labels
        ploidy: Alleles per genotype
        digits: Width of each allele in unseparated tokens (None = infer)
        allele_sep: Allele separator within a token (None = any of / | , : ;)
        drop_columns: Non-locus columns to ignore (e.g. ['latitude'])
        drop_columns_pattern: Regex for non-locus columns to ignore
        encoding: File encoding
        skip_rows: Rows to skip before the header
        missing_tokens: Tokens meaning "no call"
        allele_dtype: numpy dtype name for allele storage ('int8', 'int16', 'int32')
    """

    name: str = "Unknown Format"

    # Structural
    delimiter: Optional[str] = None
    name_col: str = 'name'
    population_col: str = 'population'
    encoding: str = 'utf-8'
    skip_rows: int = 0

    # Genotype encoding
    ploidy: int = 2
    digits: Optional[int] = None
    allele_sep: Optional[str] = None
    missing_tokens: frozenset[str] = field(default_factory=lambda: MISSING_TOKENS)
    allele_dtype: str = DEFAULT_ALLELE_DTYPE.__name__

    # Column filtering
    drop_columns: list[str] = field(default_factory=list)
    drop_columns_pattern: Optional[str] = None

    def __post_init__(self):
        if self.ploidy < 1:
            raise ValueError(f"ploidy must be >= 1, got {self.ploidy}")
        if self.digits is not None and self.digits < 1:
            raise ValueError(f"digits must be >= 1, got {self.digits}")
        if self.drop_columns_pattern:
            try:
                re.compile(self.drop_columns_pattern)
            except re.error as e:
                raise ValueError(f"Invalid drop_columns_pattern regex: {e}")

    def parse(self, token: Any) -> Optional[Genotype]:
        """Parse one genotype token with this format's encoding."""
        return parse_genotype(
            token,
            ploidy=self.ploidy,
            digits=self.digits,
            sep=self.allele_sep,
            missing_tokens=self.missing_tokens,
        )

    def should_drop_column(self, col_name: str) -> bool:
        """Check if column should be excluded from the loci."""
        if col_name in self.drop_columns:
            return True
        if self.drop_columns_pattern:
            if re.search(self.drop_columns_pattern, col_name):
                return True
        return False


# =============================================================================
# Format Presets
# =============================================================================

PRESETS: dict[str, DataFormat] = {
    # Diploid microsatellites, 3 digits per allele, no separator: 135143
    'microsatellite_csv': DataFormat(
        name="Microsatellite CSV",
        delimiter=',',
        digits=3,
    ),

    # Biallelic SNPs coded 1/2 with a separator: 1/2, 2|2
    'snp_tsv': DataFormat(
        name="SNP TSV",
        delimiter='\t',
        digits=1,
        allele_dtype='int8',
    ),

    'generic_tsv': DataFormat(
        name="Generic TSV",
        delimiter='\t',
    ),

    'generic_csv': DataFormat(
        name="Generic CSV",
        delimiter=',',
    ),
}


# =============================================================================
# Utility Functions
# =============================================================================

def sniff_delimiter(path: Path, sample_size: int = 8192) -> str:
    """
    Auto-detect delimiter from file content.

    Uses Python's csv.Sniffer with fallback heuristics.

    Args:
        path: Path to data file
        sample_size: Bytes to sample for detection

    Returns:
        Detected delimiter character ('\\t', ',', or ';')

    Raises:
        ValueError: If delimiter cannot be determined
    """
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        sample = f.read(sample_size)

    # Genotype tokens may contain '/' or '|', so only trust the sniffer
    # for column delimiters that never appear inside a token
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters='\t,;')
        return dialect.delimiter
    except csv.Error:
        pass

    first_line = sample.split('\n')[0]
    counts = {
        '\t': first_line.count('\t'),
        ',': first_line.count(','),
        ';': first_line.count(';'),
    }

    if max(counts.values()) == 0:
        raise ValueError(
            f"Could not detect delimiter in {path}. "
            "Please specify explicitly with format.delimiter"
        )

    return max(counts, key=counts.get)


def suggest_format(path: Path) -> tuple[str, DataFormat]:
    """
    Suggest a format preset from the first data row.

    Separated tokens with single-digit alleles ("1/2") suggest snp_tsv
    (re-delimited if needed); six-digit unseparated tokens suggest
    microsatellite_csv; anything else falls back to the generic preset for
    the sniffed delimiter.

    Note:
        This is a convenience for exploration. For production pipelines,
        explicitly specify the format configuration.
    """
    delimiter = sniff_delimiter(path)

    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        f.readline()
        first_data = f.readline().strip()

    tokens = [t.strip() for t in first_data.split(delimiter)[2:] if t.strip()]
    generic = 'generic_tsv' if delimiter == '\t' else 'generic_csv'

    if not tokens:
        return (generic, PRESETS[generic])

    if all(re.fullmatch(r'\d[/|]\d', t) for t in tokens):
        fmt = PRESETS['snp_tsv']
        if delimiter != fmt.delimiter:
            fmt = replace(fmt, delimiter=delimiter, name="SNP (Custom)")
        return ('snp_tsv', fmt)

    if all(re.fullmatch(r'\d{6}', t) for t in tokens):
        fmt = PRESETS['microsatellite_csv']
        if delimiter != fmt.delimiter:
            fmt = replace(fmt, delimiter=delimiter, name="Microsatellite (Custom)")
        return ('microsatellite_csv', fmt)

    return (generic, PRESETS[generic])
