"""
I/O module for loading genotype data and writing frequency results.

Key Functions:
    - load_genotypes: Load a wide delimited genotype file into a GenotypeTable
    - write_frequencies: Write frequency maps as a long-form CSV
    - write_frequency_table: Write an already flattened frequency table

Supported Formats:
    - Delimited text (CSV/TSV) with presets for microsatellite and SNP coding
    - Genepop, Structure and VCF are converted upstream

Examples:
    >>> from popfreq.io import load_genotypes, write_frequencies
    >>> from popfreq.stats import table_frequencies
    >>>
    >>> table = load_genotypes("nancycats.csv", format="microsatellite_csv")
    >>> write_frequencies(table_frequencies(table), "results/frequencies.csv")
"""

from popfreq.io.formats import PRESETS, DataFormat, sniff_delimiter, suggest_format
from popfreq.io.loaders import load_genotypes, resolve_format
from popfreq.io.writers import write_frequencies, write_frequency_table

__all__ = [
    'DataFormat',
    'PRESETS',
    'sniff_delimiter',
    'suggest_format',
    'load_genotypes',
    'resolve_format',
    'write_frequencies',
    'write_frequency_table',
]
