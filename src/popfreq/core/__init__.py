"""
Core data structures for genotype data.

1. Genotype / GenotypeArray: allele-code tuples and per-locus genotype sequences
2. GenotypeTable: immutable long-format table of (name, population, locus, genotype)

Design Philosophy:
    - Immutability: operations return new instances or read-only views
    - Explicit missing data: None, never a sentinel allele
    - Validation at construction: ploidy and identifiers checked once

Examples:
    >>> from popfreq.core import GenotypeArray, GenotypeTable
    >>>
    >>> locus = GenotypeArray([(1, 2), None, (2, 2)])
    >>> table = GenotypeTable.from_records([("a", "p1", "L1", (1, 2))])
"""

from popfreq.core.genotype import (
    Genotype,
    GenotypeArray,
    GenotypeError,
    PloidyError,
    alleles,
    is_missing,
    parse_genotype,
)
from popfreq.core.table import GenotypeTable

__all__ = [
    'Genotype',
    'GenotypeArray',
    'GenotypeError',
    'PloidyError',
    'GenotypeTable',
    'alleles',
    'is_missing',
    'parse_genotype',
]
