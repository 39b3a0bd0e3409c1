"""
popfreq - Allele frequency engine for population-genetic genotype data.

Holds genotype calls (sample x locus, tagged with population) in an
immutable table and computes the allele frequency primitives used by
diversity and differentiation statistics.
"""

__version__ = "0.1.0"

from popfreq.core.genotype import GenotypeArray, GenotypeError, PloidyError
from popfreq.core.table import GenotypeTable
from popfreq.stats.aggregate import average_frequencies, pairwise_average_frequencies
from popfreq.stats.frequencies import (
    allele_frequencies,
    allele_frequency_vector,
    lookup_frequency,
)
from popfreq.stats.lookup import (
    locus_frequencies,
    mean_frequencies,
    population_frequencies,
    frequency_table,
    table_frequencies,
)

__all__ = [
    "GenotypeArray",
    "GenotypeTable",
    "GenotypeError",
    "PloidyError",
    "allele_frequencies",
    "allele_frequency_vector",
    "lookup_frequency",
    "average_frequencies",
    "pairwise_average_frequencies",
    "locus_frequencies",
    "table_frequencies",
    "population_frequencies",
    "mean_frequencies",
    "frequency_table",
]
