"""
Allele frequency statistics.

Frequency primitives consumed by diversity and differentiation statistics:

    allele_frequencies        Allele -> frequency for a locus or one genotype
    allele_frequency_vector   Unlabelled frequencies (None when all missing)
    lookup_frequency          Frequency of one allele, 0.0 if unobserved
    average_frequencies       Mean across populations, raised to a power
    locus_frequencies         One locus of a GenotypeTable, pooled or per population
    table_frequencies         Every locus of a GenotypeTable
    mean_frequencies          Per-locus cross-population means
"""

from popfreq.stats.aggregate import average_frequencies, pairwise_average_frequencies
from popfreq.stats.frequencies import (
    FrequencyMap,
    allele_frequencies,
    allele_frequency_vector,
    genotype_frequencies,
    locus_allele_frequencies,
    lookup_frequency,
)
from popfreq.stats.lookup import (
    frequency_table,
    locus_frequencies,
    mean_frequencies,
    population_frequencies,
    table_frequencies,
)

__all__ = [
    'FrequencyMap',
    'allele_frequencies',
    'allele_frequency_vector',
    'genotype_frequencies',
    'locus_allele_frequencies',
    'lookup_frequency',
    'average_frequencies',
    'pairwise_average_frequencies',
    'locus_frequencies',
    'table_frequencies',
    'population_frequencies',
    'mean_frequencies',
    'frequency_table',
]
