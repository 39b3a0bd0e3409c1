"""
Allele frequency calculation for single loci and single genotypes.

Allele frequencies are the building block of nearly every population-genetic
statistic: expected heterozygosity, Nei's Gst/Fst, Hudson's Fst, Jost's D.
This module computes them from a locus' genotypes, from one individual's
genotype, or as an unlabelled frequency vector.

Missing Data:
    Missing genotypes contribute no alleles. When every genotype is missing
    the calculator returns an empty map, while the vector projector returns
    None. Downstream code relies on that distinction ("computed, nothing
    observed" vs "no data"), so the two are kept separate.

Examples:
    >>> from popfreq.stats.frequencies import allele_frequencies, lookup_frequency
    >>>
    >>> allele_frequencies([(1, 2), (2, 2), None])
    {1: 0.25, 2: 0.75}
    >>> allele_frequencies((1, 1, 1, 2))
    {1: 0.75, 2: 0.25}
    >>> lookup_frequency(3, [(1, 2), (2, 2)])
    0.0
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Union

import numpy as np
import pandas as pd

from popfreq.core.genotype import (
    Genotype,
    GenotypeArray,
    is_genotype,
    is_missing,
)

__all__ = [
    'FrequencyMap',
    'allele_frequencies',
    'genotype_frequencies',
    'locus_allele_frequencies',
    'allele_frequency_vector',
    'lookup_frequency',
]

FrequencyMap = dict[int, float]

GenotypeInput = Union[GenotypeArray, Iterable[Optional[Genotype]]]


def _as_array(genotypes: GenotypeInput) -> GenotypeArray:
    if isinstance(genotypes, GenotypeArray):
        return genotypes
    if isinstance(genotypes, pd.Series):
        genotypes = genotypes.values
    return GenotypeArray(genotypes, validate=False)


def _flat_alleles(genotypes: GenotypeInput) -> np.ndarray:
    # int64 regardless of allele_dtype: unvalidated input may exceed the storage width
    array = _as_array(genotypes)
    return np.fromiter(
        (a for g in array.present() for a in g), dtype=np.int64
    )


def genotype_frequencies(genotype: Optional[Genotype]) -> FrequencyMap:
    """
    Allele frequencies within a single genotype.

    Each of the N allele slots contributes 1/N, so an allele present k times
    gets k/N. Used when averaging per-individual contributions.

    Args:
        genotype: Tuple of allele codes, or missing

    Returns:
        Frequency map; empty when the genotype is missing

    Examples:
        >>> genotype_frequencies((101, 104))
        {101: 0.5, 104: 0.5}
        >>> genotype_frequencies((3, 3, 3))
        {3: 1.0}
    """
    if is_missing(genotype):
        return {}

    n = len(genotype)
    counts: dict[int, int] = {}
    for allele in genotype:
        allele = int(allele)
        counts[allele] = counts.get(allele, 0) + 1

    # k / N rather than k additions of 1/N keeps homozygotes exactly 1.0
    return {allele: k / n for allele, k in counts.items()}


def locus_allele_frequencies(genotypes: GenotypeInput) -> FrequencyMap:
    """
    Allele frequencies across all genotypes of one locus.

    Every called genotype is flattened into its alleles; the frequency of an
    allele is its share of all flattened alleles.

    Args:
        genotypes: GenotypeArray or any sequence of genotypes / missing values

    Returns:
        Frequency map summing to 1.0; empty when every genotype is missing
    """
    flat = _flat_alleles(genotypes)
    if flat.size == 0:
        return {}

    codes, counts = np.unique(flat, return_counts=True)
    total = float(flat.size)
    return {int(code): float(count) / total for code, count in zip(codes, counts)}


def allele_frequencies(genotypes: Union[GenotypeInput, Genotype, None]) -> FrequencyMap:
    """
    Allele frequencies of a locus or of a single genotype.

    Dispatches on the input shape:
        - a single genotype (tuple of ints) -> genotype_frequencies()
        - a sequence of genotypes           -> locus_allele_frequencies()
        - missing                           -> {}

    Both paths give identical values for equivalent input: a locus holding
    exactly one genotype has the same frequencies as that genotype.

    Examples:
        >>> allele_frequencies((1, 2))
        {1: 0.5, 2: 0.5}
        >>> allele_frequencies([(1, 2), None, None])
        {1: 0.5, 2: 0.5}
        >>> allele_frequencies([None, None])
        {}
    """
    if is_missing(genotypes):
        return {}
    if is_genotype(genotypes):
        return genotype_frequencies(genotypes)
    return locus_allele_frequencies(genotypes)


def allele_frequency_vector(genotypes: Optional[GenotypeInput]) -> Optional[np.ndarray]:
    """
    Unlabelled allele frequencies of a locus.

    Same values as allele_frequencies() without allele identity, in order of
    first appearance. The order carries no meaning and callers must not
    depend on it. Useful for expected genotype frequencies, where only the
    frequency distribution matters.

    Args:
        genotypes: GenotypeArray or sequence of genotypes, or missing

    Returns:
        float64 vector summing to 1.0, or None when there is no called genotype

    Examples:
        >>> allele_frequency_vector([(2, 1), (1, 1)])
        array([0.25, 0.75])
        >>> allele_frequency_vector([None]) is None
        True
    """
    if is_missing(genotypes):
        return None

    flat = _flat_alleles(genotypes)
    if flat.size == 0:
        return None

    codes, _ = pd.factorize(flat, sort=False)
    counts = np.bincount(codes)
    return counts.astype(np.float64) / float(flat.size)


def lookup_frequency(allele: Any, genotypes: GenotypeInput) -> float:
    """
    Frequency of one allele at a locus, 0.0 if the allele is never observed.

    Examples:
        >>> lookup_frequency(137, [(137, 141), (141, 141)])
        0.25
        >>> lookup_frequency(150, [(137, 141)])
        0.0
    """
    return allele_frequencies(genotypes).get(allele, 0.0)
