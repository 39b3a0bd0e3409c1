"""
Cross-population averaging of allele frequency maps.

Differentiation statistics compare allele frequencies across populations
through their mean and higher moments: Nei's Hs/Ht use the mean of squared
frequencies, pairwise Fst the mean of two populations. This module reduces
a collection of per-population FrequencyMaps (for one locus) into a single
averaged map, optionally raised to an integer power.

Algorithm:
    1. Drop empty maps (populations with no called genotype at the locus)
    2. Collect the union of alleles over the remaining maps
    3. For each allele, sum its frequency over every remaining map, treating
       an absent allele as 0.0, and divide by the number of remaining maps
    4. Raise the mean to `power`
    5. Drop alleles whose result is exactly zero

Note on step 3:
    A population lacking an allele still counts towards that allele's
    denominator. Downstream statistics depend on this count;
    see DESIGN.md before changing it.

Examples:
    >>> from popfreq.stats.aggregate import average_frequencies
    >>>
    >>> average_frequencies([{1: 1.0}, {1: 0.5, 2: 0.5}])
    {1: 0.75, 2: 0.25}
    >>> average_frequencies([{1: 1.0}, {2: 1.0}], power=2)
    {1: 0.25, 2: 0.25}
    >>> average_frequencies([{}, {1: 1.0}])
    {1: 1.0}
"""

from __future__ import annotations

from typing import Mapping, Sequence, Union

import numpy as np

__all__ = ['average_frequencies', 'pairwise_average_frequencies']

FrequencyMaps = Union[Sequence[Mapping[int, float]], tuple[Mapping[int, float], Mapping[int, float]]]


def _check_power(power: int) -> None:
    if isinstance(power, bool) or not isinstance(power, (int, np.integer)):
        raise TypeError(f"power must be an integer, got {type(power).__name__}")
    if power < 0:
        raise ValueError(f"power must be non-negative, got {power}")


def _average(frequency_maps: Sequence[Mapping[int, float]], power: int) -> dict[int, float]:
    """Shared implementation behind the list and pairwise entry points."""
    nonempty = [freqs for freqs in frequency_maps if len(freqs) > 0]

    all_alleles: dict[int, None] = {}
    for freqs in nonempty:
        for allele in freqs:
            all_alleles.setdefault(allele, None)

    # allele -> (frequency sum, participating groups); local accumulator
    sums: dict[int, tuple[float, int]] = {}
    for allele in all_alleles:
        for freqs in nonempty:
            freq_sum, n = sums.get(allele, (0.0, 0))
            sums[allele] = (freq_sum + float(freqs.get(allele, 0.0)), n + 1)

    averaged: dict[int, float] = {}
    for allele, (freq_sum, n) in sums.items():
        avg = (freq_sum / n) ** power
        if avg != 0.0:
            averaged[allele] = avg

    return averaged


def average_frequencies(frequency_maps: FrequencyMaps, power: int = 1) -> dict[int, float]:
    """
    Average allele frequencies across groups, raised to `power`.

    Args:
        frequency_maps: One FrequencyMap per population (or other grouping)
            for a single locus. A list of any length, or a pair as a tuple.
            Empty maps are ignored. Inputs are not modified.
        power: Exponent applied to each averaged frequency (default 1).
            power=2 gives the mean squared frequency used by Nei's statistics.

    Returns:
        Map of allele -> (mean frequency) ** power, without zero entries.
        Empty when every input map is empty.

    Raises:
        TypeError: If power is not an integer
        ValueError: If power is negative

    Examples:
        >>> # Two populations at locus fca8
        >>> pop1 = {135: 0.5, 143: 0.5}
        >>> pop2 = {135: 1.0}
        >>> average_frequencies([pop1, pop2])
        {135: 0.75, 143: 0.25}
        >>> sum(average_frequencies([pop1, pop2], power=2).values())
        0.625
    """
    _check_power(power)
    return _average(list(frequency_maps), int(power))


def pairwise_average_frequencies(
    pair: tuple[Mapping[int, float], Mapping[int, float]],
    power: int = 1,
) -> dict[int, float]:
    """
    Average allele frequencies of exactly two groups.

    Same algorithm as average_frequencies(); used for two-population
    comparisons such as pairwise Nei Fst.

    Raises:
        ValueError: If pair does not hold exactly two maps
    """
    if len(pair) != 2:
        raise ValueError(f"Expected a pair of frequency maps, got {len(pair)}")
    _check_power(power)
    return _average(tuple(pair), int(power))
