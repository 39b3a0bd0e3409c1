"""
Table-level allele frequency lookups.

Thin orchestration over GenotypeTable: group rows by locus and/or population
and delegate to the frequency calculator and the cross-population
aggregator. Every locus is independent, so whole-table helpers can fan loci
out to a thread pool; each task reads one locus group and returns a private
result, and results are merged in locus order.

Examples:
    >>> from popfreq.stats.lookup import locus_frequencies, mean_frequencies
    >>>
    >>> locus_frequencies(table, "fca8")
    {135: 0.31, 143: 0.69}
    >>> locus_frequencies(table, "fca8", population=True)
    {'pop1': {135: 0.5, 143: 0.5}, 'pop2': {143: 1.0}}
    >>> mean_frequencies(table, power=2)["fca8"]
    {135: 0.0625, 143: 0.5625}
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

import pandas as pd

from popfreq.core.genotype import GenotypeArray
from popfreq.core.table import GenotypeTable
from popfreq.stats.aggregate import average_frequencies
from popfreq.stats.frequencies import FrequencyMap, allele_frequencies

__all__ = [
    'locus_frequencies',
    'table_frequencies',
    'population_frequencies',
    'mean_frequencies',
    'frequency_table',
]

logger = logging.getLogger(__name__)

T = TypeVar('T')


def _map_loci(
    groups: list[tuple[Any, T]],
    func: Callable[[T], Any],
    workers: Optional[int],
) -> dict[Any, Any]:
    """Apply func to each locus group, serially or on a thread pool, keeping order."""
    if workers is not None and workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    if not workers or workers == 1 or len(groups) < 2:
        return {locus: func(item) for locus, item in groups}

    logger.debug(f"Computing {len(groups)} loci on {workers} threads")
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [(locus, executor.submit(func, item)) for locus, item in groups]
        return {locus: future.result() for locus, future in futures}


def locus_frequencies(
    table: GenotypeTable,
    locus: Any,
    population: bool = False,
) -> Union[FrequencyMap, dict[Any, FrequencyMap]]:
    """
    Allele frequencies of one locus, pooled or per population.

    Args:
        table: Genotype table
        locus: Locus identifier
        population: If True, return one map per population

    Returns:
        FrequencyMap for the locus across all populations, or
        {population: FrequencyMap} in order of first appearance.
        Populations with no called genotype map to {}.

    Raises:
        KeyError: If the locus is not in the table
    """
    if locus not in table.ploidy:
        raise KeyError(f"Locus not found: {locus!r}")

    subset = table.select_loci([locus])
    if not population:
        return allele_frequencies(subset.genotypes())

    return {
        pop: allele_frequencies(genotypes)
        for pop, genotypes in subset.groupby('population')
    }


def table_frequencies(
    table: GenotypeTable,
    workers: Optional[int] = None,
) -> dict[Any, FrequencyMap]:
    """
    Global allele frequencies of every locus.

    Args:
        table: Genotype table
        workers: Threads to spread loci over (None or 1 = serial)

    Returns:
        {locus: FrequencyMap} in locus order
    """
    groups = list(table.groupby('locus'))
    logger.info(f"Computing allele frequencies for {len(groups)} loci")
    return _map_loci(groups, allele_frequencies, workers)


def population_frequencies(table: GenotypeTable) -> pd.DataFrame:
    """
    Allele frequencies of every locus x population group.

    Returns:
        DataFrame with columns locus, population, frequencies (one
        FrequencyMap per row), in order of first appearance
    """
    rows = [
        {'locus': locus, 'population': pop, 'frequencies': allele_frequencies(genotypes)}
        for (locus, pop), genotypes in table.groupby(['locus', 'population'])
    ]
    return pd.DataFrame(rows, columns=['locus', 'population', 'frequencies'])


def _locus_mean(power: int) -> Callable[[list[GenotypeArray]], FrequencyMap]:
    def compute(population_genotypes: list[GenotypeArray]) -> FrequencyMap:
        return average_frequencies(
            [allele_frequencies(g) for g in population_genotypes], power=power
        )
    return compute


def mean_frequencies(
    table: GenotypeTable,
    power: int = 1,
    workers: Optional[int] = None,
) -> dict[Any, FrequencyMap]:
    """
    Per-locus mean of population allele frequencies, raised to `power`.

    For each locus, allele frequencies are computed per population and
    averaged with average_frequencies(). Populations with no called
    genotype at a locus do not take part in that locus' average.

    Args:
        table: Genotype table
        power: Exponent for the averaged frequencies (2 for Nei's Hs/Ht)
        workers: Threads to spread loci over (None or 1 = serial)

    Returns:
        {locus: AggregateFrequencyMap} in locus order

    Examples:
        >>> # Sum of squared mean frequencies per locus (Nei's J_T)
        >>> jt = {locus: sum(f.values()) for locus, f in mean_frequencies(table, power=2).items()}
    """
    by_locus: dict[Any, list[GenotypeArray]] = {}
    for (locus, _pop), genotypes in table.groupby(['locus', 'population']):
        by_locus.setdefault(locus, []).append(genotypes)

    logger.info(
        f"Averaging allele frequencies over {table.n_populations} populations "
        f"for {len(by_locus)} loci (power={power})"
    )
    return _map_loci(list(by_locus.items()), _locus_mean(power), workers)


def frequency_table(
    frequencies: Union[Mapping[Any, FrequencyMap], pd.DataFrame],
) -> pd.DataFrame:
    """
    Long-form table of allele frequencies for writing or inspection.

    Args:
        frequencies: Either {locus: FrequencyMap} (from table_frequencies or
            mean_frequencies) or the frame returned by population_frequencies

    Returns:
        DataFrame with columns locus, [population,] allele, frequency;
        alleles sorted within each group
    """
    if isinstance(frequencies, pd.DataFrame):
        rows = [
            {'locus': row.locus, 'population': row.population,
             'allele': allele, 'frequency': freq}
            for row in frequencies.itertuples(index=False)
            for allele, freq in sorted(row.frequencies.items())
        ]
        columns = ['locus', 'population', 'allele', 'frequency']
    else:
        rows = [
            {'locus': locus, 'allele': allele, 'frequency': freq}
            for locus, freqs in frequencies.items()
            for allele, freq in sorted(freqs.items())
        ]
        columns = ['locus', 'allele', 'frequency']

    df = pd.DataFrame(rows, columns=columns)
    df['allele'] = df['allele'].astype('int64')
    df['frequency'] = df['frequency'].astype('float64')
    return df
