"""
Pytest configuration and shared fixtures.

This module provides genotype data generators and shared fixtures for all test suites.
"""

import numpy as np
import pandas as pd
import pytest

from popfreq.core.table import GenotypeTable


def generate_synthetic_genotype_table(
    n_samples: int,
    n_loci: int,
    n_populations: int = 3,
    ploidy: int = 2,
    n_alleles: int = 5,
    missing_fraction: float = 0.05,
    seed: int = 42,
) -> GenotypeTable:
    """
    Generate a synthetic genotype table with population structure.

    Args:
        n_samples: Number of samples (spread round-robin over populations)
        n_loci: Number of loci
        n_populations: Number of populations
        ploidy: Alleles per genotype
        n_alleles: Distinct alleles per locus (codes 100, 102, ...)
        missing_fraction: Fraction of calls set to missing
        seed: Random seed for reproducibility

    Design:
        - Each population draws alleles from its own Dirichlet frequencies,
          so populations differ as they would under drift
        - Missing calls are scattered uniformly at random
    """
    rng = np.random.RandomState(seed)
    codes = np.arange(100, 100 + 2 * n_alleles, 2)

    pop_freqs = {
        (pop, locus): rng.dirichlet(np.ones(n_alleles))
        for pop in range(n_populations)
        for locus in range(n_loci)
    }

    rows = []
    for locus in range(n_loci):
        for sample in range(n_samples):
            pop = sample % n_populations
            if rng.rand() < missing_fraction:
                genotype = None
            else:
                draws = rng.choice(codes, size=ploidy, p=pop_freqs[(pop, locus)])
                genotype = tuple(int(a) for a in draws)
            rows.append({
                'name': f"ind{sample:03d}",
                'population': f"pop{pop}",
                'locus': f"loc{locus:02d}",
                'genotype': genotype,
            })

    return GenotypeTable(pd.DataFrame(rows))


@pytest.fixture
def small_table():
    """Two populations, two loci, hand-checkable frequencies.

    locA: north (1,2) (2,2) | south (1,1) missing
    locB: north (5,5) missing | south missing missing
    """
    return GenotypeTable.from_records([
        ("n1", "north", "locA", (1, 2)),
        ("n2", "north", "locA", (2, 2)),
        ("s1", "south", "locA", (1, 1)),
        ("s2", "south", "locA", None),
        ("n1", "north", "locB", (5, 5)),
        ("n2", "north", "locB", None),
        ("s1", "south", "locB", None),
        ("s2", "south", "locB", None),
    ])


@pytest.fixture
def synthetic_table():
    """Moderately sized random table (60 samples x 12 loci, 3 populations)."""
    return generate_synthetic_genotype_table(n_samples=60, n_loci=12)


@pytest.fixture
def microsatellite_csv(tmp_path):
    """Wide microsatellite CSV with 3-digit alleles and assorted missing codes."""
    path = tmp_path / "cats.csv"
    path.write_text(
        "name,population,fca8,fca23\n"
        "N215,1,135143,136146\n"
        "N216,1,133135,000000\n"
        "N217,2,135135,0\n"
        "N218,2,143143,136136\n"
    )
    return path


@pytest.fixture
def snp_tsv(tmp_path):
    """Wide SNP TSV with separated single-digit alleles."""
    path = tmp_path / "snps.tsv"
    path.write_text(
        "name\tpopulation\trs1\trs2\n"
        "a1\tA\t1/2\t2|2\n"
        "a2\tA\t1/1\t-9\n"
        "b1\tB\t2/2\t1/2\n"
    )
    return path
