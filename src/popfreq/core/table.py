"""
Core data structure for population genotype data.

GenotypeTable holds one row per (sample, locus) call, tagged with the
sample's population, and is the single source of truth for every frequency
computation in the package.

Biological Context:
    Population-genetic datasets are naturally "long":
    - Rows = one genotype call (sample x locus)
    - Columns = name, population, locus, genotype

    Statistics are computed per locus, per population, or per
    locus x population group, so the table must group cheaply and
    reproducibly, and must carry missing calls explicitly.

Engineering Design:
    - Immutable: selection returns new instances, grouping yields read-only
      GenotypeArray views; the backing frame is never modified in place
    - Validated: constructor checks columns, identifiers, duplicate calls
      and per-locus ploidy
    - Stable grouping: groups come out in order of first appearance and
      keep row order within each group

Examples:
    >>> from popfreq.core.table import GenotypeTable
    >>>
    >>> table = GenotypeTable.from_records([
    ...     ("ind1", "north", "locA", (101, 104)),
    ...     ("ind2", "north", "locA", (101, 101)),
    ...     ("ind3", "south", "locA", None),
    ... ])
    >>> table.loci
    Index(['locA'], dtype='object')
    >>> for (locus, population), genotypes in table.groupby(["locus", "population"]):
    ...     print(locus, population, len(genotypes))
    locA north 2
    locA south 1
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Optional, Sequence, Union

import numpy as np
import pandas as pd

from popfreq.core.genotype import (
    DEFAULT_ALLELE_DTYPE,
    GenotypeArray,
    PloidyError,
    normalize_genotype,
)

__all__ = ['GenotypeTable', 'COLUMNS', 'GROUP_KEYS']

COLUMNS = ('name', 'population', 'locus', 'genotype')
GROUP_KEYS = ('name', 'population', 'locus')

Selector = Union[Iterable[Any], Callable[[Any], bool]]


class GenotypeTable:
    """
    Immutable container for genotype calls + sample/population/locus labels.

    Attributes:
        genodata: Long-format frame with columns name, population, locus, genotype
        loci: Locus identifiers in order of first appearance
        populations: Population identifiers in order of first appearance
        samples: Sample names in order of first appearance
        allele_dtype: numpy integer dtype for allele codes

    Shape Invariants:
        - Each (name, locus) pair occurs at most once
        - Present genotypes at a locus share one ploidy
        - name, population and locus are never missing

    Design Principles:
        1. Immutability: all operations return new instances or views
        2. Validation: constructor ensures consistency
        3. Stable order: grouping preserves row order
    """

    def __init__(
        self,
        genodata: pd.DataFrame,
        allele_dtype: Any = DEFAULT_ALLELE_DTYPE,
        validate: bool = True,
    ):
        """
        Initialize GenotypeTable with validation.

        Args:
            genodata: DataFrame with columns name, population, locus, genotype.
                Genotypes are tuples of ints or missing (None/NA/NaN).
            allele_dtype: Storage dtype for allele codes (np.int8/int16/int32)
            validate: Check duplicate calls and per-locus ploidy

        Raises:
            TypeError: If genodata is not a DataFrame
            ValueError: If columns are missing, identifiers are missing, or a
                (name, locus) pair is duplicated
            GenotypeError: If a genotype value is malformed
            PloidyError: If a locus mixes ploidies
        """
        if not isinstance(genodata, pd.DataFrame):
            raise TypeError(f"genodata must be pd.DataFrame, got {type(genodata)}")

        missing_cols = [c for c in COLUMNS if c not in genodata.columns]
        if missing_cols:
            raise ValueError(
                f"genodata is missing required columns {missing_cols}; "
                f"expected {list(COLUMNS)}"
            )

        frame = genodata.loc[:, list(COLUMNS)].reset_index(drop=True)

        for col in GROUP_KEYS:
            n_null = int(frame[col].isna().sum())
            if n_null:
                raise ValueError(f"Column '{col}' contains {n_null} missing identifiers")

        frame['genotype'] = pd.Series(
            [normalize_genotype(g) for g in frame['genotype']],
            index=frame.index,
            dtype=object,
        )

        self._allele_dtype = np.dtype(allele_dtype)
        self._ploidy: dict[Any, Optional[int]] = {}

        if validate:
            duplicated = frame.duplicated(subset=['name', 'locus'])
            if duplicated.any():
                examples = frame.loc[duplicated, ['name', 'locus']].head(3).values.tolist()
                raise ValueError(
                    f"Found {int(duplicated.sum())} duplicate (name, locus) calls, "
                    f"e.g. {examples}"
                )

        for locus, genotypes in frame.groupby('locus', sort=False)['genotype']:
            try:
                array = GenotypeArray(
                    genotypes.values, allele_dtype=self._allele_dtype, validate=validate
                )
            except PloidyError as e:
                raise PloidyError(f"Locus '{locus}': {e}") from e
            self._ploidy[locus] = array.ploidy

        self._genodata = frame

    @classmethod
    def from_records(
        cls,
        records: Iterable[Union[Sequence[Any], dict[str, Any]]],
        allele_dtype: Any = DEFAULT_ALLELE_DTYPE,
    ) -> GenotypeTable:
        """
        Build a table from (name, population, locus, genotype) records.

        Records may be 4-item sequences in that order or dicts keyed by
        column name.
        """
        rows = []
        for record in records:
            if isinstance(record, dict):
                rows.append({col: record.get(col) for col in COLUMNS})
            else:
                if len(record) != len(COLUMNS):
                    raise ValueError(
                        f"Record must have {len(COLUMNS)} fields {COLUMNS}, got {record!r}"
                    )
                rows.append(dict(zip(COLUMNS, record)))
        frame = pd.DataFrame(rows, columns=list(COLUMNS))
        return cls(frame, allele_dtype=allele_dtype)

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        columns: Optional[dict[str, str]] = None,
        allele_dtype: Any = DEFAULT_ALLELE_DTYPE,
    ) -> GenotypeTable:
        """
        Build a table from a long-format frame with arbitrary column names.

        Args:
            df: Source frame
            columns: Mapping of source column -> table column
                (e.g. {"sample": "name", "pop": "population"})
            allele_dtype: Storage dtype for allele codes
        """
        if columns:
            df = df.rename(columns=columns)
        return cls(df, allele_dtype=allele_dtype)

    @property
    def genodata(self) -> pd.DataFrame:
        """Long-format genotype frame (a copy; the table itself is read-only)."""
        return self._genodata.copy()

    @property
    def allele_dtype(self) -> np.dtype:
        """Storage dtype for allele codes."""
        return self._allele_dtype

    @property
    def loci(self) -> pd.Index:
        """Locus identifiers in order of first appearance."""
        return pd.Index(pd.unique(self._genodata['locus']))

    @property
    def populations(self) -> pd.Index:
        """Population identifiers in order of first appearance."""
        return pd.Index(pd.unique(self._genodata['population']))

    @property
    def samples(self) -> pd.Index:
        """Sample names in order of first appearance."""
        return pd.Index(pd.unique(self._genodata['name']))

    @property
    def n_rows(self) -> int:
        return len(self._genodata)

    @property
    def n_loci(self) -> int:
        return len(self.loci)

    @property
    def n_samples(self) -> int:
        return len(self.samples)

    @property
    def n_populations(self) -> int:
        return len(self.populations)

    @property
    def ploidy(self) -> dict[Any, Optional[int]]:
        """Ploidy per locus (None for loci with no called genotype)."""
        return dict(self._ploidy)

    @property
    def missing_fraction(self) -> float:
        """Fraction of rows whose genotype is missing."""
        if self.n_rows == 0:
            return 0.0
        return float(self._genodata['genotype'].isna().mean())

    def genotypes(
        self,
        locus: Optional[Any] = None,
        population: Optional[Any] = None,
    ) -> GenotypeArray:
        """
        Genotypes of the rows matching locus and/or population, in row order.

        Raises:
            KeyError: If locus or population is not present in the table
        """
        mask = np.ones(self.n_rows, dtype=bool)
        if locus is not None:
            if locus not in self._ploidy:
                raise KeyError(f"Locus not found: {locus!r}")
            mask &= (self._genodata['locus'] == locus).values
        if population is not None:
            if population not in set(self._genodata['population']):
                raise KeyError(f"Population not found: {population!r}")
            mask &= (self._genodata['population'] == population).values
        return GenotypeArray(
            self._genodata['genotype'].values[mask],
            allele_dtype=self._allele_dtype,
            validate=False,
        )

    def groupby(
        self, by: Union[str, Sequence[str]]
    ) -> Iterator[tuple[Any, GenotypeArray]]:
        """
        Group rows and yield (key, GenotypeArray) pairs.

        Groups are produced in order of first appearance and keep row order.
        For a single column the key is the label; for several columns it is
        a tuple of labels.

        Args:
            by: 'locus', 'population', 'name', or a list of those

        Examples:
            >>> for locus, genotypes in table.groupby("locus"):
            ...     ...
            >>> for (locus, population), genotypes in table.groupby(["locus", "population"]):
            ...     ...
        """
        keys = [by] if isinstance(by, str) else list(by)
        invalid = [k for k in keys if k not in GROUP_KEYS]
        if not keys or invalid:
            raise ValueError(
                f"Can only group by {list(GROUP_KEYS)}, got {by!r}"
            )

        grouper = by if isinstance(by, str) else keys
        for key, genotypes in self._genodata.groupby(grouper, sort=False)['genotype']:
            yield key, GenotypeArray(
                genotypes.values, allele_dtype=self._allele_dtype, validate=False
            )

    def select(self, mask: np.ndarray | pd.Series) -> GenotypeTable:
        """
        Subset rows by a boolean mask.

        Raises:
            ValueError: If mask length doesn't match n_rows
        """
        if isinstance(mask, pd.Series):
            mask = mask.values
        mask = np.asarray(mask, dtype=bool)

        if len(mask) != self.n_rows:
            raise ValueError(
                f"mask length ({len(mask)}) must match n_rows ({self.n_rows})"
            )

        return GenotypeTable(
            self._genodata.loc[mask],
            allele_dtype=self._allele_dtype,
            validate=False,
        )

    def select_loci(self, loci: Selector) -> GenotypeTable:
        """Keep rows whose locus is in loci (or satisfies a predicate)."""
        return self.select(self._match('locus', loci))

    def select_populations(self, populations: Selector) -> GenotypeTable:
        """Keep rows whose population is in populations (or satisfies a predicate)."""
        return self.select(self._match('population', populations))

    def select_samples(self, names: Selector) -> GenotypeTable:
        """Keep rows whose sample name is in names (or satisfies a predicate)."""
        return self.select(self._match('name', names))

    def _match(self, column: str, selector: Selector) -> np.ndarray:
        values = self._genodata[column]
        if callable(selector):
            return np.fromiter(
                (bool(selector(v)) for v in values), dtype=bool, count=len(values)
            )
        if isinstance(selector, str):
            selector = [selector]
        return values.isin(list(selector)).values

    def __len__(self) -> int:
        return self.n_rows

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"GenotypeTable({self.n_samples} samples x {self.n_loci} loci, "
            f"{self.n_populations} populations)\n"
            f"  Rows: {self.n_rows} ({100 * self.missing_fraction:.1f}% missing)\n"
            f"  Loci: {list(self.loci[:5])}{'...' if self.n_loci > 5 else ''}\n"
            f"  Populations: {list(self.populations)}"
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        return self.__repr__()
