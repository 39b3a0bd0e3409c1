"""
Genotype representation for population-genetic data.

A genotype is a fixed-length tuple of integer allele codes, one slot per
chromosome copy (ploidy), or missing when no call was made. A GenotypeArray
holds the genotypes of every sample for a single locus.

Biological Context:
    Marker data arrives as diploid microsatellites ("101/104"), biallelic
    SNPs ("1/2") or polyploid calls. Whatever the source format, frequency
    statistics only need the allele codes of each individual:
    - Diploid heterozygote 101/104 -> (101, 104)
    - Tetraploid call 1/1/1/2      -> (1, 1, 1, 2)
    - No call                      -> None

    Missing data is common (failed amplification, low coverage) and must be
    carried explicitly rather than encoded as an allele value.

Engineering Design:
    - Genotypes are plain tuples of Python ints (hashable, immutable)
    - Missing is None; pd.NA and float NaN are accepted on input
    - GenotypeArray is immutable and validated (uniform ploidy per locus)
    - Allele storage width is a numpy dtype (int8/int16/int32), used when
      the array is materialised as a matrix

Examples:
    >>> from popfreq.core.genotype import GenotypeArray, parse_genotype
    >>>
    >>> locus = GenotypeArray([(101, 104), (101, 101), None])
    >>> locus.ploidy
    2
    >>> locus.n_missing
    1
    >>> locus.alleles()
    array([101, 104, 101, 101], dtype=int16)
    >>>
    >>> parse_genotype("101/104")
    (101, 104)
    >>> parse_genotype("000000", digits=3) is None
    True
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from typing import Any, Iterable, Iterator, Optional, Union

import numpy as np
import pandas as pd

__all__ = [
    'Genotype',
    'GenotypeArray',
    'GenotypeError',
    'PloidyError',
    'ALLELE_DTYPES',
    'DEFAULT_ALLELE_DTYPE',
    'MISSING_TOKENS',
    'is_missing',
    'normalize_genotype',
    'is_genotype',
    'alleles',
    'parse_genotype',
]

Genotype = tuple[int, ...]

ALLELE_DTYPES = (np.int8, np.int16, np.int32)
DEFAULT_ALLELE_DTYPE = np.int16

# Textual genotypes treated as "no call" by parse_genotype
MISSING_TOKENS = frozenset({'', '-9', 'NA', 'N/A', 'NaN', 'nan', '.', './.', '.|.', '-', '?'})

_SEPARATORS = re.compile(r'[/|,:;\s]+')


class GenotypeError(ValueError):
    """Raised when a value cannot be interpreted as a genotype."""


class PloidyError(GenotypeError):
    """Raised when genotypes at a locus disagree on the number of allele slots."""


def is_missing(value: Any) -> bool:
    """True for None, pd.NA and float NaN."""
    if value is None or value is pd.NA:
        return True
    if isinstance(value, float):
        return math.isnan(value)
    return False


def _is_allele(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def is_genotype(value: Any) -> bool:
    """
    Check whether value is a single (present) genotype.

    A genotype is a non-empty tuple whose elements are all integer allele
    codes. Sequences of genotypes (tuples of tuples, lists, GenotypeArray)
    are not genotypes.
    """
    return (
        isinstance(value, tuple)
        and len(value) > 0
        and all(_is_allele(a) for a in value)
    )


def normalize_genotype(value: Any) -> Optional[Genotype]:
    """Coerce one input value to a Genotype tuple or None."""
    if is_missing(value):
        return None
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if not isinstance(value, (tuple, list)) or len(value) == 0:
        raise GenotypeError(
            f"Genotype must be a non-empty tuple of integer allele codes or missing, "
            f"got {value!r}"
        )
    if not all(_is_allele(a) for a in value):
        raise GenotypeError(f"Allele codes must be integers, got {value!r}")
    return tuple(int(a) for a in value)


def alleles(genotype: Optional[Genotype]) -> Genotype:
    """
    Ordered allele codes of a single genotype.

    Missing genotypes have no alleles.

    Examples:
        >>> alleles((101, 104))
        (101, 104)
        >>> alleles(None)
        ()
    """
    if is_missing(genotype):
        return ()
    return tuple(int(a) for a in genotype)


class GenotypeArray(Sequence):
    """
    Immutable, missing-aware sequence of genotypes for one locus.

    One entry per sample, in sample order. Present genotypes share a single
    ploidy; entries that are missing are stored as None.

    Attributes:
        ploidy: Number of allele slots per present genotype (None if all missing)
        allele_dtype: numpy integer dtype used by alleles() and to_matrix()

    Shape Invariants:
        - len(array) == number of samples at the locus
        - every present genotype has exactly `ploidy` alleles
        - every allele code fits in allele_dtype

    Examples:
        >>> locus = GenotypeArray([(1, 2), (2, 2), None, (1, 1)])
        >>> len(locus)
        4
        >>> locus.is_missing()
        array([False, False,  True, False])
        >>> matrix, mask = locus.to_matrix()
        >>> matrix.shape
        (4, 2)
    """

    __slots__ = ('_genotypes', '_ploidy', '_allele_dtype')

    def __init__(
        self,
        genotypes: Iterable[Any] = (),
        allele_dtype: Any = DEFAULT_ALLELE_DTYPE,
        validate: bool = True,
    ):
        """
        Build a GenotypeArray.

        Args:
            genotypes: Iterable of genotypes (tuples of ints) or missing values
            allele_dtype: One of np.int8, np.int16, np.int32
            validate: Check uniform ploidy and allele range

        Raises:
            GenotypeError: If an entry is neither missing nor a tuple of ints,
                or an allele code does not fit allele_dtype
            PloidyError: If present genotypes have different lengths
            TypeError: If allele_dtype is not a supported integer dtype
        """
        dtype = np.dtype(allele_dtype)
        if dtype.type not in ALLELE_DTYPES:
            raise TypeError(
                f"allele_dtype must be one of {[np.dtype(d).name for d in ALLELE_DTYPES]}, "
                f"got {dtype.name}"
            )

        if isinstance(genotypes, GenotypeArray):
            normalized = genotypes._genotypes
        else:
            normalized = tuple(normalize_genotype(g) for g in genotypes)

        ploidies = {len(g) for g in normalized if g is not None}

        if validate:
            if len(ploidies) > 1:
                raise PloidyError(
                    f"Genotypes must share one ploidy per locus, found ploidies {sorted(ploidies)}"
                )
            info = np.iinfo(dtype)
            for g in normalized:
                if g is not None and (min(g) < info.min or max(g) > info.max):
                    raise GenotypeError(
                        f"Allele codes in {g} do not fit {dtype.name} "
                        f"[{info.min}, {info.max}]"
                    )

        self._genotypes: tuple[Optional[Genotype], ...] = normalized
        self._ploidy: Optional[int] = min(ploidies) if ploidies else None
        self._allele_dtype = dtype

    @property
    def ploidy(self) -> Optional[int]:
        """Allele slots per genotype, or None when every entry is missing."""
        return self._ploidy

    @property
    def allele_dtype(self) -> np.dtype:
        """Storage dtype for allele codes."""
        return self._allele_dtype

    @property
    def n_missing(self) -> int:
        """Number of missing entries."""
        return sum(1 for g in self._genotypes if g is None)

    @property
    def n_present(self) -> int:
        """Number of called (non-missing) entries."""
        return len(self._genotypes) - self.n_missing

    def all_missing(self) -> bool:
        """True when there is no called genotype (including the empty array)."""
        return all(g is None for g in self._genotypes)

    def is_missing(self) -> np.ndarray:
        """Boolean mask, True where the genotype is missing."""
        return np.fromiter(
            (g is None for g in self._genotypes), dtype=bool, count=len(self._genotypes)
        )

    def present(self) -> Iterator[Genotype]:
        """Iterate over called genotypes in sample order."""
        return (g for g in self._genotypes if g is not None)

    def alleles(self) -> np.ndarray:
        """
        Flattened allele codes of every called genotype, in sample order.

        Returns:
            1-D array of allele_dtype (empty when all missing)
        """
        flat = [a for g in self._genotypes if g is not None for a in g]
        return np.asarray(flat, dtype=self._allele_dtype)

    def to_matrix(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Materialise as a (n_samples, ploidy) allele matrix.

        Missing rows are zero-filled; use the returned mask to exclude them.

        Returns:
            Tuple of (matrix, missing_mask)
        """
        ploidy = self._ploidy or 0
        matrix = np.zeros((len(self._genotypes), ploidy), dtype=self._allele_dtype)
        for i, g in enumerate(self._genotypes):
            if g is not None:
                matrix[i, :] = g
        return matrix, self.is_missing()

    def __len__(self) -> int:
        return len(self._genotypes)

    def __getitem__(self, index: Union[int, slice]) -> Any:
        if isinstance(index, slice):
            return GenotypeArray(
                self._genotypes[index], allele_dtype=self._allele_dtype, validate=False
            )
        return self._genotypes[index]

    def __iter__(self) -> Iterator[Optional[Genotype]]:
        return iter(self._genotypes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GenotypeArray):
            return self._genotypes == other._genotypes
        if isinstance(other, (list, tuple)):
            return list(self._genotypes) == [
                None if is_missing(g) else tuple(g) for g in other
            ]
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._genotypes)

    def __repr__(self) -> str:
        preview = ', '.join(
            'missing' if g is None else '/'.join(map(str, g))
            for g in self._genotypes[:5]
        )
        more = ', ...' if len(self._genotypes) > 5 else ''
        return (
            f"GenotypeArray({len(self)} samples, ploidy={self._ploidy}, "
            f"missing={self.n_missing}: [{preview}{more}])"
        )


def parse_genotype(
    text: Any,
    ploidy: int = 2,
    digits: Optional[int] = None,
    sep: Optional[str] = None,
    missing_tokens: frozenset[str] = MISSING_TOKENS,
) -> Optional[Genotype]:
    """
    Parse a textual genotype into a Genotype tuple.

    Handles the common delimited-file encodings:
        "101/104", "1|2", "1,2"  -> separator-delimited alleles
        "101104" (digits=3)       -> fixed-width alleles
        "0101"                    -> fixed-width, width inferred from ploidy

    A token in missing_tokens, or a genotype with any allele equal to 0 or to
    a numeric missing token such as -9, is missing (the Genepop/Structure
    "no call" convention).

    Args:
        text: Genotype token (str, int or missing)
        ploidy: Expected number of alleles
        digits: Width of each allele for unseparated tokens
        sep: Explicit allele separator (default: any of / | , : ; or whitespace)
        missing_tokens: Strings meaning "no call"

    Returns:
        Genotype tuple, or None when missing

    Raises:
        GenotypeError: If the token is not numeric
        PloidyError: If the number of alleles differs from ploidy

    Examples:
        >>> parse_genotype("101/104")
        (101, 104)
        >>> parse_genotype("0304", ploidy=2)
        (3, 4)
        >>> parse_genotype("1/1/1/2", ploidy=4)
        (1, 1, 1, 2)
        >>> parse_genotype("-9") is None
        True
    """
    if is_missing(text):
        return None

    token = str(text).strip()
    if token in missing_tokens or set(token) == {'0'}:
        return None

    if sep is not None:
        parts = [p for p in token.split(sep) if p != '']
    elif _SEPARATORS.search(token):
        parts = [p for p in _SEPARATORS.split(token) if p != '']
    else:
        width = digits
        if width is None:
            if len(token) % ploidy != 0:
                raise PloidyError(
                    f"Cannot split '{token}' into {ploidy} equal-width alleles"
                )
            width = len(token) // ploidy
        if len(token) != width * ploidy:
            raise PloidyError(
                f"Genotype '{token}' has {len(token)} digits, expected {width * ploidy} "
                f"({ploidy} alleles x {width} digits)"
            )
        parts = [token[i:i + width] for i in range(0, len(token), width)]

    try:
        codes = tuple(int(p) for p in parts)
    except ValueError as e:
        raise GenotypeError(f"Non-numeric allele in genotype '{token}'") from e

    if any(code == 0 or str(code) in missing_tokens for code in codes):
        return None

    if len(codes) != ploidy:
        raise PloidyError(
            f"Genotype '{token}' has {len(codes)} alleles, expected ploidy {ploidy}"
        )

    return codes
