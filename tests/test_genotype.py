"""Tests for genotype values, GenotypeArray and text parsing."""

import numpy as np
import pandas as pd
import pytest

from popfreq.core.genotype import (
    GenotypeArray,
    GenotypeError,
    PloidyError,
    alleles,
    is_genotype,
    is_missing,
    normalize_genotype,
    parse_genotype,
)


class TestMissingAndShape:
    """Tests for is_missing(), is_genotype() and normalize_genotype()."""

    @pytest.mark.parametrize("value", [None, pd.NA, float("nan"), np.nan])
    def test_missing_values(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize("value", [(1, 2), 0, "", 1.5])
    def test_not_missing(self, value):
        assert not is_missing(value)

    def test_is_genotype(self):
        assert is_genotype((101, 104))
        assert is_genotype((np.int16(3),))
        assert not is_genotype(())
        assert not is_genotype([1, 2])
        assert not is_genotype(((1, 2), (2, 2)))
        assert not is_genotype((True, False))

    def test_normalize_converts_to_python_ints(self):
        g = normalize_genotype(np.array([1, 2], dtype=np.int8))
        assert g == (1, 2)
        assert all(type(a) is int for a in g)

    def test_normalize_missing(self):
        assert normalize_genotype(float("nan")) is None

    @pytest.mark.parametrize("value", ["1/2", (), (1.5, 2), 7])
    def test_normalize_rejects(self, value):
        with pytest.raises(GenotypeError):
            normalize_genotype(value)

    def test_alleles(self):
        assert alleles((104, 101)) == (104, 101)
        assert alleles(None) == ()


class TestGenotypeArray:
    """Tests for GenotypeArray construction and accessors."""

    def test_basic_properties(self):
        locus = GenotypeArray([(101, 104), (101, 101), None])

        assert len(locus) == 3
        assert locus.ploidy == 2
        assert locus.n_missing == 1
        assert locus.n_present == 2
        assert not locus.all_missing()
        np.testing.assert_array_equal(locus.is_missing(), [False, False, True])

    def test_alleles_flattened_in_sample_order(self):
        locus = GenotypeArray([(3, 1), None, (2, 2)], allele_dtype=np.int8)
        flat = locus.alleles()

        assert flat.dtype == np.int8
        np.testing.assert_array_equal(flat, [3, 1, 2, 2])

    def test_all_missing(self):
        locus = GenotypeArray([None, pd.NA, float("nan")])

        assert locus.all_missing()
        assert locus.ploidy is None
        assert locus.alleles().size == 0

    def test_empty(self):
        locus = GenotypeArray()
        assert len(locus) == 0
        assert locus.all_missing()

    def test_mixed_ploidy_rejected(self):
        with pytest.raises(PloidyError):
            GenotypeArray([(1, 2), (1, 2, 3)])

    def test_mixed_ploidy_allowed_without_validation(self):
        locus = GenotypeArray([(1, 2), (1, 2, 3)], validate=False)
        assert len(locus) == 2

    def test_allele_out_of_dtype_range(self):
        with pytest.raises(GenotypeError):
            GenotypeArray([(200, 1)], allele_dtype=np.int8)

    def test_unsupported_dtype(self):
        with pytest.raises(TypeError):
            GenotypeArray([(1, 2)], allele_dtype=np.int64)

    def test_to_matrix(self):
        matrix, mask = GenotypeArray([(1, 2), None, (3, 3)]).to_matrix()

        assert matrix.shape == (3, 2)
        np.testing.assert_array_equal(matrix[0], [1, 2])
        np.testing.assert_array_equal(matrix[1], [0, 0])
        np.testing.assert_array_equal(mask, [False, True, False])

    def test_indexing_and_slicing(self):
        locus = GenotypeArray([(1, 2), None, (3, 3)])

        assert locus[0] == (1, 2)
        assert locus[1] is None
        tail = locus[1:]
        assert isinstance(tail, GenotypeArray)
        assert tail == [None, (3, 3)]

    def test_equality_and_hash(self):
        a = GenotypeArray([(1, 2), None])
        b = GenotypeArray([[1, 2], float("nan")])

        assert a == b
        assert hash(a) == hash(b)
        assert a != GenotypeArray([(1, 2)])

    def test_repr_mentions_missing(self):
        text = repr(GenotypeArray([(1, 2), None]))
        assert "missing=1" in text
        assert "1/2" in text


class TestParseGenotype:
    """Tests for parse_genotype() text encodings."""

    @pytest.mark.parametrize("token,expected", [
        ("101/104", (101, 104)),
        ("1|2", (1, 2)),
        ("1,2", (1, 2)),
        (" 3 4 ", (3, 4)),
        ("0304", (3, 4)),
    ])
    def test_diploid_encodings(self, token, expected):
        assert parse_genotype(token) == expected

    def test_fixed_width(self):
        assert parse_genotype("135143", digits=3) == (135, 143)
        assert parse_genotype(135143, digits=3) == (135, 143)

    def test_polyploid(self):
        assert parse_genotype("1/1/1/2", ploidy=4) == (1, 1, 1, 2)
        assert parse_genotype("1112", ploidy=4, digits=1) == (1, 1, 1, 2)

    @pytest.mark.parametrize("token", ["", "-9", "NA", "./.", "000000", "0", None])
    def test_missing_tokens(self, token):
        assert parse_genotype(token, digits=3) is None

    def test_zero_allele_is_missing(self):
        assert parse_genotype("0/104") is None

    @pytest.mark.parametrize("token", ["-9/-9", "1/-9", "-9|2"])
    def test_structure_missing_allele(self, token):
        """Structure marks each missing allele with -9."""
        assert parse_genotype(token) is None

    def test_explicit_separator(self):
        assert parse_genotype("12-14", sep="-") == (12, 14)

    def test_wrong_allele_count(self):
        with pytest.raises(PloidyError):
            parse_genotype("1/2/3")

    def test_wrong_width(self):
        with pytest.raises(PloidyError):
            parse_genotype("13514", digits=3)

    def test_non_numeric(self):
        with pytest.raises(GenotypeError):
            parse_genotype("A/T")

    def test_ploidy_error_is_genotype_error(self):
        assert issubclass(PloidyError, GenotypeError)
        assert issubclass(GenotypeError, ValueError)
