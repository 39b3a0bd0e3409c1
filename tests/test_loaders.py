"""Tests for delimited genotype loading and format presets."""

import numpy as np
import pytest

from popfreq.io.formats import PRESETS, DataFormat, sniff_delimiter, suggest_format
from popfreq.io.loaders import load_genotypes, resolve_format


class TestFormats:
    """Tests for DataFormat and format detection."""

    def test_microsatellite_preset_parses(self):
        assert PRESETS["microsatellite_csv"].parse("135143") == (135, 143)
        assert PRESETS["microsatellite_csv"].parse("0") is None

    def test_snp_preset_parses_both_phasings(self):
        fmt = PRESETS["snp_tsv"]
        assert fmt.parse("1/2") == (1, 2)
        assert fmt.parse("2|2") == (2, 2)
        assert fmt.parse("12") == (1, 2)

    def test_invalid_ploidy(self):
        with pytest.raises(ValueError):
            DataFormat(ploidy=0)

    def test_invalid_drop_pattern(self):
        with pytest.raises(ValueError):
            DataFormat(drop_columns_pattern="(")

    def test_should_drop_column(self):
        fmt = DataFormat(drop_columns=["lat"], drop_columns_pattern=r"^meta_")
        assert fmt.should_drop_column("lat")
        assert fmt.should_drop_column("meta_site")
        assert not fmt.should_drop_column("fca8")

    def test_sniff_delimiter(self, microsatellite_csv, snp_tsv):
        assert sniff_delimiter(microsatellite_csv) == ","
        assert sniff_delimiter(snp_tsv) == "\t"

    def test_suggest_format(self, microsatellite_csv, snp_tsv):
        assert suggest_format(microsatellite_csv)[0] == "microsatellite_csv"
        assert suggest_format(snp_tsv)[0] == "snp_tsv"

    def test_resolve_unknown_preset(self, microsatellite_csv):
        with pytest.raises(KeyError):
            resolve_format(microsatellite_csv, "genepop")


class TestLoadGenotypes:
    """Tests for load_genotypes()."""

    def test_microsatellite(self, microsatellite_csv):
        table = load_genotypes(microsatellite_csv, format="microsatellite_csv")

        assert table.n_samples == 4
        assert list(table.loci) == ["fca8", "fca23"]
        assert list(table.populations) == ["1", "2"]
        assert table.genotypes("fca8") == [(135, 143), (133, 135), (135, 135), (143, 143)]
        assert table.genotypes("fca23") == [(136, 146), None, None, (136, 136)]

    def test_auto_detect(self, microsatellite_csv):
        table = load_genotypes(microsatellite_csv)
        assert table.genotypes("fca8")[0] == (135, 143)

    def test_snp_dtype_from_format(self, snp_tsv):
        table = load_genotypes(snp_tsv, format="snp_tsv")

        assert table.allele_dtype == np.int8
        assert table.genotypes("rs2") == [(2, 2), None, (1, 2)]

    def test_custom_format(self, tmp_path):
        path = tmp_path / "custom.txt"
        path.write_text(
            "id;site;lat;L1\n"
            "x;s1;45.1;12-14\n"
            "y;s1;45.2;14-14\n"
        )
        fmt = DataFormat(
            delimiter=";",
            name_col="id",
            population_col="site",
            allele_sep="-",
            drop_columns=["lat"],
        )
        table = load_genotypes(path, format=fmt)

        assert list(table.loci) == ["L1"]
        assert list(table.samples) == ["x", "y"]
        assert table.genotypes("L1") == [(12, 14), (14, 14)]

    def test_select_loci(self, microsatellite_csv):
        table = load_genotypes(microsatellite_csv, format="microsatellite_csv", loci=["fca23"])
        assert list(table.loci) == ["fca23"]

    def test_unknown_loci(self, microsatellite_csv):
        with pytest.raises(ValueError, match="not found"):
            load_genotypes(microsatellite_csv, format="microsatellite_csv", loci=["nope"])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_genotypes(tmp_path / "absent.csv")

    def test_missing_identifier_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("sample,L1\na,1/2\n")
        with pytest.raises(ValueError, match="identifier columns"):
            load_genotypes(path, format="generic_csv")

    def test_unparseable_genotype_has_context(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("name,population,L1\na,p,A/T\n")
        with pytest.raises(ValueError, match="sample 'a' at locus 'L1'"):
            load_genotypes(path, format="generic_csv")

    def test_duplicate_names_warn(self, tmp_path):
        path = tmp_path / "dups.csv"
        path.write_text("name,population,L1\na,p,1/2\na,p,2/2\nb,p,1/1\n")
        with pytest.warns(UserWarning, match="duplicate"):
            table = load_genotypes(path, format="generic_csv")

        assert table.n_samples == 2
        assert table.genotypes("L1") == [(1, 2), (1, 1)]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(ValueError):
            load_genotypes(path, format="generic_csv")
