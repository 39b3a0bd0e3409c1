"""End-to-end tests for the popfreq command line."""

import json

import pandas as pd
import pytest

from popfreq.cli import main


class TestFrequenciesCommand:
    """Tests for `popfreq frequencies`."""

    def test_pooled(self, microsatellite_csv, tmp_path):
        out = tmp_path / "results"
        code = main([
            "frequencies", "--input", str(microsatellite_csv),
            "--format", "microsatellite_csv", "--output", str(out),
        ])

        assert code == 0
        df = pd.read_csv(out / "frequencies.csv")
        assert list(df.columns) == ["locus", "allele", "frequency"]
        fca8 = df[df["locus"] == "fca8"].set_index("allele")["frequency"]
        assert fca8[135] == pytest.approx(4 / 8)
        assert not (out / "mean_frequencies.csv").exists()

        record = json.loads((out / "config.json").read_text())
        assert record["n_samples"] == 4
        assert record["format"] == "microsatellite_csv"

    def test_by_population_with_mean(self, snp_tsv, tmp_path):
        out = tmp_path / "results"
        code = main([
            "frequencies", "-i", str(snp_tsv), "-o", str(out),
            "--by-population", "--mean", "--power", "2", "-j", "2",
        ])

        assert code == 0
        pops = pd.read_csv(out / "frequencies.csv")
        assert "population" in pops.columns

        means = pd.read_csv(out / "mean_frequencies.csv")
        rs1 = means[means["locus"] == "rs1"].set_index("allele")["frequency"]
        # pop A: 1 -> 0.75, 2 -> 0.25; pop B: 2 -> 1.0
        assert rs1[1] == pytest.approx(0.375 ** 2)
        assert rs1[2] == pytest.approx(0.625 ** 2)

    def test_config_file(self, microsatellite_csv, tmp_path):
        out = tmp_path / "from_config"
        config = tmp_path / "popfreq.yaml"
        config.write_text(
            f"input: {microsatellite_csv}\n"
            f"output: {out}\n"
            "format: microsatellite_csv\n"
            "frequencies:\n"
            "  mean: true\n"
            "  power: 2\n"
        )

        code = main(["frequencies", "--config", str(config), "--power", "1"])

        assert code == 0
        record = json.loads((out / "config.json").read_text())
        assert record["mean"] is True
        assert record["power"] == 1

    def test_missing_input(self, tmp_path):
        assert main(["frequencies", "--output", str(tmp_path / "x")]) == 2

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "frequencies" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--version"])
        assert excinfo.value.code == 0
        assert "0.1.0" in capsys.readouterr().out
