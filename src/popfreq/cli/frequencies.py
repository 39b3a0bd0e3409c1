"""
popfreq frequencies command - Allele frequency tables from a genotype file.

Loads a delimited genotype file, computes allele frequencies per locus
(optionally per population) and, on request, the cross-population mean
frequencies raised to a power, then writes long-form CSV tables.

Usage:
    popfreq frequencies --input cats.csv --format microsatellite_csv --output results/cats
    popfreq frequencies --input snps.tsv --by-population --mean --power 2 --workers 4
    popfreq frequencies --config popfreq.yaml --power 1
"""

import argparse
import json
from datetime import datetime
from pathlib import Path

from popfreq.cli.config import FrequencyConfig, load_config, merge_config_with_args, validate_config

_DEFAULTS = FrequencyConfig()


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the frequencies subcommand."""
    parser = subparsers.add_parser(
        "frequencies",
        help="Allele frequency tables per locus / population",
        description=(
            "Compute allele frequencies from a delimited genotype file. "
            "Writes long-form CSV tables (locus, [population,] allele, frequency)."
        )
    )

    # Input/output
    parser.add_argument("--input", "-i", type=Path, default=None,
                        help="Genotype file (one row per sample, one column per locus)")
    parser.add_argument("--output", "-o", type=Path, default=Path("results/frequencies"),
                        help="Output directory for results")
    parser.add_argument("--format", "-f", default=None,
                        help="Format preset (microsatellite_csv, snp_tsv, generic_csv, "
                             "generic_tsv; default: auto-detect)")
    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="YAML/JSON config file (CLI arguments override it)")
    parser.add_argument("--loci", nargs="+", default=None,
                        help="Restrict to these loci (default: all)")

    # Frequency options
    parser.add_argument("--by-population", action="store_true", default=_DEFAULTS.by_population,
                        help="Frequencies per locus x population instead of pooled")
    parser.add_argument("--mean", action="store_true", default=_DEFAULTS.mean,
                        help="Also write cross-population mean frequencies per locus")
    parser.add_argument("--power", "-p", type=int, default=_DEFAULTS.power,
                        help="Exponent applied to mean frequencies (default: 1)")
    parser.add_argument("--workers", "-j", type=int, default=_DEFAULTS.workers,
                        help="Threads to spread loci over (default: serial)")

    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging")

    parser.set_defaults(func=run_frequencies)


def run_frequencies(args: argparse.Namespace) -> int:
    """Execute the frequencies command."""
    import logging
    from popfreq.io.loaders import load_genotypes
    from popfreq.io.writers import write_frequencies
    from popfreq.stats.lookup import mean_frequencies, population_frequencies, table_frequencies
    from popfreq.utils.fileio import atomic_write_json

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger(__name__)

    if args.config is not None:
        config = load_config(args.config)
        validate_config(config)
        args = merge_config_with_args(config, args, getattr(args, 'argv', None))
        logger.info(f"Loaded config: {args.config}")

    if args.input is None:
        logger.error("No input file given (use --input or set 'input' in the config)")
        return 2

    if args.power < 0:
        logger.error(f"--power must be non-negative, got {args.power}")
        return 2

    print(f"\n{'='*70}")
    print("  Allele Frequencies")
    print(f"{'='*70}\n")

    logger.info(f"Loading: {args.input}")
    table = load_genotypes(args.input, format=args.format, loci=args.loci)
    logger.info(
        f"Table: {table.n_samples} samples x {table.n_loci} loci, "
        f"{table.n_populations} populations"
    )

    args.output.mkdir(parents=True, exist_ok=True)
    outputs = []

    if args.by_population:
        freqs = population_frequencies(table)
    else:
        freqs = table_frequencies(table, workers=args.workers)
    outputs.append(write_frequencies(freqs, args.output / "frequencies.csv"))

    if args.mean:
        means = mean_frequencies(table, power=args.power, workers=args.workers)
        outputs.append(write_frequencies(means, args.output / "mean_frequencies.csv"))

    print(f"  Samples:     {table.n_samples}")
    print(f"  Loci:        {table.n_loci}")
    print(f"  Populations: {table.n_populations}")
    print(f"  Missing:     {100 * table.missing_fraction:.1f}% of calls")
    for path in outputs:
        print(f"  Wrote:       {path}")

    run_config = {
        'timestamp': datetime.now().isoformat(),
        'input': str(args.input),
        'format': args.format if args.format is None or isinstance(args.format, str)
        else args.format.name,
        'loci': args.loci,
        'by_population': args.by_population,
        'mean': args.mean,
        'power': args.power,
        'workers': args.workers,
        'n_samples': table.n_samples,
        'n_loci': table.n_loci,
        'n_populations': table.n_populations,
    }
    atomic_write_json(args.output / "config.json", run_config)
    logger.debug(json.dumps(run_config))

    logger.info(f"Results saved to: {args.output}")
    return 0
