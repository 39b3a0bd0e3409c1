"""
popfreq CLI - Command-line interface for allele frequency tables.

Commands:
    popfreq frequencies   - Allele frequencies per locus / population from a genotype file
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for popfreq."""
    parser = argparse.ArgumentParser(
        prog="popfreq",
        description="Allele frequency engine for population genotype data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  frequencies   Allele frequencies per locus / population

Examples:
  popfreq frequencies --input cats.csv --format microsatellite_csv --output results/cats
  popfreq frequencies --input snps.tsv --by-population --mean --power 2
  popfreq frequencies --config popfreq.yaml
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from popfreq.cli import frequencies
    frequencies.register_parser(subparsers)

    argv = list(sys.argv[1:] if args is None else args)
    parsed_args = parser.parse_args(argv)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Raw argv lets config merging tell explicit flags from defaults
    parsed_args.argv = argv

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
