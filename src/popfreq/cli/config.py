"""
Configuration file support for the popfreq CLI.

Supports YAML and JSON config files with CLI argument override.

Example config:
```yaml
input: data/nancycats.csv
output: results/nancycats
format: microsatellite_csv      # preset name, or a mapping of DataFormat fields
frequencies:
  by_population: true
  mean: true
  power: 2
  workers: 4
```
"""

import json
from argparse import Namespace
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from popfreq.io.formats import PRESETS, DataFormat


@dataclass
class FrequencyConfig:
    """Frequency computation configuration."""
    by_population: bool = False
    mean: bool = False
    power: int = 1
    workers: Optional[int] = None


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid

    Examples:
        >>> config = load_config(Path("popfreq.yaml"))
        >>> print(config['frequencies']['power'])
        2
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in ('.yaml', '.yml', '.json'):
        raise ValueError(
            f"Unsupported config format: {suffix}. "
            f"Use .yaml, .yml, or .json"
        )

    try:
        with open(config_path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            else:
                config = json.load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def build_format(section: Union[str, Dict[str, Any], None]) -> Union[str, DataFormat, None]:
    """
    Interpret the config 'format' entry.

    A string is a preset name (left for the loader to resolve); a mapping
    builds a DataFormat, optionally starting from a preset named by 'preset'.
    """
    if section is None or isinstance(section, str):
        return section

    section = dict(section)
    preset = section.pop('preset', None)
    if preset is not None and preset not in PRESETS:
        raise ValueError(
            f"Unknown format preset '{preset}'. Choose from: {', '.join(PRESETS)}"
        )
    if 'missing_tokens' in section:
        section['missing_tokens'] = frozenset(str(t) for t in section['missing_tokens'])
    try:
        if preset is not None:
            return replace(PRESETS[preset], **section)
        return DataFormat(**section)
    except TypeError as e:
        raise ValueError(f"Invalid format section in config: {e}") from e


def _merge_value(cli_value: Any, config_value: Any, was_explicitly_set: bool) -> Any:
    """
    Merge a single config value with CLI argument.

    Rules:
    - CLI args ALWAYS override config if explicitly set
    - If CLI arg not set, use config value
    - If neither set, keep CLI default
    """
    if was_explicitly_set:
        return cli_value

    if config_value is not None:
        return config_value

    return cli_value


def _explicit_args(cli_args: Optional[List[str]]) -> set:
    """Names of arguments given on the command line (long or short form)."""
    short_to_long = {
        'i': 'input',
        'o': 'output',
        'f': 'format',
        'p': 'power',
        'j': 'workers',
    }
    explicit = set()
    for arg in cli_args or []:
        if arg.startswith('--'):
            name = arg[2:].split('=', 1)[0].replace('-', '_')
            if name.startswith('no_'):
                name = name[3:]
            explicit.add(name)
        elif arg.startswith('-') and len(arg) == 2 and arg[1] in short_to_long:
            explicit.add(short_to_long[arg[1]])
    return explicit


def merge_config_with_args(
    config: Dict[str, Any],
    args: Namespace,
    cli_args: Optional[List[str]] = None,
) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Parameters:
        config: Configuration dictionary from load_config()
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values)
                  If None, assumes all args are defaults

    Returns:
        Updated Namespace with merged values

    Examples:
        >>> config = load_config(Path("popfreq.yaml"))
        >>> args = parser.parse_args(["--input", "data.csv"])
        >>> merged = merge_config_with_args(config, args, ["--input", "data.csv"])
        >>> # merged.input from CLI, merged.power from config
    """
    explicit_args = _explicit_args(cli_args)
    merged = Namespace(**vars(args))

    for key in ('input', 'output'):
        if key in config and config[key] is not None:
            setattr(merged, key, _merge_value(
                getattr(merged, key, None),
                Path(config[key]),
                key in explicit_args,
            ))

    if 'format' in config:
        merged.format = _merge_value(
            getattr(merged, 'format', None),
            build_format(config['format']),
            'format' in explicit_args,
        )

    frequencies = config.get('frequencies') or {}
    for key in ('by_population', 'mean', 'power', 'workers'):
        if key in frequencies:
            setattr(merged, key, _merge_value(
                getattr(merged, key, None),
                frequencies[key],
                key in explicit_args,
            ))

    return merged


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Raises:
        ValueError: If configuration is invalid
    """
    unknown = set(config) - {'input', 'output', 'format', 'frequencies'}
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")

    fmt = config.get('format')
    if isinstance(fmt, str) and fmt not in PRESETS:
        raise ValueError(
            f"Invalid format preset '{fmt}'. "
            f"Choose from: {', '.join(PRESETS)}"
        )
    if isinstance(fmt, dict):
        build_format(fmt)

    frequencies = config.get('frequencies') or {}
    if not isinstance(frequencies, dict):
        raise ValueError("'frequencies' section must be a mapping")

    if 'power' in frequencies:
        power = frequencies['power']
        if isinstance(power, bool) or not isinstance(power, int) or power < 0:
            raise ValueError(f"power must be a non-negative integer, got: {power}")

    if frequencies.get('workers') is not None:
        workers = frequencies['workers']
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ValueError(f"workers must be a positive integer, got: {workers}")

    for flag in ('by_population', 'mean'):
        if flag in frequencies and not isinstance(frequencies[flag], bool):
            raise ValueError(f"{flag} must be true or false, got: {frequencies[flag]}")
