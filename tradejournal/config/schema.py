"""
Configuration schema and loader.

This module defines dataclasses that mirror the expected structure of
the YAML configuration file (`config.yaml`).  A helper function
`load_config()` reads a YAML file from disk and returns an instance
of `Config` populated with reasonable defaults for any missing
fields.

Credentials for the quote providers live here and are handed to the
quote sources at construction time; nothing else in the package reads
the environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Dict, Any
import yaml


@dataclass
class JournalConfig:
    """Where the trade journal is stored.

    Attributes
    ----------
    trades_file : str
        Path of the JSON document holding every trade record.
    """

    trades_file: str = "data/trades.json"


@dataclass
class QuoteConfig:
    """Live quote providers.

    Attributes
    ----------
    providers : List[str]
        Provider names tried in order until one returns a price.
        Supported values are ``yahoo`` and ``finnhub``.
    finnhub_api_key : str
        API token for Finnhub.  When empty the Finnhub provider is
        skipped.
    timeout : float
        HTTP timeout in seconds for each quote request.
    max_workers : int
        Number of quotes fetched in parallel.
    """

    providers: List[str] = field(default_factory=lambda: ["yahoo", "finnhub"])
    finnhub_api_key: str = ""
    timeout: float = 10.0
    max_workers: int = 4


@dataclass
class ReportConfig:
    """Report output settings.

    Attributes
    ----------
    out_dir : str
        Directory the analytics report is written to.
    top_symbols : int
        Number of symbols kept for the per-symbol chart.
    charts : bool
        Write PNG charts alongside the CSV and JSON files.
    """

    out_dir: str = "results"
    top_symbols: int = 10
    charts: bool = True


@dataclass
class Config:
    """Root configuration for the trade journal."""

    journal: JournalConfig = field(default_factory=JournalConfig)
    quotes: QuoteConfig = field(default_factory=QuoteConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


def _merge_dict(defaults: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries.

    The values in `override` take precedence over those in `defaults`.
    This helper is used when loading YAML into nested dataclasses.
    """
    result: Dict[str, Any] = defaults.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str) -> Config:
    """Load a configuration file from the given YAML path.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Config
        A populated configuration object.  Missing fields are filled with
        sensible defaults defined in the dataclasses.
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw: Dict[str, Any] = yaml.safe_load(fh) or {}

    defaults: Dict[str, Any] = {
        'journal': {
            'trades_file': "data/trades.json",
        },
        'quotes': {
            'providers': ["yahoo", "finnhub"],
            'finnhub_api_key': "",
            'timeout': 10.0,
            'max_workers': 4,
        },
        'report': {
            'out_dir': "results",
            'top_symbols': 10,
            'charts': True,
        },
    }

    merged = _merge_dict(defaults, raw)

    journal = merged['journal']
    quotes = merged['quotes']
    report = merged['report']

    return Config(
        journal=JournalConfig(trades_file=str(journal['trades_file'])),
        quotes=QuoteConfig(
            providers=[str(p).lower() for p in quotes['providers']],
            finnhub_api_key=str(quotes['finnhub_api_key'] or ""),
            timeout=float(quotes['timeout']),
            max_workers=int(quotes['max_workers']),
        ),
        report=ReportConfig(
            out_dir=str(report['out_dir']),
            top_symbols=int(report['top_symbols']),
            charts=bool(report['charts']),
        ),
    )
