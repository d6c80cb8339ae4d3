"""
Application entry point.

This module defines a simple command‑line interface over the trade
journal.  It loads the configuration and the stored trades, then
either writes the analytics report, marks open positions against live
quotes, or exports the closed trades as CSV.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Dict, List, Optional

from .analytics.engine import AnalyticsEngine
from .config.schema import Config, load_config
from .journal.filters import closed_trades, open_positions
from .journal.repository import JsonTradeRepository
from .positions.calculator import days_held, pl_percent, portfolio_summary, unrealized_pl
from .quotes.sources import build_quote_source, fetch_quotes
from .reporting.report import export_trades_csv, format_ratio, generate_analytics_report


logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def run_analytics(config: Config) -> bool:
    """Compute the analytics snapshot and write the report.

    Returns `False` when the journal is empty and nothing was written.
    """
    trades = JsonTradeRepository(config.journal.trades_file).list_trades()
    if not trades:
        logger.info("No trades in %s; nothing to analyse.", config.journal.trades_file)
        return False

    snapshot = AnalyticsEngine(top_symbols=config.report.top_symbols).compute(trades)
    logger.info(
        "%d trades: %d wins, %d losses, win rate %.1f%%, profit factor %s, net P&L %.2f",
        snapshot.total_trades, snapshot.wins, snapshot.losses, snapshot.win_rate,
        format_ratio(snapshot.profit_factor), snapshot.net_pl,
    )
    generate_analytics_report(snapshot, trades, out_dir=config.report.out_dir, charts=config.report.charts)
    return True


def run_positions(config: Config) -> None:
    """Mark every open position to the latest available quote."""
    positions = open_positions(JsonTradeRepository(config.journal.trades_file).list_trades())
    if not positions:
        logger.info("No open positions.")
        return

    source = build_quote_source(config.quotes)
    quotes, errors = fetch_quotes(source, [p.symbol for p in positions], config.quotes.max_workers)
    for symbol, error in errors.items():
        logger.warning("Could not fetch quote for %s, enter the price manually: %s", symbol, error.message)

    prices: Dict[str, Optional[float]] = {}
    for position in positions:
        quote = quotes.get(position.symbol)
        price = quote.price if quote is not None else None
        prices[position.id] = price
        logger.info(
            "%-10s %-5s qty %g entry %.2f now %s  P&L %.2f (%+.2f%%)  %d days",
            position.symbol, position.type, position.quantity, position.entry_price,
            f"{price:.2f}" if price is not None else "n/a",
            unrealized_pl(position, price), pl_percent(position, price), days_held(position),
        )

    summary = portfolio_summary(positions, prices)
    logger.info(
        "%d open positions: unrealized P&L %.2f, position value %.2f",
        summary.positions, summary.unrealized_pl, summary.position_value,
    )


def run_export(config: Config, path: Optional[str] = None) -> int:
    trades = closed_trades(JsonTradeRepository(config.journal.trades_file).list_trades())
    if not trades:
        logger.info("No closed trades to export.")
        return 0
    return export_trades_csv(trades, path or os.path.join(config.report.out_dir, 'trades_export.csv'))


def main(argv: Optional[List[str]] = None) -> None:
    """Parse command‑line arguments and dispatch to the appropriate mode."""
    parser = argparse.ArgumentParser(description="Trade journal analytics")
    parser.add_argument('mode', choices=['analytics', 'positions', 'export'], help="What to run")
    parser.add_argument('--config', default='config.yaml', help="Path to configuration YAML file")
    parser.add_argument('--out', default=None, help="Output CSV path for the export mode")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    config = load_config(args.config)

    if args.mode == 'analytics':
        run_analytics(config)
    elif args.mode == 'positions':
        run_positions(config)
    else:
        run_export(config, args.out)


if __name__ == '__main__':
    main()
