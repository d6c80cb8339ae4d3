"""
Report generation utilities.

This module turns an analytics snapshot into human‑readable artefacts:
CSV files of trades and breakdowns, a JSON summary of performance
metrics and PNG charts of the equity curve and monthly results.

Every value is formatted here from figures the analytics engine has
already computed; nothing is recomputed at export time.
"""

from __future__ import annotations

import csv
import json
import logging
import math
import os
from typing import Any, Dict, Iterable, List, Optional
import pandas as pd
import matplotlib

# Use non‑interactive backend for environments without display
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..analytics.engine import AnalyticsSnapshot
from ..journal.models import TradeRecord, normalize_strategy


logger = logging.getLogger(__name__)

TRADE_EXPORT_COLUMNS = [
    'Date', 'Symbol', 'Strategy', 'Type', 'Quantity', 'Entry Price', 'Exit Price',
    'Stop Loss', 'Risk Amount', 'P/L', 'R:R', 'Notes',
]

_PROFIT_COLOR = '#10b981'
_LOSS_COLOR = '#ef4444'


def format_currency(amount: Optional[float]) -> str:
    """Two-decimal rendering used in every table and export."""
    return f"{float(amount or 0.0):.2f}"


def format_ratio(value: Optional[float]) -> str:
    """Render a ratio, using ``∞`` for an unbounded profit factor and
    ``-`` when there is no value."""
    if value is None:
        return "-"
    if math.isinf(value):
        return "∞"
    return f"{value:.2f}"


def _trade_row(trade: TradeRecord) -> List[str]:
    return [
        trade.date,
        trade.symbol,
        normalize_strategy(trade.strategy),
        trade.type,
        f"{trade.quantity:g}",
        format_currency(trade.entry_price),
        format_currency(trade.exit_price),
        format_currency(trade.stop_loss) if trade.stop_loss else '',
        format_currency(trade.risk_amount) if trade.risk_amount else '',
        format_currency(trade.profit_loss),
        f"{trade.risk_reward_ratio:.2f}" if trade.risk_reward_ratio else '',
        trade.notes or '',
    ]


def _write_csv(df: pd.DataFrame, path: str) -> None:
    # Quote every field; embedded quotes are doubled.
    df.to_csv(path, index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')


def export_trades_csv(trades: Iterable[TradeRecord], path: str) -> int:
    """Write trades as delimited text and return the number of rows."""
    rows = [_trade_row(t) for t in trades]
    df = pd.DataFrame(rows, columns=TRADE_EXPORT_COLUMNS, dtype=str)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    _write_csv(df, path)
    logger.info("Exported %d trades to %s", len(rows), path)
    return len(rows)


def summary_dict(snapshot: AnalyticsSnapshot) -> Dict[str, Any]:
    """Scalar metrics of a snapshot, finalised for display."""
    return {
        'total_trades': snapshot.total_trades,
        'wins': snapshot.wins,
        'losses': snapshot.losses,
        'win_rate': snapshot.win_rate,
        'profit_factor': format_ratio(snapshot.profit_factor),
        'avg_win': round(snapshot.avg_win, 2),
        'avg_loss': round(snapshot.avg_loss, 2),
        'largest_win': round(snapshot.largest_win, 2),
        'largest_loss': round(snapshot.largest_loss, 2),
        'total_profit': round(snapshot.total_profit, 2),
        'total_loss': round(snapshot.total_loss, 2),
        'net_pl': round(snapshot.net_pl, 2),
        'avg_rr': round(snapshot.avg_rr, 2),
        'max_consecutive_wins': snapshot.max_consecutive_wins,
        'max_consecutive_losses': snapshot.max_consecutive_losses,
        'long_trades': snapshot.long_trades,
        'short_trades': snapshot.short_trades,
        'long_win_rate': snapshot.long_win_rate,
        'short_win_rate': snapshot.short_win_rate,
        'best_trade': round(snapshot.best_trade, 2),
        'worst_trade': round(snapshot.worst_trade, 2),
    }


def _breakdown_frames(snapshot: AnalyticsSnapshot) -> Dict[str, pd.DataFrame]:
    monthly = pd.DataFrame(
        [
            {
                'Month': b.month,
                'Trades': b.trade_count,
                'Profit': format_currency(b.profit),
                'Loss': format_currency(b.loss),
                'Net P/L': format_currency(b.net_pl),
            }
            for b in snapshot.monthly
        ],
        columns=['Month', 'Trades', 'Profit', 'Loss', 'Net P/L'],
    )
    symbols = pd.DataFrame(
        [
            {
                'Symbol': b.symbol,
                'Trades': b.trade_count,
                'Wins': b.win_count,
                'Losses': b.loss_count,
                'Win Rate': f"{b.win_rate:.1f}",
                'Net P/L': format_currency(b.net_pl),
            }
            for b in snapshot.symbols
        ],
        columns=['Symbol', 'Trades', 'Wins', 'Losses', 'Win Rate', 'Net P/L'],
    )
    strategies = pd.DataFrame(
        [
            {
                'Strategy': b.strategy,
                'Trades': b.trade_count,
                'Wins': b.win_count,
                'Losses': b.loss_count,
                'Win Rate': f"{b.win_rate:.1f}",
                'Avg R:R': b.avg_rr_display,
                'Net P/L': format_currency(b.net_pl),
            }
            for b in snapshot.strategies
        ],
        columns=['Strategy', 'Trades', 'Wins', 'Losses', 'Win Rate', 'Avg R:R', 'Net P/L'],
    )
    return {'monthly': monthly, 'symbols': symbols, 'strategies': strategies}


def _plot_equity_curve(snapshot: AnalyticsSnapshot, path: str) -> None:
    fig, ax = plt.subplots(figsize=(10, 4))
    if snapshot.equity_curve:
        dates = pd.to_datetime([p.date for p in snapshot.equity_curve], errors='coerce')
        ax.plot(dates, [p.equity for p in snapshot.equity_curve], linewidth=1.5)
        ax.axhline(0.0, color='grey', linewidth=0.8)
        ax.set_title('Equity Curve')
        ax.set_xlabel('Date')
        ax.set_ylabel('Cumulative P&L')
        fig.autofmt_xdate()
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)


def _plot_bars(labels: List[str], values: List[float], title: str, path: str) -> None:
    fig, ax = plt.subplots(figsize=(10, 4))
    if labels:
        colors = [_PROFIT_COLOR if v >= 0 else _LOSS_COLOR for v in values]
        ax.bar(labels, values, color=colors)
        ax.set_title(title)
        ax.set_ylabel('Net P&L')
        fig.autofmt_xdate()
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)


def generate_analytics_report(
    snapshot: AnalyticsSnapshot,
    trades: Iterable[TradeRecord],
    out_dir: str = "results",
    charts: bool = True,
) -> None:
    """Generate report files for the current journal.

    Creates the output directory if it does not exist and writes the
    following files:

    - `trades.csv` – every journal entry
    - `monthly.csv`, `symbols.csv`, `strategies.csv` – breakdowns
    - `summary.json` – performance metrics
    - `equity_curve.png`, `monthly_pnl.png`, `top_symbols.png` – charts
    """
    os.makedirs(out_dir, exist_ok=True)

    export_trades_csv(trades, os.path.join(out_dir, 'trades.csv'))
    for name, df in _breakdown_frames(snapshot).items():
        _write_csv(df, os.path.join(out_dir, f'{name}.csv'))

    summary_path = os.path.join(out_dir, 'summary.json')
    with open(summary_path, 'w', encoding='utf-8') as fh:
        json.dump(summary_dict(snapshot), fh, indent=2, ensure_ascii=False)

    if charts:
        _plot_equity_curve(snapshot, os.path.join(out_dir, 'equity_curve.png'))
        # Oldest month on the left
        monthly = list(reversed(snapshot.monthly))
        _plot_bars(
            [b.month for b in monthly],
            [b.net_pl for b in monthly],
            'Monthly Net P&L',
            os.path.join(out_dir, 'monthly_pnl.png'),
        )
        _plot_bars(
            [b.symbol for b in snapshot.top_symbols],
            [b.net_pl for b in snapshot.top_symbols],
            'Top Symbols by Net P&L',
            os.path.join(out_dir, 'top_symbols.png'),
        )
    logger.info("Analytics report written to %s", out_dir)
